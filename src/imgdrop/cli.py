"""CLI entrypoint for the imgdrop upload gateway."""

from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import fire  # type: ignore[import-untyped]

from imgdrop.app import Application, build_pipeline, create_store
from imgdrop.config import ConfigError, load_config
from imgdrop.errors import UploadPipelineError
from imgdrop.logging_setup import configure_logging
from imgdrop.models.upload import UploadResult


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for CLI."""
    configure_logging(log_level=level)


def _config_path(config: str | None) -> Path | None:
    return Path(config) if config else None


def encode_file(path: Path) -> str:
    """Encode a local file as a data URI, using its extension for the media type."""
    media_type, _ = mimetypes.guess_type(path.name)
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    if media_type is None:
        return encoded
    return f"data:{media_type};base64,{encoded}"


async def _upload_once(config_path: Path | None, encoded: str, folder: str) -> UploadResult:
    config = load_config(config_path)
    store = create_store(config)
    try:
        return await build_pipeline(config, store).upload(encoded, folder)
    finally:
        await store.shutdown()


class ImgDrop:
    """imgdrop CLI - inline image upload gateway."""

    def run(self, config: str | None = None, log_level: str = "INFO") -> None:
        """Run the upload server.

        Args:
            config: Optional YAML config file (defaults to R2_* environment variables)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)

        app = Application(_config_path(config))

        try:
            asyncio.run(app.run())
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)
        except KeyboardInterrupt:
            pass  # Handled by signal handlers

    def validate(self, config: str | None = None) -> None:
        """Validate configuration without running.

        Args:
            config: Optional YAML config file (defaults to R2_* environment variables)
        """
        try:
            cfg = load_config(_config_path(config))
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"✓ Config valid: {config or 'environment'}")
        print(f"  Storage backend: {cfg.storage.backend}")
        if cfg.storage.r2 is not None:
            print(f"  Endpoint: {cfg.storage.r2.resolved_endpoint_url}")
            print(f"  Bucket: {cfg.storage.r2.bucket}")
        if cfg.storage.public_base_url:
            print(f"  URLs: public ({cfg.storage.public_base_url})")
        else:
            print(f"  URLs: signed (ttl={cfg.storage.signed_url_ttl_s}s)")
        print(f"  Listen: {cfg.server.host}:{cfg.server.port}")
        print(f"  Max body bytes: {cfg.server.max_body_bytes}")

    def upload(
        self,
        path: str,
        folder: str = "",
        config: str | None = None,
        log_level: str = "WARNING",
    ) -> None:
        """Upload a local image through the same pipeline the server uses.

        Args:
            path: Image file to upload
            folder: Optional key prefix
            config: Optional YAML config file (defaults to R2_* environment variables)
            log_level: Logging level
        """
        setup_logging(log_level)

        file_path = Path(path)
        if not file_path.is_file():
            print(f"✗ File not found: {file_path}", file=sys.stderr)
            sys.exit(1)

        try:
            result = asyncio.run(_upload_once(_config_path(config), encode_file(file_path), folder))
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(1)
        except UploadPipelineError as e:
            print(f"✗ Upload failed: {e}", file=sys.stderr)
            sys.exit(1)

        print(json.dumps({"ok": True, **result.model_dump(mode="json", by_alias=True)}, indent=2))


def main() -> None:
    """Main CLI entrypoint."""
    # Strip --help/-h when it's the only arg so Fire shows its commands list
    if len(sys.argv) == 2 and sys.argv[1] in ("--help", "-h"):
        sys.argv.pop()
    fire.Fire(ImgDrop)


if __name__ == "__main__":
    main()
