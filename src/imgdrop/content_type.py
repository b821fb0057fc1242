"""Content type and storage extension resolution."""

from __future__ import annotations

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_EXTENSION = "png"

# Only these may appear as a stored key suffix, whatever the caller declares.
ALLOWED_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "webp"})

# Built-in tables only; host files such as /etc/mime.types are not read.
_MIME_TYPES = mimetypes.MimeTypes()

_KNOWN_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
    "image/webp": "webp",
}


def resolve(declared_type: str) -> tuple[str, str]:
    """Return `(content_type, extension)` for a declared media type.

    The content type is passed through untouched (or defaults to
    `application/octet-stream`); only the extension is clamped to the
    allow-list, falling back to `png`.
    """
    content_type = declared_type or DEFAULT_CONTENT_TYPE
    extension = extension_for(content_type)
    if extension not in ALLOWED_EXTENSIONS:
        extension = DEFAULT_EXTENSION
    return content_type, extension


def extension_for(content_type: str) -> str | None:
    """Map a media type to its canonical extension, without the leading dot."""
    normalized = content_type.split(";", 1)[0].strip().lower()
    known = _KNOWN_EXTENSIONS.get(normalized)
    if known is not None:
        return known
    guessed = _MIME_TYPES.guess_extension(normalized, strict=False)
    if guessed is None:
        return None
    return guessed.lstrip(".")
