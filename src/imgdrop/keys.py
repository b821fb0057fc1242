"""Storage key generation."""

from __future__ import annotations

import secrets

from imgdrop.errors import InvalidFolder

KEY_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
PRIMARY_TOKEN_LENGTH = 8
SECONDARY_TOKEN_LENGTH = 6


def random_token(length: int = PRIMARY_TOKEN_LENGTH) -> str:
    """Draw `length` symbols from KEY_ALPHABET using a CSPRNG.

    Each random byte is reduced modulo 36, which slightly favours the first
    `256 % 36` symbols. Fine for uniqueness, not for secrets.
    """
    return "".join(KEY_ALPHABET[b % len(KEY_ALPHABET)] for b in secrets.token_bytes(length))


def normalize_folder(folder: str) -> str:
    """Strip surrounding slashes and reject folders that escape their prefix.

    Raises:
        InvalidFolder: For backslashes, `.`/`..` segments or empty segments
    """
    cleaned = folder.strip("/")
    if not cleaned:
        return ""
    if "\\" in cleaned:
        raise InvalidFolder(folder)
    parts = cleaned.split("/")
    if any(part in ("", ".", "..") for part in parts):
        raise InvalidFolder(folder)
    return cleaned


def generate_key(folder: str, extension: str) -> str:
    """Build `[folder/]<token8>-<token6>.<extension>`."""
    name = f"{random_token(PRIMARY_TOKEN_LENGTH)}-{random_token(SECONDARY_TOKEN_LENGTH)}.{extension}"
    prefix = normalize_folder(folder)
    if not prefix:
        return name
    return f"{prefix}/{name}"
