"""Inline payload decoding (plain base64 or `data:<type>;base64,` URIs)."""

from __future__ import annotations

import binascii
import re

from imgdrop.errors import InvalidPayload
from imgdrop.models.upload import DecodedPayload

_DATA_URI_RE = re.compile(r"^data:([a-zA-Z0-9+\-_./]+);base64,(.+)$", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+=*$")


def decode(value: object) -> DecodedPayload:
    """Decode an inline payload into bytes and its declared media type.

    Whitespace anywhere in the encoded text is ignored so line-wrapped input
    is accepted, and omitted trailing `=` padding is restored. A final group of
    one character or misplaced padding is rejected instead of silently dropped.

    Raises:
        InvalidPayload: If the input is empty or not valid base64
    """
    if not isinstance(value, str) or not value:
        raise InvalidPayload("empty input")

    encoded = value
    declared_type = ""
    match = _DATA_URI_RE.match(value)
    if match:
        declared_type = match.group(1)
        encoded = match.group(2)

    encoded = _WHITESPACE_RE.sub("", encoded)
    if not _BASE64_RE.match(encoded):
        raise InvalidPayload("invalid encoding")
    encoded = _complete_padding(encoded)

    try:
        data = binascii.a2b_base64(encoded, strict_mode=True)
    except binascii.Error as exc:
        raise InvalidPayload("invalid encoding", cause=exc) from exc

    return DecodedPayload(data=data, declared_type=declared_type)


def _complete_padding(encoded: str) -> str:
    """Restore omitted `=` padding, rejecting groups that cannot be decoded."""
    remainder = len(encoded) % 4
    if "=" in encoded:
        if remainder or len(encoded) - len(encoded.rstrip("=")) > 2:
            raise InvalidPayload("invalid encoding")
        return encoded
    if remainder == 1:
        raise InvalidPayload("invalid encoding")
    return encoded + "=" * (-len(encoded) % 4)
