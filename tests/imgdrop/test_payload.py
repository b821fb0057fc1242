"""Tests for inline payload decoding."""

from __future__ import annotations

import base64

import pytest

from imgdrop.errors import InvalidPayload
from imgdrop.payload import decode

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestDecodeValidInput:
    """Accepted encodings."""

    def test_data_uri_captures_declared_type(self) -> None:
        # Given: A data URI carrying the PNG signature
        encoded = "data:image/png;base64,iVBORw0KGgo="

        # When: Decoding
        decoded = decode(encoded)

        # Then: Bytes and declared type are recovered
        assert decoded.data == PNG_SIGNATURE
        assert decoded.declared_type == "image/png"
        assert decoded.size == 8

    def test_plain_base64_has_empty_declared_type(self) -> None:
        # Given: Plain base64 without a prefix
        # When: Decoding
        decoded = decode("iVBORw0KGgo=")

        # Then: Declared type is empty
        assert decoded.data == PNG_SIGNATURE
        assert decoded.declared_type == ""

    def test_line_wrapped_input_is_accepted(self) -> None:
        # Given: Encoded text wrapped with newlines, spaces and tabs
        encoded = "data:image/jpeg;base64,iVBO\nRw0K\r\n Ggo=\t"

        # When: Decoding
        decoded = decode(encoded)

        # Then: Whitespace is ignored
        assert decoded.data == PNG_SIGNATURE
        assert decoded.declared_type == "image/jpeg"

    def test_declared_type_case_is_preserved(self) -> None:
        decoded = decode("data:IMAGE/WebP;base64,AA==")

        assert decoded.declared_type == "IMAGE/WebP"
        assert decoded.data == b"\x00"

    @pytest.mark.parametrize(
        "raw",
        [
            b"x",
            b"\x00\xff\xfe\x01",
            bytes(range(256)),
        ],
    )
    def test_decode_recovers_encoded_bytes(self, raw: bytes) -> None:
        # Given: Standard base64 of arbitrary bytes, with and without a prefix
        encoded = base64.b64encode(raw).decode("ascii")

        # When / Then: Both forms decode to the original bytes
        assert decode(encoded).data == raw
        assert decode(f"data:application/octet-stream;base64,{encoded}").data == raw

    @pytest.mark.parametrize("raw", [PNG_SIGNATURE, b"ab", b"abcd"])
    def test_unpadded_input_is_completed(self, raw: bytes) -> None:
        # Given: A data URI whose trailing padding was stripped
        encoded = base64.b64encode(raw).decode("ascii").rstrip("=")

        # When: Decoding
        decoded = decode(f"data:image/png;base64,{encoded}")

        # Then: The original bytes are recovered
        assert decoded.data == raw
        assert decoded.declared_type == "image/png"


class TestDecodeRejectsInput:
    """Inputs that must raise InvalidPayload."""

    @pytest.mark.parametrize("value", ["", None, 123, b"iVBORw0KGgo="])
    def test_empty_or_non_string_input(self, value: object) -> None:
        with pytest.raises(InvalidPayload, match="empty input"):
            decode(value)

    @pytest.mark.parametrize(
        "value",
        [
            "not-base64-@@@",
            "iVBORw0KGgo=!",
            "data:image/png;base64,",
            "data:image/png;charset=utf-8;base64,iVBORw0KGgo=",
            "QQ==QQ==",
            "====",
            "   ",
        ],
    )
    def test_characters_outside_alphabet(self, value: str) -> None:
        with pytest.raises(InvalidPayload, match="invalid encoding"):
            decode(value)

    @pytest.mark.parametrize("value", ["QQ=", "QUJDR", "QUJD=", "A==="])
    def test_malformed_padding_is_not_guessed(self, value: str) -> None:
        # Given: Text in the base64 alphabet with a truncated or overlong final group
        # When / Then: Decoding fails instead of silently truncating
        with pytest.raises(InvalidPayload, match="invalid encoding"):
            decode(value)

    def test_error_reports_decode_stage(self) -> None:
        with pytest.raises(InvalidPayload) as exc_info:
            decode("@@@")

        assert exc_info.value.stage == "decode"
