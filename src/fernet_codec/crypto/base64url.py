"""URL-safe base64 with padding stripped on output and restored on input."""

from __future__ import annotations

import base64
import binascii

__all__ = ["Base64DecodeError", "decode_b64url", "encode_b64url"]

_TO_URLSAFE = bytes.maketrans(b"+/", b"-_")
_FROM_URLSAFE = bytes.maketrans(b"-_", b"+/")
_PAD = b"="


class Base64DecodeError(ValueError):
    """Raised when text cannot be decoded as base64url."""


def encode_b64url(data: bytes) -> str:
    """Encode bytes as base64url text without ``=`` padding."""
    return base64.b64encode(data).translate(_TO_URLSAFE).rstrip(_PAD).decode("ascii")


def decode_b64url(text: str | bytes) -> bytes:
    """Decode base64url text, with or without trailing padding.

    Args:
        text: Encoded value. ``str`` input must be ASCII.

    Returns:
        The decoded bytes

    Raises:
        Base64DecodeError: If a character is outside the alphabet or the
            padded length still does not decode

    """
    if isinstance(text, str):
        try:
            raw = text.encode("ascii")
        except UnicodeEncodeError as e:
            msg = "base64url text must be ASCII"
            raise Base64DecodeError(msg) from e
    else:
        raw = bytes(text)

    standard = raw.translate(_FROM_URLSAFE)
    standard += _PAD * (-len(standard) % 4)
    try:
        return base64.b64decode(standard, validate=True)
    except binascii.Error as e:
        msg = f"Invalid base64url data: {e}"
        raise Base64DecodeError(msg) from e
