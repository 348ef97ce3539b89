"""
Natrium Transport Encoding

Hex and base64 (standard and URL-safe, padded and unpadded) codecs for
keys, nonces, ciphertexts and signatures, with optional self-describing
prefixes:

    hex:9f86d081...
    base64:n4bQgY...==
    base64url:n4bQgY...

Decoding is lenient: a known prefix (or ``0x`` for hex) is stripped and
base64 input is accepted in either alphabet, with or without padding.
"""

import base64
import binascii
import enum
from typing import Optional

from .errors import EncodingError


HEX_PREFIX = "hex:"
BASE64_PREFIX = "base64:"
BASE64URL_PREFIX = "base64url:"

_BASE64_TO_URL = str.maketrans("+/", "-_")
_URL_TO_BASE64 = str.maketrans("-_", "+/")


class Encoding(enum.Enum):
    """Supported text encodings for binary values."""
    HEX = "hex"
    BASE64 = "base64"
    BASE64_NO_PADDING = "base64-nopad"
    BASE64_URL = "base64url"
    BASE64_URL_NO_PADDING = "base64url-nopad"

    @property
    def prefix(self) -> str:
        if self is Encoding.HEX:
            return HEX_PREFIX
        if self in (Encoding.BASE64_URL, Encoding.BASE64_URL_NO_PADDING):
            return BASE64URL_PREFIX
        return BASE64_PREFIX

    @property
    def padded(self) -> bool:
        return self in (Encoding.BASE64, Encoding.BASE64_URL)


DEFAULT_ENCODING = Encoding.BASE64_URL


def encode(data: bytes, encoding: Encoding = DEFAULT_ENCODING, prefix: bool = False) -> str:
    """
    Encode bytes as text.

    Args:
        data: Raw bytes
        encoding: Target encoding (default: padded base64url)
        prefix: Prepend the encoding's self-describing prefix

    Returns:
        str: Encoded text
    """
    data = bytes(data)
    if encoding is Encoding.HEX:
        text = data.hex()
    else:
        text = base64.b64encode(data).decode("ascii")
        if encoding in (Encoding.BASE64_URL, Encoding.BASE64_URL_NO_PADDING):
            text = text.translate(_BASE64_TO_URL)
        if not encoding.padded:
            text = text.rstrip("=")

    return encoding.prefix + text if prefix else text


def decode(text: str, encoding: Optional[Encoding] = None) -> bytes:
    """
    Decode text produced by :func:`encode` (or any compatible encoder).

    A recognised prefix always wins over ``encoding``. Without a prefix the
    text is decoded with ``encoding``, defaulting to base64url.

    Raises:
        EncodingError: If the text is not valid in the chosen encoding
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("ascii", errors="replace")
    text = text.strip()

    if text.startswith(HEX_PREFIX):
        return _decode_hex(text[len(HEX_PREFIX):])
    if text.startswith(BASE64URL_PREFIX):
        return _decode_base64(text[len(BASE64URL_PREFIX):])
    if text.startswith(BASE64_PREFIX):
        return _decode_base64(text[len(BASE64_PREFIX):])

    if encoding is Encoding.HEX:
        return _decode_hex(text)
    return _decode_base64(text)


def _decode_hex(text: str) -> bytes:
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise EncodingError("Invalid hex input")


def _decode_base64(text: str) -> bytes:
    text = text.translate(_URL_TO_BASE64).rstrip("=")
    if len(text) % 4 == 1:
        raise EncodingError("Invalid base64 input length")
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        raise EncodingError("Invalid base64 input")
