# src/otpvault/codec/base32.py
"""
RFC 4648 Base32 codec for shared secrets.

Authenticator apps print secrets without the trailing '=' padding and users
type them in any case, so decoding is padding- and case-tolerant. Encoding
always emits the unpadded uppercase form.
"""

import re

from otpvault.common.errors import InvalidEncoding

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_LOOKUP = {ch: idx for idx, ch in enumerate(ALPHABET)}
_SECRET_TEXT_RE = re.compile(r"^[A-Z2-7]+=*$")
_WHITESPACE_RE = re.compile(r"\s+")


def decode(text: str) -> bytes:
    """
    Decode base32 text into raw bytes.

    Trailing '=' padding is ignored and lowercase letters are accepted.
    Leftover bits that do not fill a whole byte are discarded.

    :raises InvalidEncoding: on any character outside A-Z / 2-7.
    """
    body = text.rstrip("=")
    out = bytearray()
    buffer = 0
    bits = 0
    for pos, ch in enumerate(body):
        value = _LOOKUP.get(ch.upper())
        if value is None:
            raise InvalidEncoding(f"invalid base32 character {ch!r} at position {pos}")
        buffer = (buffer << 5) | value
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
    return bytes(out)


def encode(data: bytes) -> str:
    """Encode bytes as unpadded uppercase base32."""
    chars = []
    buffer = 0
    bits = 0
    for byte in data:
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            chars.append(ALPHABET[(buffer >> bits) & 0x1F])
    if bits:
        # Final partial group: shift zero bits into the low end
        chars.append(ALPHABET[(buffer << (5 - bits)) & 0x1F])
    return "".join(chars)


def normalize_secret_text(text: str) -> str:
    """Remove whitespace and upper-case a hand-typed secret."""
    return _WHITESPACE_RE.sub("", text).upper()


def validate_secret_text(text: str) -> bool:
    """
    Cheap syntax check for a secret typed by a user.

    Spaces are allowed (apps often group secrets in blocks of four) and case
    is ignored; padding may only appear at the end.
    """
    if not text:
        return False
    return bool(_SECRET_TEXT_RE.match(normalize_secret_text(text)))
