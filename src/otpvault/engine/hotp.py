# src/otpvault/engine/hotp.py
"""HMAC-based one-time codes (RFC 4226)."""

import struct

from Crypto.Hash import HMAC, SHA1, SHA256, SHA512

from otpvault.common.models import Algorithm, SUPPORTED_DIGITS

_DIGEST_MODULES = {
    Algorithm.SHA1: SHA1,
    Algorithm.SHA256: SHA256,
    Algorithm.SHA512: SHA512,
}

_U64_MASK = (1 << 64) - 1


def counter_bytes(counter: int) -> bytes:
    """8-byte big-endian counter; wraps at 2**64."""
    return struct.pack(">Q", counter & _U64_MASK)


def dynamic_truncate(mac: bytes) -> int:
    """RFC 4226 §5.3: pick 4 bytes at the offset named by the low nibble of the last byte."""
    offset = mac[-1] & 0x0F
    return struct.unpack(">I", mac[offset:offset + 4])[0] & 0x7FFFFFFF


def hmac_digest(secret: bytes, message: bytes, algorithm: Algorithm) -> bytes:
    try:
        digestmod = _DIGEST_MODULES[algorithm]
    except (KeyError, TypeError):
        raise TypeError(f"unsupported HMAC algorithm: {algorithm!r}") from None
    return HMAC.new(secret, msg=message, digestmod=digestmod).digest()


def hotp(secret: bytes, counter: int, digits: int = 6, algorithm: Algorithm = Algorithm.SHA1) -> str:
    """
    Compute the HOTP value for `counter`.

    :param secret: raw key bytes (not base32 text)
    :param counter: moving factor
    :param digits: 6 or 8
    :param algorithm: digest used for the HMAC
    :return: zero-padded decimal code
    """
    if digits not in SUPPORTED_DIGITS:
        raise ValueError(f"digits must be 6 or 8, got {digits!r}")
    mac = hmac_digest(secret, counter_bytes(counter), algorithm)
    code = dynamic_truncate(mac) % (10 ** digits)
    return str(code).zfill(digits)
