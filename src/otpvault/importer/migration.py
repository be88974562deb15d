# src/otpvault/importer/migration.py
"""
Decoder for authenticator "transfer accounts" exports
(`otpauth-migration://offline?data=<base64 protobuf>`).

Payload layout, as observed in exports:

    payload:  1 = entry (repeated, length-delimited)   others ignored
    entry:    1 = secret (bytes)      2 = name ("issuer:account" or label)
              3 = issuer              4 = algorithm (1 SHA1, 2 SHA256, 3 SHA512)
              5 = digits (1 six, 2 eight)   6 = type (1 HOTP, else TOTP)
              7 = counter (HOTP)
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from otpvault.codec import protobuf
from otpvault.codec.protobuf import WIRE_LENGTH_DELIMITED, WIRE_VARINT
from otpvault.common.errors import EmptyExport, InvalidPayload, UnsupportedScheme
from otpvault.common.models import DEFAULT_PERIOD, Algorithm, Credential, OtpKind
from otpvault.importer.uri import SCHEME as URI_SCHEME, parse_credential_uri

logger = logging.getLogger(__name__)

SCHEME = "otpauth-migration"

# Digits are sent as an enum; literal counts are accepted too
_DIGITS_MAP = {0: 6, 1: 6, 2: 8, 6: 6, 8: 8}
_TYPE_HOTP = 1


@dataclass
class DecodeStats:
    entries: int = 0
    decoded: int = 0
    dropped: int = 0


@dataclass
class _EntryFields:
    secret: bytes = b""
    name: str = ""
    issuer: str = ""
    algorithm: int = 0
    digits: int = 0
    otp_type: int = 0
    counter: int = 0


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").strip()


def _split_label(name: str, issuer: str) -> Tuple[str, Optional[str]]:
    """Resolve (label, account) from the combined name and the issuer override."""
    if ":" in name:
        prefix, account = (part.strip() for part in name.split(":", 1))
    elif issuer:
        # A bare name next to an explicit issuer is the account
        prefix, account = "", name
    else:
        prefix, account = name, ""
    return issuer or prefix, account or None


def _read_entry(buf: bytes) -> _EntryFields:
    fields = _EntryFields()
    for number, wire_type, value in protobuf.iter_fields(buf):
        if wire_type == WIRE_LENGTH_DELIMITED:
            if number == 1:
                fields.secret = value
            elif number == 2:
                fields.name = _text(value)
            elif number == 3:
                fields.issuer = _text(value)
        elif wire_type == WIRE_VARINT:
            if number == 4:
                fields.algorithm = value
            elif number == 5:
                fields.digits = value
            elif number == 6:
                fields.otp_type = value
            elif number == 7:
                fields.counter = value
        # Anything else (unknown numbers, unexpected wire types) was skipped by the reader
    return fields


def _build_credential(fields: _EntryFields) -> Optional[Credential]:
    label, account = _split_label(fields.name, fields.issuer)
    if not fields.secret or not label:
        return None

    algorithm = Algorithm.from_migration_id(fields.algorithm)
    try:
        digits = _DIGITS_MAP[fields.digits]
    except KeyError:
        raise InvalidPayload(f"unsupported digit count id {fields.digits}") from None

    kind = OtpKind.HOTP if fields.otp_type == _TYPE_HOTP else OtpKind.TOTP
    return Credential(
        label=label,
        account=account,
        secret=fields.secret,
        algorithm=algorithm,
        digits=digits,
        period=DEFAULT_PERIOD,
        kind=kind,
        counter=fields.counter if kind is OtpKind.HOTP else None,
    )


def decode_payload(payload: bytes, stats: Optional[DecodeStats] = None) -> List[Credential]:
    """
    Decode the binary payload into credentials.

    Entries missing a secret or a name are dropped; any structural error
    (truncation, reserved wire type, unknown algorithm) fails the whole call.
    """
    stats = stats if stats is not None else DecodeStats()
    credentials = []
    pos = 0
    while pos < len(payload):
        number, wire_type, value_pos = protobuf.read_tag(payload, pos)
        if number == 1 and wire_type == WIRE_LENGTH_DELIMITED:
            entry, next_pos = protobuf.read_length_delimited(payload, value_pos)
            stats.entries += 1
            cred = _build_credential(_read_entry(entry))
            if cred is None:
                stats.dropped += 1
            else:
                credentials.append(cred)
        else:
            next_pos = protobuf.skip_field(payload, value_pos, wire_type)
        if next_pos <= pos:
            break
        pos = next_pos

    stats.decoded = len(credentials)
    if stats.dropped:
        logger.warning(
            "Dropped %d of %d export entries without a secret or name",
            stats.dropped, stats.entries,
        )
    return credentials


def _decode_data_param(data: str) -> bytes:
    # Query parsing turns '+' into ' '; scanners also tend to drop padding
    data = data.strip().replace(" ", "+").replace("-", "+").replace("_", "/")
    missing_padding = len(data) % 4
    if missing_padding:
        data += "=" * (4 - missing_padding)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayload(f"'data' parameter is not valid base64: {e}") from e


def parse_migration_export(text: str, stats: Optional[DecodeStats] = None) -> List[Credential]:
    """
    Parse an export URI into credentials.

    A plain `otpauth://` URI is accepted as well and yields one credential.
    """
    text = (text or "").strip()
    parsed = urlparse(text)
    scheme = parsed.scheme.lower()
    if scheme == URI_SCHEME:
        return [parse_credential_uri(text)]
    if scheme != SCHEME:
        raise UnsupportedScheme(f"expected '{SCHEME}://' or '{URI_SCHEME}://', got scheme '{parsed.scheme}'")

    data = parse_qs(parsed.query).get("data")
    if not data or not data[0].strip():
        raise InvalidPayload("export URI has no 'data' parameter")

    credentials = decode_payload(_decode_data_param(data[0]), stats)
    if not credentials:
        raise EmptyExport("no usable accounts found in export")
    logger.debug("Decoded %d accounts from export", len(credentials))
    return credentials
