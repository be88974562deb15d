# src/otpvault/importer/uri.py

from typing import Dict, Optional, Tuple
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

from otpvault.codec import base32
from otpvault.common.errors import (
    InvalidEncoding,
    InvalidSecret,
    MissingSecret,
    UnsupportedKind,
    UnsupportedScheme,
)
from otpvault.common.models import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    SUPPORTED_DIGITS,
    Algorithm,
    Credential,
    OtpKind,
)

SCHEME = "otpauth"
FALLBACK_LABEL = "Unknown"


def _first(params: Dict[str, list], name: str) -> Optional[str]:
    values = params.get(name)
    if not values:
        return None
    return values[0].strip()


def _int_or(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _decode_secret(text: Optional[str]) -> bytes:
    if not text:
        raise MissingSecret("the 'secret' parameter is required")
    try:
        secret = base32.decode(base32.normalize_secret_text(text))
    except InvalidEncoding as e:
        raise InvalidSecret(e.message) from e
    if not secret:
        raise InvalidSecret("secret decodes to zero bytes")
    return secret


def _split_path(raw_path: str, issuer: Optional[str]) -> Tuple[str, str]:
    """
    Split the URI path into (label, account).

    A literal ':' is the separator and each side is unquoted on its own, so
    an encoded '%3A' inside the label survives. Paths with only an encoded
    separator are split after unquoting, unless the whole path is the issuer.
    """
    if ":" in raw_path:
        label, account = raw_path.split(":", 1)
        return unquote(label).strip(), unquote(account).strip()

    path = unquote(raw_path).strip()
    if ":" in path and path != issuer:
        label, account = path.split(":", 1)
        return label.strip(), account.strip()
    return path, ""


def parse_credential_uri(text: str) -> Credential:
    """
    Parse an `otpauth://{totp|hotp}/[issuer:]account?secret=...` URI.

    Only the secret is mandatory. Missing or unreadable algorithm, digits
    and period fall back to SHA1 / 6 / 30; the URI is hand-written often
    enough that being lenient there is preferable to rejecting it.
    """
    parsed = urlparse((text or "").strip())
    if parsed.scheme.lower() != SCHEME:
        raise UnsupportedScheme(f"expected an '{SCHEME}://' URI, got scheme '{parsed.scheme}'")

    try:
        kind = OtpKind(parsed.netloc.lower())
    except ValueError:
        raise UnsupportedKind(f"unsupported OTP type '{parsed.netloc}'") from None

    params = parse_qs(parsed.query, keep_blank_values=True)
    secret = _decode_secret(_first(params, "secret"))

    issuer = _first(params, "issuer")
    label, account = _split_path(parsed.path.lstrip("/"), issuer)
    label = label or issuer or FALLBACK_LABEL

    algorithm = Algorithm.from_name(_first(params, "algorithm")) or Algorithm.SHA1

    digits = _int_or(_first(params, "digits"), DEFAULT_DIGITS)
    if digits not in SUPPORTED_DIGITS:
        digits = DEFAULT_DIGITS

    period = _int_or(_first(params, "period"), DEFAULT_PERIOD)
    if period <= 0:
        period = DEFAULT_PERIOD

    counter = None
    if kind is OtpKind.HOTP:
        counter = _int_or(_first(params, "counter"), 0)
        if not 0 <= counter < 2 ** 64:
            counter = 0

    return Credential(
        label=label,
        account=account or None,
        secret=secret,
        algorithm=algorithm,
        digits=digits,
        period=period,
        kind=kind,
        counter=counter,
    )


def build_credential_uri(cred: Credential) -> str:
    """Inverse of `parse_credential_uri`, suitable for other authenticator apps."""
    path = quote(cred.label, safe="")
    if cred.account:
        path = f"{path}:{quote(cred.account, safe='@')}"

    query = {
        "secret": cred.secret_b32,
        "issuer": cred.label,
        "algorithm": cred.algorithm.value,
        "digits": cred.digits,
    }
    if cred.kind is OtpKind.HOTP:
        query["counter"] = cred.counter
    else:
        query["period"] = cred.period
    return f"{SCHEME}://{cred.kind.value}/{path}?{urlencode(query, quote_via=quote)}"
