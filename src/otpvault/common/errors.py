# src/otpvault/common/errors.py


class OtpVaultError(Exception):
    """Root of every error raised by otpvault."""


class InvalidCredential(OtpVaultError, ValueError):
    """A Credential was built with values that break its invariants."""


class ParseError(OtpVaultError, ValueError):
    """
    Recoverable failure while decoding user supplied text or bytes.

    `kind` is a stable identifier the caller can show or branch on.
    """

    kind = "ParseError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidEncoding(ParseError):
    kind = "InvalidEncoding"


class MissingSecret(ParseError):
    kind = "MissingSecret"


class InvalidSecret(ParseError):
    kind = "InvalidSecret"


class UnsupportedScheme(ParseError):
    kind = "UnsupportedScheme"


class UnsupportedKind(ParseError):
    kind = "UnsupportedKind"


class Truncated(ParseError):
    kind = "Truncated"


class UnknownAlgorithm(ParseError):
    kind = "UnknownAlgorithm"


class InvalidPayload(ParseError):
    # Undecodable base64, reserved wire types, unsupported enum values
    kind = "InvalidPayload"


class EmptyExport(ParseError):
    kind = "EmptyExport"
