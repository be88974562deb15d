# src/otpvault/common/models.py
import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any

from otpvault.codec import base32
from otpvault.common.errors import InvalidCredential, InvalidSecret, UnknownAlgorithm

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30
SUPPORTED_DIGITS = (6, 8)


class Algorithm(Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["Algorithm"]:
        """Lookup by URI text ("sha256", "SHA-256"); None when unrecognised."""
        if not name:
            return None
        key = name.strip().upper().replace("-", "")
        return cls.__members__.get(key)

    @classmethod
    def from_migration_id(cls, value: int) -> "Algorithm":
        # 0 is "unspecified" in the export format and means SHA1
        mapping = {0: cls.SHA1, 1: cls.SHA1, 2: cls.SHA256, 3: cls.SHA512}
        try:
            return mapping[value]
        except KeyError:
            raise UnknownAlgorithm(f"unknown algorithm id {value} in export") from None


class OtpKind(Enum):
    TOTP = "totp"
    HOTP = "hotp"


@dataclass(frozen=True)
class Credential:
    # Display fields
    label: str                         # issuer / service name, e.g. "GitHub"
    secret: bytes                      # raw key material
    account: Optional[str] = None      # e.g. "alice@example.com"

    # Generator parameters
    algorithm: Algorithm = Algorithm.SHA1
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    kind: OtpKind = OtpKind.TOTP
    counter: Optional[int] = None      # HOTP only

    def __post_init__(self):
        label = (self.label or "").strip()
        if not label:
            raise InvalidCredential("label must not be empty")
        object.__setattr__(self, "label", label)

        if not isinstance(self.secret, (bytes, bytearray)) or not self.secret:
            raise InvalidCredential("secret must be non-empty bytes")
        object.__setattr__(self, "secret", bytes(self.secret))

        if not isinstance(self.algorithm, Algorithm):
            raise InvalidCredential(f"unsupported algorithm: {self.algorithm!r}")
        if not isinstance(self.kind, OtpKind):
            raise InvalidCredential(f"unsupported kind: {self.kind!r}")
        if self.digits not in SUPPORTED_DIGITS:
            raise InvalidCredential(f"digits must be 6 or 8, got {self.digits!r}")
        if self.kind is OtpKind.TOTP and (not isinstance(self.period, int) or self.period <= 0):
            raise InvalidCredential(f"period must be a positive integer, got {self.period!r}")

        if self.kind is OtpKind.HOTP:
            counter = 0 if self.counter is None else self.counter
            if not isinstance(counter, int) or not 0 <= counter < 2 ** 64:
                raise InvalidCredential(f"counter must fit in 64 bits, got {counter!r}")
            object.__setattr__(self, "counter", counter)
        elif self.counter is not None:
            raise InvalidCredential("counter is only meaningful for HOTP credentials")

    @classmethod
    def from_user_input(
        cls,
        label: str,
        secret_text: str,
        account: Optional[str] = None,
        **params: Any,
    ) -> "Credential":
        """Build a credential from a manually typed base32 secret."""
        cleaned = base32.normalize_secret_text(secret_text or "")
        if not base32.validate_secret_text(cleaned):
            raise InvalidSecret("secret is not valid base32 text")
        return cls(
            label=label,
            secret=base32.decode(cleaned),
            account=(account or "").strip() or None,
            **params,
        )

    @property
    def secret_b32(self) -> str:
        return base32.encode(self.secret)

    @property
    def display_name(self) -> str:
        if self.account:
            return f"{self.label} ({self.account})"
        return self.label

    def replace(self, **changes: Any) -> "Credential":
        """Return an updated copy; invariants are re-checked."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "label": self.label,
            "account": self.account or "",
            "secret": self.secret_b32,
            "algorithm": self.algorithm.value,
            "digits": self.digits,
            "period": self.period,
            "type": self.kind.value,
        }
        if self.kind is OtpKind.HOTP:
            data["counter"] = self.counter
        return data
