# src/otpvault/common/settings.py
import os
from dataclasses import dataclass
from typing import Optional

EXPORT_FORMATS = ("md", "csv", "txt", "json")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {value!r}")
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got: {parsed}")
    return parsed


@dataclass(frozen=True)
class Settings:
    skew_window: int = 1
    future_count: int = 5
    export_format: str = "md"


def load_settings() -> Settings:
    export_format = (_env("OTPVAULT_EXPORT_FORMAT", "md") or "md").lower()
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"OTPVAULT_EXPORT_FORMAT must be one of {', '.join(EXPORT_FORMATS)}, got: {export_format!r}"
        )
    return Settings(
        skew_window=_env_int("OTPVAULT_SKEW_WINDOW", 1),
        future_count=_env_int("OTPVAULT_FUTURE_COUNT", 5, minimum=1),
        export_format=export_format,
    )
