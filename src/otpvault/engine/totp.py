# src/otpvault/engine/totp.py
"""
Time-based one-time codes (RFC 6238) on top of the HOTP primitive.

Every function takes the current time as an argument. `now=None` falls back
to the system clock, which only the outermost caller should rely on.
`TotpEngine` bundles the same operations around an injectable clock.
"""

import hmac
import time
from typing import Callable, List, NamedTuple, Optional

from otpvault.common.models import Credential, OtpKind
from otpvault.engine.hotp import hotp

Clock = Callable[[], float]


class FutureCode(NamedTuple):
    code: str
    timestamp: Optional[int]  # start of the step; None for HOTP credentials


class CodeDisplay(NamedTuple):
    code: str
    time_remaining: float
    progress: float  # 0.0 at the start of a step, approaching 1.0 at its end


def counter_for(time_seconds: float, period: int) -> int:
    return int(time_seconds // period)


def _now(now: Optional[float]) -> float:
    return time.time() if now is None else now


def _code_for_counter(cred: Credential, counter: int) -> str:
    return hotp(cred.secret, counter, cred.digits, cred.algorithm)


def current_counter(cred: Credential, now: Optional[float] = None) -> int:
    if cred.kind is OtpKind.HOTP:
        return cred.counter
    return counter_for(_now(now), cred.period)


def current(cred: Credential, now: Optional[float] = None) -> str:
    """Code valid at `now` (or at the stored counter for HOTP credentials)."""
    return _code_for_counter(cred, current_counter(cred, now))


def at(cred: Credential, timestamp: float) -> str:
    """Code for an arbitrary timestamp, regardless of the credential kind."""
    return _code_for_counter(cred, counter_for(timestamp, cred.period))


def future_codes(cred: Credential, now: Optional[float] = None, count: int = 5) -> List[FutureCode]:
    """
    The next `count` codes after the current one.

    Each TOTP entry carries the timestamp at which it becomes valid, always a
    multiple of the period. HOTP entries follow the stored counter instead.
    """
    if cred.kind is OtpKind.HOTP:
        return [FutureCode(_code_for_counter(cred, cred.counter + i), None) for i in range(1, count + 1)]

    base = counter_for(_now(now), cred.period)
    codes = []
    for i in range(1, count + 1):
        timestamp = (base + i) * cred.period
        codes.append(FutureCode(at(cred, timestamp), timestamp))
    return codes


def verify(cred: Credential, candidate: str, now: Optional[float] = None, skew_window: int = 1) -> bool:
    """
    Check `candidate` against every step within `skew_window` of the current one.

    Whitespace in the candidate is ignored so "123 456" matches "123456".
    """
    if candidate is None or skew_window < 0:
        return False
    wanted = "".join(candidate.split()).encode("utf-8")
    center = current_counter(cred, now)
    matched = False
    for counter in range(max(center - skew_window, 0), center + skew_window + 1):
        expected = _code_for_counter(cred, counter).encode("utf-8")
        # No early exit, so timing does not reveal which step matched
        if hmac.compare_digest(expected, wanted):
            matched = True
    return matched


def time_remaining(period: int, now: Optional[float] = None) -> float:
    """Seconds until the current step ends, in (0, period]; fractional for fractional `now`."""
    return period - _now(now) % period


def progress_fraction(period: int, now: Optional[float] = None) -> float:
    return (period - time_remaining(period, now)) / period


def display(cred: Credential, now: Optional[float] = None) -> CodeDisplay:
    """Snapshot for a refreshing display: code, countdown and progress."""
    now = _now(now)
    return CodeDisplay(
        code=current(cred, now),
        time_remaining=time_remaining(cred.period, now),
        progress=progress_fraction(cred.period, now),
    )


def format_code(code: str) -> str:
    """Split a code in two halves for readability: "123 456", "1234 5678"."""
    if len(code) in (6, 8):
        half = len(code) // 2
        return f"{code[:half]} {code[half:]}"
    return code


class TotpEngine:
    """Stateless engine bound to a clock, for callers that inject time."""

    def __init__(self, clock: Clock = time.time):
        self.clock = clock

    def _resolve(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def current(self, cred: Credential, now: Optional[float] = None) -> str:
        return current(cred, self._resolve(now))

    def at(self, cred: Credential, timestamp: float) -> str:
        return at(cred, timestamp)

    def future_codes(self, cred: Credential, count: int = 5, now: Optional[float] = None) -> List[FutureCode]:
        return future_codes(cred, self._resolve(now), count)

    def verify(self, cred: Credential, candidate: str, skew_window: int = 1, now: Optional[float] = None) -> bool:
        return verify(cred, candidate, self._resolve(now), skew_window)

    def display(self, cred: Credential, now: Optional[float] = None) -> CodeDisplay:
        return display(cred, self._resolve(now))
