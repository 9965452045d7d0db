"""System uptime from `/proc/uptime`."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta

from procparse.errors import InternalError


def _parse_float(token: str | None) -> float:
    if token is None or not token or token != token.strip() or "_" in token:
        raise InternalError(f"invalid number: {token!r}")
    try:
        return float(token)
    except ValueError:
        raise InternalError(f"invalid number: {token!r}") from None


def _to_duration(seconds: float) -> timedelta:
    """Convert to a duration with centisecond precision."""
    whole = max(0, math.trunc(seconds))
    centis = max(0, math.floor((seconds - math.trunc(seconds)) * 100.0 + 0.5))
    return timedelta(seconds=whole, microseconds=centis * 10_000)


@dataclass(frozen=True)
class Uptime:
    """Seconds since boot (including suspend) and summed idle time of all cores."""

    uptime: float
    idle: float

    @classmethod
    def from_text(cls, text: str | bytes) -> Uptime:
        """Parse the contents of an uptime file.

        Bytes are decoded as UTF-8, with invalid sequences replaced.
        """
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        tokens = iter(text.strip().split(" "))
        uptime = _parse_float(next(tokens, None))
        idle = _parse_float(next(tokens, None))
        return cls(uptime=uptime, idle=idle)

    def uptime_duration(self) -> timedelta:
        """The uptime as a duration."""
        return _to_duration(self.uptime)

    def idle_duration(self) -> timedelta:
        """The idle time as a duration."""
        return _to_duration(self.idle)