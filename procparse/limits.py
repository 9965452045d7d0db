"""Resource limits of a process from `/proc/<pid>/limits`."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields

from procparse.errors import InternalError

_U64_MAX = (1 << 64) - 1

# These two limits have no units column.
_UNITLESS = ("Max nice priority", "Max realtime priority")


def parse_limit_value(s: str) -> int | None:
    """Parse one limit value; ``unlimited`` gives None."""
    if s == "unlimited":
        return None
    if not re.fullmatch(r"\+?[0-9]+", s) or int(s) > _U64_MAX:
        raise InternalError(f"invalid limit value: {s!r}")
    return int(s)


@dataclass(frozen=True)
class Limit:
    """A soft and a hard limit; None means unlimited."""

    soft_limit: int | None
    hard_limit: int | None


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _parse_line(line: str) -> tuple[str, str, str]:
    """Return (name, soft, hard) from one limits line."""
    words = line.split()
    if line.startswith(_UNITLESS):
        if len(words) < 3:
            raise InternalError(f"incomplete limits line: {line!r}")
        return " ".join(words[:-2]), words[-2], words[-1]
    if len(words) < 4:
        raise InternalError(f"incomplete limits line: {line!r}")
    return " ".join(words[:-3]), words[-3], words[-2]


@dataclass(frozen=True)
class Limits:
    """All resource limits of a process; see getrlimit(2) for their meaning."""

    max_cpu_time: Limit
    max_file_size: Limit
    max_data_size: Limit
    max_stack_size: Limit
    max_core_file_size: Limit
    max_resident_set: Limit
    max_processes: Limit
    max_open_files: Limit
    max_locked_memory: Limit
    max_address_space: Limit
    max_file_locks: Limit
    max_pending_signals: Limit
    max_msgqueue_size: Limit
    max_nice_priority: Limit
    max_realtime_priority: Limit
    max_realtime_timeout: Limit

    @classmethod
    def from_text(cls, text: str) -> Limits:
        """Parse the contents of a limits file."""
        pairs: dict[str, tuple[str, str]] = {}
        for raw in _lines(text):
            line = raw.strip()
            if line.startswith("Limit"):
                continue
            name, soft, hard = _parse_line(line)
            pairs[name] = (soft, hard)

        kwargs = {}
        for f in fields(cls):
            label = f.name.replace("_", " ").capitalize()
            if label not in pairs:
                raise InternalError(f"missing limit {label!r}")
            soft, hard = pairs[label]
            kwargs[f.name] = Limit(parse_limit_value(soft), parse_limit_value(hard))
        return cls(**kwargs)