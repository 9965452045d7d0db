"""Process status from `/proc/<pid>/stat`."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import reduce
from operator import or_

from procparse.errors import InternalError
from procparse.flags import ProcState, StatFlags

# (name, bits, signed) for the fields after the state letter, in file order.
_REQUIRED = (
    ("ppid", 32, True),
    ("pgrp", 32, True),
    ("session", 32, True),
    ("tty_nr", 32, True),
    ("tpgid", 32, True),
    ("flags", 32, False),
    ("minflt", 64, False),
    ("cminflt", 64, False),
    ("majflt", 64, False),
    ("cmajflt", 64, False),
    ("utime", 64, False),
    ("stime", 64, False),
    ("cutime", 64, True),
    ("cstime", 64, True),
    ("priority", 64, True),
    ("nice", 64, True),
    ("num_threads", 64, True),
    ("itrealvalue", 64, True),
    ("starttime", 64, False),
    ("vsize", 64, False),
    ("rss", 64, False),
    ("rsslim", 64, False),
    ("startcode", 64, False),
    ("endcode", 64, False),
    ("startstack", 64, False),
    ("kstkesp", 64, False),
    ("kstkeip", 64, False),
    ("signal", 64, False),
    ("blocked", 64, False),
    ("sigignore", 64, False),
    ("sigcatch", 64, False),
    ("wchan", 64, False),
    ("nswap", 64, False),
    ("cnswap", 64, False),
)

# Fields added in later kernels; absent ones become None.
_OPTIONAL = (
    ("exit_signal", 32, True),
    ("processor", 32, True),
    ("rt_priority", 32, False),
    ("policy", 32, False),
    ("delayacct_blkio_ticks", 64, False),
    ("guest_time", 64, False),
    ("cguest_time", 64, True),
    ("start_data", 64, False),
    ("end_data", 64, False),
    ("start_brk", 64, False),
    ("arg_start", 64, False),
    ("arg_end", 64, False),
    ("env_start", 64, False),
    ("env_end", 64, False),
    ("exit_code", 32, True),
)

_KNOWN_FLAGS = reduce(or_, (m.value for m in StatFlags.__members__.values()), 0)


def _parse_int(text: str, name: str, *, bits: int, signed: bool) -> int:
    sign = "[+-]?" if signed else r"\+?"
    if not re.fullmatch(f"{sign}[0-9]+", text):
        raise InternalError(f"invalid value for {name}: {text!r}")
    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise InternalError(f"value for {name} out of range: {text!r}")
    return value


def _take(tokens: Iterator[str], name: str) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise InternalError(f"missing field {name!r}") from None


@dataclass
class Stat:
    """Status information about a process.

    Fields introduced by newer kernels are None when the kernel does not
    report them.
    """

    pid: int
    comm: str
    state: str
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    flags: int
    minflt: int
    cminflt: int
    majflt: int
    cmajflt: int
    utime: int
    stime: int
    cutime: int
    cstime: int
    priority: int
    nice: int
    num_threads: int
    itrealvalue: int
    starttime: int
    vsize: int
    rss: int
    rsslim: int
    startcode: int
    endcode: int
    startstack: int
    kstkesp: int
    kstkeip: int
    signal: int
    blocked: int
    sigignore: int
    sigcatch: int
    wchan: int
    nswap: int
    cnswap: int
    exit_signal: int | None
    processor: int | None
    rt_priority: int | None
    policy: int | None
    delayacct_blkio_ticks: int | None
    guest_time: int | None
    cguest_time: int | None
    start_data: int | None
    end_data: int | None
    start_brk: int | None
    arg_start: int | None
    arg_end: int | None
    env_start: int | None
    env_end: int | None
    exit_code: int | None

    @classmethod
    def from_text(cls, text: str | bytes) -> Stat:
        """Parse the contents of a stat file.

        Bytes are decoded as UTF-8, with invalid sequences replaced.
        """
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("utf-8", errors="replace")
        buf = text.strip()

        start = buf.find("(")
        end = buf.rfind(")")
        if start < 1 or end < start or end + 2 > len(buf):
            raise InternalError(f"malformed stat line: {buf!r}")

        pid = _parse_int(buf[: start - 1], "pid", bits=32, signed=True)
        comm = buf[start + 1 : end]
        tokens = iter(buf[end + 2 :].split(" "))

        state_token = _take(tokens, "state")
        if not state_token:
            raise InternalError("missing field 'state'")

        values: dict[str, int | None] = {}
        for name, bits, signed in _REQUIRED:
            values[name] = _parse_int(_take(tokens, name), name, bits=bits, signed=signed)
        for name, bits, signed in _OPTIONAL:
            token = next(tokens, None)
            values[name] = (
                None if token is None else _parse_int(token, name, bits=bits, signed=signed)
            )

        return cls(pid=pid, comm=comm, state=state_token[0], **values)

    def proc_state(self) -> ProcState:
        """Return the state letter as a :class:`ProcState`."""
        state = ProcState.from_char(self.state)
        if state is None:
            raise InternalError(f"{self.state!r} is not a recognized process state")
        return state

    def tty_device(self) -> tuple[int, int]:
        """Decode ``tty_nr`` into a (major, minor) pair."""
        # minor is bits 31-20 and 7-0, major is bits 15-8
        major = (self.tty_nr & 0xFFF00) >> 8
        minor = (self.tty_nr & 0x000FF) | ((self.tty_nr >> 12) & 0xFFF00)
        return major, minor

    def stat_flags(self) -> StatFlags:
        """Return the kernel flags word as :class:`StatFlags`."""
        if self.flags & ~_KNOWN_FLAGS:
            raise InternalError(f"Can't construct flags bitfield from {self.flags!r}")
        return StatFlags(self.flags)

    def rss_bytes(self, page_size: int) -> int:
        """Return the resident set size in bytes."""
        return self.rss * page_size

    def start_datetime(self, boot_time: datetime, ticks_per_second: int) -> datetime:
        """Return the moment the process started, given the boot time and clock rate."""
        seconds_since_boot = self.starttime / ticks_per_second
        return boot_time + timedelta(milliseconds=int(seconds_since_boot * 1000.0))