"""Small per-process files: `io`, fd link targets, `statm` and `schedstat`."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, fields
from pathlib import Path

from procparse.errors import IncompleteError, InternalError

_U64_MAX = (1 << 64) - 1


def _parse_u64(text: str) -> int:
    if not re.fullmatch(r"\+?[0-9]+", text):
        raise InternalError(f"invalid number: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise InternalError(f"number out of range: {text!r}")
    return value


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _counters_from_text(cls, text: str):
    """Build a dataclass whose fields are whitespace-separated u64 values, in order."""
    tokens = text.split()
    names = [f.name for f in fields(cls)]
    if len(tokens) < len(names):
        raise InternalError(f"missing field {names[len(tokens)]!r}")
    return cls(**{name: _parse_u64(token) for name, token in zip(names, tokens)})


@dataclass(frozen=True)
class Io:
    """I/O statistics of a process, from `/proc/<pid>/io`."""

    rchar: int
    wchar: int
    syscr: int
    syscw: int
    read_bytes: int
    write_bytes: int
    cancelled_write_bytes: int

    @classmethod
    def from_text(cls, text: str) -> Io:
        """Parse the contents of an io file."""
        values: dict[str, int] = {}
        for line in _lines(text):
            if not line or " " not in line:
                continue
            parts = line.split()
            if len(parts) < 2:
                raise InternalError(f"malformed io line: {line!r}")
            name, value = parts[0], parts[1]
            values[name[:-1]] = _parse_u64(value)

        kwargs = {}
        for f in fields(cls):
            if f.name not in values:
                raise InternalError(f"missing field {f.name!r}")
            kwargs[f.name] = values[f.name]
        return cls(**kwargs)


class FDKind(enum.Enum):
    """What a file descriptor refers to."""

    PATH = "path"
    SOCKET = "socket"
    NET = "net"
    PIPE = "pipe"
    ANON_INODE = "anon_inode"
    MEMFD = "memfd"
    OTHER = "other"


_INODE_KINDS = {
    "socket": FDKind.SOCKET,
    "net": FDKind.NET,
    "pipe": FDKind.PIPE,
}


def _bracketed_inode(text: str) -> int:
    if len(text) <= 2:
        raise IncompleteError(f"missing inode in {text!r}")
    return _parse_u64(text[1:-1])


@dataclass(frozen=True)
class FDTarget:
    """The target of a file descriptor link in `/proc/<pid>/fd`.

    ``value`` is a :class:`Path` for PATH, and the name for ANON_INODE, MEMFD
    and OTHER. ``inode`` is set for SOCKET, NET, PIPE and OTHER.
    """

    kind: FDKind
    value: Path | str | None = None
    inode: int | None = None

    @classmethod
    def parse(cls, s: str) -> FDTarget:
        """Classify the text a file descriptor link points at."""
        if not s.startswith("/") and ":" in s:
            parts = s.split(":")
            fd_type, arg = parts[0], parts[1]
            kind = _INODE_KINDS.get(fd_type)
            if kind is not None:
                return cls(kind, inode=_bracketed_inode(arg))
            if fd_type == "anon_inode":
                return cls(FDKind.ANON_INODE, value=arg)
            if fd_type == "":
                raise IncompleteError(f"missing descriptor type in {s!r}")
            return cls(FDKind.OTHER, value=fd_type, inode=_bracketed_inode(arg))
        if s.startswith("/memfd:"):
            return cls(FDKind.MEMFD, value=s[len("/memfd:"):])
        return cls(FDKind.PATH, value=Path(s))


@dataclass(frozen=True)
class StatM:
    """Memory usage of a process in pages, from `/proc/<pid>/statm`."""

    size: int
    resident: int
    shared: int
    text: int
    lib: int
    data: int
    dt: int

    @classmethod
    def from_text(cls, text: str) -> StatM:
        """Parse the contents of a statm file."""
        return _counters_from_text(cls, text)


@dataclass(frozen=True)
class Schedstat:
    """Scheduler statistics of a process, from `/proc/<pid>/schedstat`.

    Times are in nanoseconds.
    """

    sum_exec_runtime: int
    run_delay: int
    pcount: int

    @classmethod
    def from_text(cls, text: str) -> Schedstat:
        """Parse the contents of a schedstat file."""
        return _counters_from_text(cls, text)