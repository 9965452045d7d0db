"""System V shared memory segments from `/proc/sysvipc/shm`."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from procparse.errors import InternalError

# (name, bits, signed) in column order.
_COLUMNS = (
    ("key", 32, True),
    ("shmid", 64, False),
    ("perms", 16, False),
    ("size", 64, False),
    ("cpid", 32, True),
    ("lpid", 32, True),
    ("nattch", 32, False),
    ("uid", 16, False),
    ("gid", 16, False),
    ("cuid", 16, False),
    ("cgid", 16, False),
    ("atime", 64, False),
    ("dtime", 64, False),
    ("ctime", 64, False),
    ("rss", 64, False),
    ("swap", 64, False),
)


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


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass(frozen=True, order=True)
class Shm:
    """One shared memory segment.

    ``vsys`` memory mappings carry ``key``, and their inode is ``shmid``.
    """

    key: int
    shmid: int
    perms: int
    size: int
    cpid: int
    lpid: int
    nattch: int
    uid: int
    gid: int
    cuid: int
    cgid: int
    atime: int
    dtime: int
    ctime: int
    rss: int
    swap: int

    @classmethod
    def _from_line(cls, line: str) -> Shm:
        tokens = line.split()
        if len(tokens) < len(_COLUMNS):
            raise InternalError(f"missing field {_COLUMNS[len(tokens)][0]!r}")
        return cls(
            **{
                name: _parse_int(token, name, bits=bits, signed=signed)
                for (name, bits, signed), token in zip(_COLUMNS, tokens)
            }
        )


@dataclass
class SharedMemorySegments:
    """All segments listed in `/proc/sysvipc/shm`."""

    segments: list[Shm] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> SharedMemorySegments:
        """Parse the file contents; the first line is a header and is skipped."""
        return cls([Shm._from_line(line) for line in _lines(text)[1:]])

    def __iter__(self) -> Iterator[Shm]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> Shm:
        return self.segments[index]