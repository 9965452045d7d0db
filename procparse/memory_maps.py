"""Memory mappings from `/proc/<pid>/maps`, `smaps` and `smaps_rollup`."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import reduce
from operator import or_
from pathlib import Path

from procparse.errors import IncompleteError, InternalError, ProcError
from procparse.flags import MMPermissions, VmFlags


def _parse_int(text: str, *, radix: int = 10, bits: int = 64, signed: bool = False) -> int:
    """Parse an integer strictly, within the range of a fixed-width integer."""
    digits = "0-9a-fA-F" if radix == 16 else "0-9"
    sign = "[+-]?" if signed else r"\+?"
    if not re.fullmatch(f"{sign}[{digits}]+", text):
        raise InternalError(f"invalid number: {text!r}")
    value = int(text, radix)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise InternalError(f"number out of range: {text!r}")
    return value


def _split_pair(text: str, sep: str, *, radix: int, bits: int, signed: bool) -> tuple[int, int]:
    first, found, second = text.partition(sep)
    if not found:
        raise InternalError(f"expected {sep!r} in {text!r}")
    return (
        _parse_int(first, radix=radix, bits=bits, signed=signed),
        _parse_int(second, radix=radix, bits=bits, signed=signed),
    )


class MMapKind(enum.Enum):
    """What backs a memory mapping."""

    PATH = "path"
    HEAP = "heap"
    STACK = "stack"
    TSTACK = "tstack"
    VDSO = "vdso"
    VVAR = "vvar"
    VSYSCALL = "vsyscall"
    ROLLUP = "rollup"
    ANONYMOUS = "anonymous"
    VSYS = "vsys"
    OTHER = "other"


_SIMPLE_PATHS = {
    "": MMapKind.ANONYMOUS,
    "[heap]": MMapKind.HEAP,
    "[stack]": MMapKind.STACK,
    "[vdso]": MMapKind.VDSO,
    "[vvar]": MMapKind.VVAR,
    "[vsyscall]": MMapKind.VSYSCALL,
    "[rollup]": MMapKind.ROLLUP,
}


@dataclass(frozen=True)
class MMapPath:
    """The pathname column of a mapping.

    ``value`` holds a :class:`Path` for PATH, the thread id for TSTACK, the
    shared memory key for VSYS, the pseudo-path name for OTHER, and None
    otherwise.
    """

    kind: MMapKind
    value: Path | int | str | None = None

    @classmethod
    def parse(cls, path: str) -> MMapPath:
        """Classify a pathname as found in a maps file."""
        x = path.strip()
        simple = _SIMPLE_PATHS.get(x)
        if simple is not None:
            return cls(simple)
        if x.startswith("[stack:"):
            parts = x[1:-1].split(":")
            if len(parts) < 2:
                raise InternalError(f"missing thread id in {x!r}")
            return cls(MMapKind.TSTACK, _parse_int(parts[1], bits=32))
        if x.startswith("[") and x.endswith("]"):
            return cls(MMapKind.OTHER, x[1:-1])
        if x.startswith("/SYSV"):
            # /SYSVaabbccdd (deleted): a 32-bit signed key in hex
            if len(x) < 13:
                raise InternalError(f"truncated SysV segment name {x!r}")
            key = _parse_int(x[5:13], radix=16, bits=32)
            if key >= 1 << 31:
                key -= 1 << 32
            return cls(MMapKind.VSYS, key)
        return cls(MMapKind.PATH, Path(x))


@dataclass
class MMapExtension:
    """Extra per-mapping data from `smaps`; sizes are in bytes."""

    map: dict[str, int] = field(default_factory=dict)
    vm_flags: VmFlags = VmFlags.NONE

    def is_empty(self) -> bool:
        """Return whether no extension data was recorded."""
        return not self.map and self.vm_flags == VmFlags.NONE


@dataclass
class MemoryMap:
    """One mapping from a maps or smaps file."""

    address: tuple[int, int]
    perms: MMPermissions
    offset: int
    dev: tuple[int, int]
    inode: int
    pathname: MMapPath
    extension: MMapExtension = field(default_factory=MMapExtension)

    @classmethod
    def from_line(cls, line: str) -> MemoryMap:
        """Parse a single mapping line."""
        parts = line.split(" ", 5)
        if len(parts) < 6:
            raise InternalError(f"incomplete memory map line: {line!r}")
        address, perms, offset, dev, inode, path = parts
        return cls(
            address=_split_pair(address, "-", radix=16, bits=64, signed=False),
            perms=MMPermissions.from_str(perms),
            offset=_parse_int(offset, radix=16),
            dev=_split_pair(dev, ":", radix=16, bits=32, signed=True),
            inode=_parse_int(inode),
            pathname=MMapPath.parse(path),
        )


def _apply_attribute(mm: MemoryMap, line: str) -> None:
    if line.startswith("VmFlags"):
        flags = line.split()[1:]
        mm.extension.vm_flags = reduce(or_, map(VmFlags.from_flag, flags), VmFlags.NONE)
        return
    parts = line.split()
    if len(parts) < 2:
        return
    key, value = parts[0], parts[1]
    # Only "kB" has been seen as a suffix in practice.
    multiplier = 1024 if len(parts) > 2 else 1
    try:
        number = _parse_int(value)
    except InternalError:
        raise ProcError("Value in `Key: Value` pair was not actually a number") from None
    mm.extension.map[key.rstrip(":")] = number * multiplier


@dataclass
class MemoryMaps:
    """All entries of a maps, smaps or smaps_rollup file."""

    maps: list[MemoryMap] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> MemoryMaps:
        """Parse the contents of a maps, smaps or smaps_rollup file."""
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        maps: list[MemoryMap] = []
        current: MemoryMap | None = None
        for line in lines:
            first = line[:1]
            if first.isascii() and first.isupper():
                if current is None:
                    raise IncompleteError(f"attribute before any mapping: {line!r}")
                _apply_attribute(current, line)
            else:
                if current is not None:
                    maps.append(current)
                current = MemoryMap.from_line(line)
        if current is not None:
            maps.append(current)
        return cls(maps)

    def __iter__(self) -> Iterator[MemoryMap]:
        return iter(self.maps)

    def __len__(self) -> int:
        return len(self.maps)

    def __getitem__(self, index: int) -> MemoryMap:
        return self.maps[index]


@dataclass
class SmapsRollup:
    """Summed memory statistics from `/proc/<pid>/smaps_rollup`."""

    memory_map_rollup: MemoryMaps

    @classmethod
    def from_text(cls, text: str) -> SmapsRollup:
        """Parse the contents of an smaps_rollup file."""
        return cls(MemoryMaps.from_text(text))