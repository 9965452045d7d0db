"""Mount information from `/proc/<pid>/mountinfo`."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from procparse.errors import InternalError


def _parse_int(text: str, *, bits: int, signed: bool) -> int:
    sign = "[+-]?" if signed else r"\+?"
    if not re.fullmatch(f"{sign}[0-9]+", text):
        raise InternalError(f"invalid number: {text!r}")
    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise InternalError(f"number out of range: {text!r}")
    return value


def _take(fields: Iterator[str], what: str) -> str:
    try:
        return next(fields)
    except StopIteration:
        raise InternalError(f"missing {what}") from None


def _parse_options(text: str) -> dict[str, str | None]:
    options: dict[str, str | None] = {}
    for opt in text.split(","):
        name, sep, value = opt.partition("=")
        options[name] = value if sep else None
    return options


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class MountOptKind(enum.Enum):
    """Kind of an optional propagation field."""

    SHARED = "shared"
    MASTER = "master"
    PROPAGATE_FROM = "propagate_from"
    UNBINDABLE = "unbindable"


@dataclass(frozen=True)
class MountOptField:
    """An optional field of a mountinfo line; ``value`` is the peer group id."""

    kind: MountOptKind
    value: int | None = None


@dataclass
class MountInfo:
    """One mount in a process's mount namespace."""

    mnt_id: int
    pid: int
    majmin: str
    root: str
    mount_point: Path
    mount_options: dict[str, str | None]
    opt_fields: list[MountOptField]
    fs_type: str
    mount_source: str | None
    super_options: dict[str, str | None]

    @classmethod
    def from_line(cls, line: str) -> MountInfo:
        """Parse one line of a mountinfo file."""
        fields = iter(line.split())
        mnt_id = _parse_int(_take(fields, "mount id"), bits=32, signed=True)
        pid = _parse_int(_take(fields, "parent id"), bits=32, signed=True)
        majmin = _take(fields, "major:minor")
        root = _take(fields, "root")
        mount_point = Path(_take(fields, "mount point"))
        mount_options = _parse_options(_take(fields, "mount options"))

        opt_fields: list[MountOptField] = []
        while (item := _take(fields, "optional fields separator")) != "-":
            name, *rest = item.split(":")
            try:
                kind = MountOptKind(name)
            except ValueError:
                continue
            if kind is MountOptKind.UNBINDABLE:
                opt_fields.append(MountOptField(kind))
                continue
            if not rest:
                raise InternalError(f"missing value in optional field {item!r}")
            opt_fields.append(MountOptField(kind, _parse_int(rest[0], bits=32, signed=False)))

        fs_type = _take(fields, "filesystem type")
        source = _take(fields, "mount source")
        super_options = _parse_options(_take(fields, "super options"))

        return cls(
            mnt_id=mnt_id,
            pid=pid,
            majmin=majmin,
            root=root,
            mount_point=mount_point,
            mount_options=mount_options,
            opt_fields=opt_fields,
            fs_type=fs_type,
            mount_source=None if source == "none" else source,
            super_options=super_options,
        )


@dataclass
class MountInfos:
    """All mounts listed in a mountinfo file."""

    mounts: list[MountInfo] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> MountInfos:
        """Parse the contents of a mountinfo file."""
        return cls([MountInfo.from_line(line) for line in _lines(text)])

    def __iter__(self) -> Iterator[MountInfo]:
        return iter(self.mounts)

    def __len__(self) -> int:
        return len(self.mounts)

    def __getitem__(self, index: int) -> MountInfo:
        return self.mounts[index]