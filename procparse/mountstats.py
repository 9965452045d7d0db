"""Mount statistics from `/proc/<pid>/mountstats`."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from datetime import timedelta
from functools import reduce
from operator import or_
from pathlib import Path

from procparse.errors import InternalError

_U64_MAX = (1 << 64) - 1
_U32_MAX = (1 << 32) - 1


def _parse_u64(text: str) -> int:
    if not re.fullmatch(r"\+?[0-9]+", text):
        raise InternalError(f"invalid number: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise InternalError(f"number out of range: {text!r}")
    return value


def _parse_hex_u32(text: str) -> int:
    if not re.fullmatch(r"\+?[0-9a-fA-F]+", text):
        raise InternalError(f"invalid hex number: {text!r}")
    value = int(text, 16)
    if value > _U32_MAX:
        raise InternalError(f"number out of range: {text!r}")
    return value


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class NFSServerCaps(enum.IntFlag):
    """Capabilities of an NFS server (`include/linux/nfs_fs_sb.h`)."""

    NFS_CAP_READDIRPLUS = 1
    NFS_CAP_HARDLINKS = 1 << 1
    NFS_CAP_SYMLINKS = 1 << 2
    NFS_CAP_ACLS = 1 << 3
    NFS_CAP_ATOMIC_OPEN = 1 << 4
    NFS_CAP_LGOPEN = 1 << 5
    NFS_CAP_FILEID = 1 << 6
    NFS_CAP_MODE = 1 << 7
    NFS_CAP_NLINK = 1 << 8
    NFS_CAP_OWNER = 1 << 9
    NFS_CAP_OWNER_GROUP = 1 << 10
    NFS_CAP_ATIME = 1 << 11
    NFS_CAP_CTIME = 1 << 12
    NFS_CAP_MTIME = 1 << 13
    NFS_CAP_POSIX_LOCK = 1 << 14
    NFS_CAP_UIDGID_NOMAP = 1 << 15
    NFS_CAP_STATEID_NFSV41 = 1 << 16
    NFS_CAP_ATOMIC_OPEN_V1 = 1 << 17
    NFS_CAP_SECURITY_LABEL = 1 << 18
    NFS_CAP_SEEK = 1 << 19
    NFS_CAP_ALLOCATE = 1 << 20
    NFS_CAP_DEALLOCATE = 1 << 21
    NFS_CAP_LAYOUTSTATS = 1 << 22
    NFS_CAP_CLONE = 1 << 23
    NFS_CAP_COPY = 1 << 24
    NFS_CAP_OFFLOAD_CANCEL = 1 << 25


_KNOWN_CAPS = reduce(or_, (m.value for m in NFSServerCaps.__members__.values()), 0)


def _counters_from_str(cls, s: str):
    tokens = s.split()
    names = [f.name for f in fields(cls)]
    if len(tokens) < len(names):
        raise InternalError(f"missing field {names[len(tokens)]!r}")
    return cls(**{name: _parse_u64(token) for name, token in zip(names, tokens)})


@dataclass(frozen=True)
class NFSEventCounter:
    """The `events:` line of an NFS statistics block."""

    inode_revalidate: int
    dentry_revalidate: int
    data_invalidate: int
    attr_invalidate: int
    vfs_open: int
    vfs_lookup: int
    vfs_access: int
    vfs_update_page: int
    vfs_read_page: int
    vfs_read_pages: int
    vfs_write_page: int
    vfs_write_pages: int
    vfs_get_dents: int
    vfs_set_attr: int
    vfs_flush: int
    vfs_fs_sync: int
    vfs_lock: int
    vfs_release: int
    congestion_wait: int
    set_attr_trunc: int
    extend_write: int
    silly_rename: int
    short_read: int
    short_write: int
    delay: int
    pnfs_read: int
    pnfs_write: int

    @classmethod
    def from_str(cls, s: str) -> NFSEventCounter:
        """Parse the whitespace-separated counters after `events:`."""
        return _counters_from_str(cls, s)


@dataclass(frozen=True)
class NFSByteCounter:
    """The `bytes:` line of an NFS statistics block."""

    normal_read: int
    normal_write: int
    direct_read: int
    direct_write: int
    server_read: int
    server_write: int
    pages_read: int
    pages_write: int

    @classmethod
    def from_str(cls, s: str) -> NFSByteCounter:
        """Parse the whitespace-separated counters after `bytes:`."""
        return _counters_from_str(cls, s)


@dataclass(frozen=True)
class NFSOperationStat:
    """Per-operation RPC statistics of an NFS mount."""

    operations: int
    transmissions: int
    major_timeouts: int
    bytes_sent: int
    bytes_recv: int
    cum_queue_time: timedelta
    cum_resp_time: timedelta
    cum_total_req_time: timedelta

    @classmethod
    def from_str(cls, s: str) -> NFSOperationStat:
        """Parse the eight counters of a per-op line; times are in milliseconds."""
        tokens = s.split()
        if len(tokens) < 8:
            raise InternalError(f"incomplete per-op statistics: {s!r}")
        values = [_parse_u64(token) for token in tokens[:8]]
        return cls(
            operations=values[0],
            transmissions=values[1],
            major_timeouts=values[2],
            bytes_sent=values[3],
            bytes_recv=values[4],
            cum_queue_time=timedelta(milliseconds=values[5]),
            cum_resp_time=timedelta(milliseconds=values[6]),
            cum_total_req_time=timedelta(milliseconds=values[7]),
        )


def _require(value, what: str):
    if value is None:
        raise InternalError(f"Failed to find {what} in nfs stats")
    return value


@dataclass
class MountNFSStatistics:
    """Statistics that only NFS mounts report."""

    version: str
    opts: list[str]
    age: timedelta
    caps: list[str]
    sec: list[str]
    events: NFSEventCounter
    bytes: NFSByteCounter
    per_op_stats: dict[str, NFSOperationStat]

    @classmethod
    def _from_lines(cls, lines: Iterator[str], version: str) -> MountNFSStatistics:
        """Consume lines up to the next blank line."""
        opts = age = caps = sec = byte_counts = events = None
        per_op: dict[str, NFSOperationStat] = {}
        parsing_per_op = False

        for raw in lines:
            line = raw.strip()
            if not line:
                break
            if parsing_per_op:
                name, *rest = line.split(":")
                if not rest:
                    raise InternalError(f"malformed per-op line: {line!r}")
                per_op[name] = NFSOperationStat.from_str(rest[0])
                continue
            if line.startswith("opts:"):
                opts = line[len("opts:"):].strip().split(",")
            elif line.startswith("age:"):
                age = timedelta(seconds=_parse_u64(line[len("age:"):].strip()))
            elif line.startswith("caps:"):
                caps = line[len("caps:"):].strip().split(",")
            elif line.startswith("sec:"):
                sec = line[len("sec:"):].strip().split(",")
            elif line.startswith("bytes:"):
                byte_counts = NFSByteCounter.from_str(line[len("bytes:"):].strip())
            elif line.startswith("events:"):
                events = NFSEventCounter.from_str(line[len("events:"):].strip())
            if line == "per-op statistics":
                parsing_per_op = True

        return cls(
            version=version,
            opts=_require(opts, "opts field"),
            age=_require(age, "age field"),
            caps=_require(caps, "caps field"),
            sec=_require(sec, "sec field"),
            events=_require(events, "events section"),
            bytes=_require(byte_counts, "bytes section"),
            per_op_stats=per_op,
        )

    def server_caps(self) -> NFSServerCaps | None:
        """Decode the ``caps=0x...`` entry; None if absent or it has unknown bits."""
        for entry in self.caps:
            if entry.startswith("caps=0x"):
                value = _parse_hex_u32(entry[len("caps=0x"):])
                if value & ~_KNOWN_CAPS:
                    return None
                return NFSServerCaps(value)
        return None


@dataclass
class MountStat:
    """One mount listed in a mountstats file."""

    device: str | None
    mount_point: Path
    fs: str
    statistics: MountNFSStatistics | None = None


@dataclass
class MountStats:
    """All mounts listed in a mountstats file."""

    mounts: list[MountStat] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> MountStats:
        """Parse the contents of a mountstats file."""
        lines = iter(_lines(text))
        mounts: list[MountStat] = []
        for line in lines:
            if not line.startswith("device "):
                continue
            # device proc mounted on /proc with fstype proc
            words = line.split()
            if len(words) < 8:
                raise InternalError(f"incomplete device line: {line!r}")
            statistics = None
            if len(words) > 8 and words[8].startswith("statvers="):
                statistics = MountNFSStatistics._from_lines(lines, words[8][len("statvers="):])
            mounts.append(
                MountStat(
                    device=words[1],
                    mount_point=Path(words[4]),
                    fs=words[7],
                    statistics=statistics,
                )
            )
        return cls(mounts)

    def __iter__(self) -> Iterator[MountStat]:
        return iter(self.mounts)

    def __len__(self) -> int:
        return len(self.mounts)

    def __getitem__(self, index: int) -> MountStat:
        return self.mounts[index]