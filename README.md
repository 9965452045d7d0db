# procparse

Parsers for the text and binary formats found under Linux `/proc`. Each parser
takes data you have already read, usually the contents of a `/proc` file as a
string, and gives back plain Python objects: dataclasses, enums, flags,
`pathlib.Path` and `datetime.timedelta` values.

## Installation

```
pip install procparse
```

Python 3.10 or newer is needed. The package has no dependencies.

## What it covers

| Data | Entry point |
| --- | --- |
| `/proc/<pid>/stat` | `procparse.stat.Stat.from_text` |
| `/proc/<pid>/statm` | `procparse.process_files.StatM.from_text` |
| `/proc/<pid>/io` | `procparse.process_files.Io.from_text` |
| `/proc/<pid>/schedstat` | `procparse.process_files.Schedstat.from_text` |
| `/proc/<pid>/fd/*` link targets | `procparse.process_files.FDTarget.parse` |
| `/proc/<pid>/maps` and `smaps` | `procparse.memory_maps.MemoryMaps.from_text` |
| `/proc/<pid>/smaps_rollup` | `procparse.memory_maps.SmapsRollup.from_text` |
| `/proc/<pid>/mountinfo` | `procparse.mountinfo.MountInfos.from_text` |
| `/proc/<pid>/mountstats` | `procparse.mountstats.MountStats.from_text` |
| `/proc/<pid>/limits` | `procparse.limits.Limits.from_text` |
| `/proc/<pid>/pagemap` entries | `procparse.pagemap.parse_page_info` |
| `/proc/sysvipc/shm` | `procparse.sysvipc_shm.SharedMemorySegments.from_text` |
| `/proc/uptime` | `procparse.uptime.Uptime.from_text` |

`procparse.flags` holds the flag and state types the parsers use:
`StatFlags`, `CoredumpFlags`, `MMPermissions`, `VmFlags` and `ProcState`.

## Examples

Process state and memory:

```python
from pathlib import Path
from procparse.stat import Stat

stat = Stat.from_text(Path("/proc/self/stat").read_bytes())
print(stat.pid, stat.comm, stat.proc_state())
print("rss bytes:", stat.rss_bytes(4096))
major, minor = stat.tty_device()
```

`Stat.from_text` and `Uptime.from_text` accept either `str` or `bytes`; bytes
are decoded as UTF-8 with invalid sequences replaced.

Memory maps:

```python
from procparse.memory_maps import MemoryMaps, MMapKind

maps = MemoryMaps.from_text(Path("/proc/self/smaps").read_text())
for mapping in maps:
    start, end = mapping.address
    if mapping.pathname.kind is MMapKind.PATH:
        print(hex(start), hex(end), mapping.perms.as_str(), mapping.pathname.value)
```

Sizes in the `smaps` extension (`mapping.extension.map`) are given in bytes.

Limits:

```python
from procparse.limits import Limits

limits = Limits.from_text(Path("/proc/self/limits").read_text())
print(limits.max_open_files.soft_limit)   # None means unlimited
```

File descriptor targets:

```python
from procparse.process_files import FDTarget, FDKind

target = FDTarget.parse("socket:[12345]")
assert target.kind is FDKind.SOCKET and target.inode == 12345
```

Uptime:

```python
from procparse.uptime import Uptime

up = Uptime.from_text("2578790.61 1999230.98\n")
print(up.uptime_duration())   # a datetime.timedelta
```

Page table entries:

```python
from procparse.pagemap import parse_page_info, MemoryPageFlags

info = parse_page_info(0x8180000000000003)
if isinstance(info, MemoryPageFlags):
    print(info.page_frame_number())   # Pfn(value=3)
```

## Errors

Malformed input raises `procparse.errors.ProcError` or one of its subclasses:
`InternalError` when a field cannot be understood and `IncompleteError` when
the data stops early or a required piece is missing.

## What it does not do

The package never reads `/proc` itself: it does not list processes, open
files or follow file descriptor links. Reading the data is left to you, which
also lets you parse data captured on another machine. It has no parsers for
`/proc/<pid>/status`, `/proc/<pid>/ns`, the `/proc/sys/kernel` files or
`clear_refs` values, and it has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```