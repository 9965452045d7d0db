from pathlib import Path

import pytest

from procparse.errors import IncompleteError, InternalError, ProcError
from procparse.flags import MMPermissions, VmFlags
from procparse.memory_maps import (
    MemoryMap,
    MemoryMaps,
    MMapExtension,
    MMapKind,
    MMapPath,
    SmapsRollup,
)

SMAPS = (
    "00400000-00452000 r-xp 00001000 08:02 173521      /usr/bin/dbus-daemon\n"
    "Size:                  8 kB\n"
    "Rss:                   4 kB\n"
    "ProtectionKey:         0\n"
    "VmFlags: rd ex mr mw me dw\n"
    "7ffd2de27000-7ffd2de48000 rw-p 00000000 00:00 0                          [stack]\n"
)

ROLLUP = (
    "00400000-7fff0000 ---p 00000000 00:00 0                          [rollup]\n"
    "Rss:                 884 kB\n"
    "Pss:                 385 kB\n"
)


@pytest.mark.parametrize(
    "text, kind",
    [
        ("", MMapKind.ANONYMOUS),
        ("   ", MMapKind.ANONYMOUS),
        ("[heap]", MMapKind.HEAP),
        ("[stack]", MMapKind.STACK),
        ("[vdso]", MMapKind.VDSO),
        ("[vvar]", MMapKind.VVAR),
        ("[vsyscall]", MMapKind.VSYSCALL),
        ("[rollup]", MMapKind.ROLLUP),
    ],
)
def test_simple_paths(text, kind):
    parsed = MMapPath.parse(text)
    assert parsed.kind is kind
    assert parsed.value is None


def test_thread_stack():
    assert MMapPath.parse("[stack:1234]") == MMapPath(MMapKind.TSTACK, 1234)


def test_other_pseudo_path():
    assert MMapPath.parse("[vectors]") == MMapPath(MMapKind.OTHER, "vectors")


def test_sysv_segment_key():
    assert MMapPath.parse("/SYSV0000abcd (deleted)") == MMapPath(MMapKind.VSYS, 0xABCD)


def test_sysv_segment_key_is_signed():
    parsed = MMapPath.parse("/SYSVffffffff (deleted)")
    assert parsed.kind is MMapKind.VSYS
    assert parsed.value == -1


def test_file_path():
    parsed = MMapPath.parse("  /usr/lib/libc.so.6\n")
    assert parsed == MMapPath(MMapKind.PATH, Path("/usr/lib/libc.so.6"))


@pytest.mark.parametrize("text", ["/SYSV12", "[stack:abc]", "/SYSVzzzzzzzz"])
def test_bad_paths(text):
    with pytest.raises(InternalError):
        MMapPath.parse(text)


def test_memory_map_from_line():
    mm = MemoryMap.from_line(
        "00400000-00452000 r-xp 00001000 08:02 173521      /usr/bin/dbus-daemon"
    )
    assert mm.address == (0x00400000, 0x00452000)
    assert mm.perms == MMPermissions.from_str("r-xp")
    assert mm.offset == 0x1000
    assert mm.dev == (0x08, 0x02)
    assert mm.inode == 173521
    assert mm.pathname == MMapPath(MMapKind.PATH, Path("/usr/bin/dbus-daemon"))
    assert mm.extension.is_empty()


def test_anonymous_line():
    mm = MemoryMap.from_line("7f0000000000-7f0000001000 rw-p 00000000 00:00 0 ")
    assert mm.pathname.kind is MMapKind.ANONYMOUS
    assert mm.inode == 0
    assert mm.perms.as_str() == "rw-p"


@pytest.mark.parametrize(
    "line",
    [
        "00400000-00452000 r-xp 00001000 08:02",
        "00400000 r-xp 00001000 08:02 1 /bin/x",
        "00400000-00452000 r-xp 00001000 08:02 abc /bin/x",
    ],
)
def test_bad_memory_map_lines(line):
    with pytest.raises(InternalError):
        MemoryMap.from_line(line)


def test_extension_is_empty_reflects_contents():
    assert MMapExtension().is_empty()
    assert not MMapExtension(vm_flags=VmFlags.RD).is_empty()
    assert not MMapExtension(map={"Rss": 1}).is_empty()


def test_smaps_parsing():
    maps = MemoryMaps.from_text(SMAPS)
    assert len(maps) == 2
    assert [m.pathname.kind for m in maps] == [MMapKind.PATH, MMapKind.STACK]

    ext = maps[0].extension
    assert ext.map["Size"] == 8 * 1024
    assert ext.map["Rss"] == 4 * 1024
    assert ext.map["ProtectionKey"] == 0
    assert ext.vm_flags == (
        VmFlags.RD | VmFlags.EX | VmFlags.MR | VmFlags.MW | VmFlags.ME | VmFlags.DW
    )
    assert maps[1].extension.is_empty()


def test_maps_round_trip_of_permissions():
    maps = MemoryMaps.from_text(SMAPS)
    assert [m.perms.as_str() for m in maps] == ["r-xp", "rw-p"]


def test_empty_text():
    assert len(MemoryMaps.from_text("")) == 0
    assert list(MemoryMaps.from_text("")) == []


def test_attribute_before_mapping():
    with pytest.raises(IncompleteError):
        MemoryMaps.from_text("Rss: 4 kB\n")


def test_non_numeric_attribute():
    text = "00400000-00452000 r-xp 00001000 08:02 173521 /bin/x\nRss: many kB\n"
    with pytest.raises(ProcError, match="not actually a number"):
        MemoryMaps.from_text(text)


def test_smaps_rollup():
    rollup = SmapsRollup.from_text(ROLLUP)
    maps = rollup.memory_map_rollup
    assert len(maps) == 1
    assert maps[0].pathname.kind is MMapKind.ROLLUP
    assert maps[0].extension.map["Rss"] == 884 * 1024
    assert maps[0].extension.map["Pss"] == 385 * 1024