import pytest

from procparse.errors import InternalError
from procparse.sysvipc_shm import SharedMemorySegments, Shm

HEADER = (
    "       key      shmid perms                  size  cpid  lpid nattch   uid   gid  "
    "cuid  cgid      atime      dtime      ctime                   rss                  swap\n"
)
ROW_A = (
    "         0          2   600                524288  1234  5678      2  1000  1000  "
    "1000  1000 1700000000 1700000001 1699999999                  4096                     0\n"
)
ROW_B = (
    "  -5000000         15  1600                  8192  4321  4321      0     0     0  "
    "   0     0          0          0 1699999000                     0                  8192\n"
)


def test_parse_rows():
    segments = SharedMemorySegments.from_text(HEADER + ROW_A + ROW_B)
    assert len(segments) == 2
    first = segments[0]
    assert first.key == 0
    assert first.shmid == 2
    assert first.perms == 600
    assert first.size == 524288
    assert (first.cpid, first.lpid, first.nattch) == (1234, 5678, 2)
    assert (first.uid, first.gid, first.cuid, first.cgid) == (1000, 1000, 1000, 1000)
    assert (first.atime, first.dtime, first.ctime) == (1700000000, 1700000001, 1699999999)
    assert (first.rss, first.swap) == (4096, 0)
    second = segments[1]
    assert second.key == -5000000
    assert second.swap == 8192


def test_iteration_order():
    segments = SharedMemorySegments.from_text(HEADER + ROW_A + ROW_B)
    assert [s.shmid for s in segments] == [2, 15]


def test_header_only_and_empty():
    assert len(SharedMemorySegments.from_text(HEADER)) == 0
    assert len(SharedMemorySegments.from_text("")) == 0


def test_ordering_by_key_first():
    segments = SharedMemorySegments.from_text(HEADER + ROW_A + ROW_B)
    assert [s.key for s in sorted(segments)] == [-5000000, 0]


def test_equal_rows_are_equal_and_hash_alike():
    a = SharedMemorySegments.from_text(HEADER + ROW_A)[0]
    b = SharedMemorySegments.from_text(HEADER + ROW_A)[0]
    assert a == b
    assert len({a, b}) == 1


def test_missing_field():
    row = " ".join(ROW_A.split()[:-1]) + "\n"
    with pytest.raises(InternalError):
        SharedMemorySegments.from_text(HEADER + row)


def test_perms_out_of_u16_range():
    fields = ROW_A.split()
    fields[2] = "70000"
    with pytest.raises(InternalError):
        SharedMemorySegments.from_text(HEADER + " ".join(fields) + "\n")


def test_negative_shmid_rejected():
    fields = ROW_A.split()
    fields[1] = "-2"
    with pytest.raises(InternalError):
        SharedMemorySegments.from_text(HEADER + " ".join(fields) + "\n")


def test_blank_line_is_an_error():
    with pytest.raises(InternalError):
        SharedMemorySegments.from_text(HEADER + "\n" + ROW_A)


def test_shm_fields_round_trip():
    segment = SharedMemorySegments.from_text(HEADER + ROW_B)[0]
    rebuilt = " ".join(
        str(getattr(segment, name))
        for name in Shm.__dataclass_fields__
    )
    assert SharedMemorySegments.from_text(HEADER + rebuilt)[0] == segment