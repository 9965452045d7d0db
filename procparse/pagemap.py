"""Page table entries from `/proc/<pid>/pagemap`."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_U64 = (1 << 64) - 1


def genmask(high: int, low: int) -> int:
    """Return a 64-bit mask with bits ``low`` to ``high`` (inclusive) set."""
    return (((1 << (high - low + 1)) - 1) << low) & _U64


MAX_SWAPFILES_SHIFT = 5

SWAP_TYPE_MASK = genmask(MAX_SWAPFILES_SHIFT - 1, 0)
SWAP_OFFSET_MASK = genmask(54, MAX_SWAPFILES_SHIFT)
PFN_MASK = genmask(54, 0)


@dataclass(frozen=True, order=True)
class Pfn:
    """A page frame number: the index of a physical memory page."""

    value: int

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __format__(self, spec: str) -> str:
        return format(self.value, spec)


class SwapPageFlags(enum.IntFlag):
    """Fields and flags of a page table entry for a swapped page."""

    SOFT_DIRTY = 1 << 55
    MMAP_EXCLUSIVE = 1 << 56
    FILE = 1 << 61
    SWAP = 1 << 62
    PRESENT = 1 << 63

    def swap_type(self) -> int:
        """Return the swap type recorded in this entry."""
        return int(self) & SWAP_TYPE_MASK

    def swap_offset(self) -> int:
        """Return the swap offset recorded in this entry."""
        return (int(self) & SWAP_OFFSET_MASK) >> MAX_SWAPFILES_SHIFT


class MemoryPageFlags(enum.IntFlag):
    """Fields and flags of a page table entry for a memory page."""

    SOFT_DIRTY = 1 << 55
    MMAP_EXCLUSIVE = 1 << 56
    FILE = 1 << 61
    SWAP = 1 << 62
    PRESENT = 1 << 63

    def page_frame_number(self) -> Pfn:
        """Return the page frame number recorded in this entry."""
        return Pfn(int(self) & PFN_MASK)


def parse_page_info(info: int) -> MemoryPageFlags | SwapPageFlags:
    """Decode a raw 64-bit pagemap entry into memory-page or swap-page flags."""
    info &= _U64
    if info & MemoryPageFlags.SWAP:
        return SwapPageFlags(info)
    return MemoryPageFlags(info)