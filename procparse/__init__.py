"""Parsers for Linux /proc file formats: stat, statm, io, maps, mounts, limits, pagemap, shm and uptime."""

__version__ = "0.17.0"