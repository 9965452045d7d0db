[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "procparse"
version = "0.17.0"
description = "Parsers for Linux /proc file formats: process stat, statm, io, memory maps, mounts, limits, pagemap entries, shared memory and uptime"
requires-python = ">=3.10"
dependencies = []
keywords = ["procfs", "proc", "linux", "process", "parser"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["procparse"]

[tool.pytest.ini_options]
addopts = "-ra"
