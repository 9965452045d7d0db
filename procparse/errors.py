"""Exceptions raised while parsing procfs data."""


class ProcError(Exception):
    """Base class for every error raised by this package."""


class InternalError(ProcError):
    """The data did not have the shape the parser expected."""


class IncompleteError(ProcError):
    """The data ended early or a required piece was missing."""