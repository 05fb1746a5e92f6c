"""Exception hierarchy shared by the filtering engine and its front ends."""

from __future__ import annotations


class LinepickError(Exception):
    """Base class for every error raised by linepick."""


class OutOfRangeError(LinepickError, IndexError):
    """A row position fell outside the current buffer bounds."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"index {index} out of range (size {size})")
        self.index = index
        self.size = size


class DuplicateFilterError(LinepickError):
    def __init__(self, name: str) -> None:
        super().__init__(f"filter {name!r} already registered")
        self.name = name


class UnknownFilterError(LinepickError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown filter: {name!r}")
        self.name = name


class ExternalFilterError(LinepickError):
    """An external filter command could not be run or failed."""


class ConfigError(LinepickError):
    """The rc file or command-line settings are unusable."""


class SignalReceived(LinepickError):
    def __init__(self, signum: int) -> None:
        super().__init__(f"received signal {signum}")
        self.signum = signum


class InternalError(LinepickError):
    """A background loop died with an unexpected exception."""
