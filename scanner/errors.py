"""Exceptions raised while building a link graph."""

from pathlib import Path
from typing import Optional


class MapdownError(Exception):
    """Base class for all mapdown errors."""


class ScanError(MapdownError):
    """
    A directory or document could not be listed, stat'ed or read.

    Fatal for the build that raised it: no partial graph is produced.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class InvalidLinkError(MapdownError, ValueError):
    """A link target could not be interpreted; only that link is skipped."""

    def __init__(self, target: str, reason: str):
        super().__init__(f"invalid link target {target!r}: {reason}")
        self.target = target
        self.reason = reason


class UnknownLabelError(MapdownError, KeyError):
    """A label was looked up before any node was resolved for it."""

    def __str__(self) -> str:
        return f"no node registered for label {self.args[0]!r}"
