from __future__ import annotations

from pathlib import Path


class MarkupTreeError(Exception):
    """Base class for errors raised by markuptree."""


class ConfigurationError(MarkupTreeError, ValueError):
    """Invalid options, or a renderer missing for the requested output."""


class WriteError(MarkupTreeError):
    """One or more records could not be written.

    Every record is attempted; ``failures`` holds a ``(path, exception)`` pair
    for each one that failed, in tree order.
    """

    def __init__(self, failures: list[tuple[Path, BaseException]]):
        self.failures = failures
        paths = ", ".join(str(path) for path, _ in failures[:3])
        more = f" (+{len(failures) - 3} more)" if len(failures) > 3 else ""
        super().__init__(f"Failed to write {len(failures)} file(s): {paths}{more}")
