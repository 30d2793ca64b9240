"""Exceptions raised by tabload itself.

Parser and I/O errors come straight from pandas, requests and the OS; only
the registry lookup and the snapshot envelope check have their own types.
"""
from typing import List, Optional


class TabloadError(Exception):
    """Base class for tabload errors."""


class DatasetNotFoundError(TabloadError, KeyError):
    """Raised when a bundled dataset name is not in the registry."""

    def __init__(self, name: str, suggestions: Optional[List[str]] = None):
        self.name = name
        self.suggestions = list(suggestions or [])
        message = f"data set '{name}' not found"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class SnapshotFormatError(TabloadError, ValueError):
    """Raised when a snapshot file does not have the expected shape."""
