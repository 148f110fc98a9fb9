"""
Exception types raised by the Gravity core.

Read-side I/O problems while classifying are not errors: a file that cannot
be read is simply treated as absent.
"""

from pathlib import Path
from typing import Optional


class GravityError(Exception):
    """Base class for all Gravity errors."""
    pass


class ManifestError(GravityError):
    """The manifest is missing, unparsable or structurally invalid."""
    pass


class UnknownEntryError(GravityError):
    """A config key was requested that the manifest does not define."""

    def __init__(self, key: str):
        super().__init__(f"Config '{key}' is not defined in the manifest")
        self.key = key


class SyncIOError(GravityError):
    """Writing a file or the sync state failed."""

    def __init__(self, message: str, key: Optional[str] = None, path: Optional[Path] = None):
        super().__init__(message)
        self.key = key
        self.path = path
