"""
Gravity - keeps tracked dotfiles mirrored onto their system locations

Source config files live in a repository; Gravity copies them to the home
directory and application config paths, and detects when either side has
been edited independently since the last sync.
"""

__version__ = "1.0.0"
__description__ = "Dotfile sync with three-way change detection"

from .core import (
    SyncManager,
    SyncOptions,
    SyncSummary,
    ChangeType,
    Workspace,
    GravityError,
    ManifestError,
    SyncIOError,
)
from .utils.logger import get_logger

# Version info
VERSION = __version__
VERSION_INFO = tuple(map(int, __version__.split('.')))

__all__ = [
    'SyncManager',
    'SyncOptions',
    'SyncSummary',
    'ChangeType',
    'Workspace',
    'GravityError',
    'ManifestError',
    'SyncIOError',
    'get_logger',
    'VERSION',
    'VERSION_INFO',
]
