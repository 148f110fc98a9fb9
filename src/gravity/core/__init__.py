"""
Core modules for Gravity.

This package contains manifest loading, the persisted sync state, three-way
change classification and sync execution.
"""

from .errors import GravityError, ManifestError, SyncIOError, UnknownEntryError
from .workspace import Workspace, default_root
from .manifest import ManifestLoader, Manifest, ConfigEntry
from .state import StateStore, SyncState, SyncRecord
from .resolver import OverrideResolver, EffectiveSource
from .classifier import ChangeClassifier, ChangeType, Classification
from .status import StatusAggregator, StatusEntry
from .executor import SyncExecutor, SyncOptions, SyncSummary
from .sync import SyncManager

__all__ = [
    'GravityError',
    'ManifestError',
    'SyncIOError',
    'UnknownEntryError',
    'Workspace',
    'default_root',
    'ManifestLoader',
    'Manifest',
    'ConfigEntry',
    'StateStore',
    'SyncState',
    'SyncRecord',
    'OverrideResolver',
    'EffectiveSource',
    'ChangeClassifier',
    'ChangeType',
    'Classification',
    'StatusAggregator',
    'StatusEntry',
    'SyncExecutor',
    'SyncOptions',
    'SyncSummary',
    'SyncManager',
]
