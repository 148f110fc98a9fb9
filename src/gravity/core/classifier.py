#!/usr/bin/env python3
"""
Three-way change detection for Gravity.

Every tracked entry is classified by comparing the current source content,
the current system content and the fingerprints recorded at the last sync.
The classification always picks the least destructive label the evidence
allows, so that user edits on the system side are never silently replaced.
"""

from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional

from .manifest import ConfigEntry
from .resolver import OverrideResolver, EffectiveSource
from .state import StateStore, SyncState, SyncRecord
from ..utils.hashing import hash_file
from ..utils.logger import get_logger


class ChangeType(Enum):
    """Classification of one tracked entry."""
    UNCHANGED = "unchanged"
    SOURCE_CHANGED = "source_changed"
    SYSTEM_CHANGED = "system_changed"
    CONFLICT = "conflict"
    MISSING_SYSTEM = "missing_system"
    MISSING_SOURCE = "missing_source"
    OUT_OF_SYNC = "out_of_sync"

    @property
    def needs_attention(self) -> bool:
        return self is not ChangeType.UNCHANGED

    @property
    def is_safe(self) -> bool:
        """Whether a sync may overwrite the system file without forcing."""
        return self in (
            ChangeType.SOURCE_CHANGED,
            ChangeType.MISSING_SYSTEM,
            ChangeType.OUT_OF_SYNC,
        )

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ChangeType.UNCHANGED: "unchanged",
    ChangeType.SOURCE_CHANGED: "source changed",
    ChangeType.SYSTEM_CHANGED: "system changed",
    ChangeType.CONFLICT: "CONFLICT",
    ChangeType.MISSING_SYSTEM: "not on system",
    ChangeType.MISSING_SOURCE: "missing source",
    ChangeType.OUT_OF_SYNC: "out of sync",
}


class Classification(NamedTuple):
    change_type: ChangeType
    source: EffectiveSource
    target_path: Path
    source_hash: Optional[str] = None
    system_hash: Optional[str] = None


def compare_hashes(source_hash: str, system_hash: str, record: Optional[SyncRecord]) -> ChangeType:
    """
    Decide the change type of an entry whose source and system files both exist.

    Args:
        source_hash: Fingerprint of the current effective source content
        system_hash: Fingerprint of the current system content
        record: Fingerprints from the last sync, None if never synced
    """
    if record is None:
        # No baseline: matching content is fine, anything else needs an opt-in
        if source_hash == system_hash:
            return ChangeType.UNCHANGED
        return ChangeType.OUT_OF_SYNC

    source_changed = source_hash != record.source_hash
    system_changed = system_hash != record.system_hash

    if source_hash == system_hash:
        if source_changed or system_changed:
            # Stale record only; the sync will refresh state without moving bytes
            return ChangeType.SOURCE_CHANGED
        return ChangeType.UNCHANGED

    if source_changed and system_changed:
        return ChangeType.CONFLICT
    if source_changed:
        return ChangeType.SOURCE_CHANGED
    if system_changed:
        return ChangeType.SYSTEM_CHANGED

    # Unreachable with a consistent hash function
    return ChangeType.UNCHANGED


class ChangeClassifier:
    """Classifies config entries against the stored sync state."""

    def __init__(self, resolver: OverrideResolver, store: StateStore):
        self.logger = get_logger(f"{__name__}.ChangeClassifier")
        self.resolver = resolver
        self.store = store

    def inspect(self, key: str, entry: ConfigEntry, state: Optional[SyncState] = None) -> Classification:
        """
        Classify an entry and return the paths and fingerprints involved.

        Args:
            key: Config key, used to look up the sync record
            entry: Manifest entry
            state: Already loaded state; read from the store when omitted
        """
        source = self.resolver.resolve_source(entry)
        target_path = self.resolver.resolve_target(entry)

        source_hash = hash_file(source.path)
        if source_hash is None:
            return Classification(ChangeType.MISSING_SOURCE, source, target_path)

        system_hash = hash_file(target_path)
        if system_hash is None:
            return Classification(ChangeType.MISSING_SYSTEM, source, target_path, source_hash)

        if state is None:
            state = self.store.load()

        change_type = compare_hashes(source_hash, system_hash, state.get_record(key))
        self.logger.debug(f"{key}: {change_type.value}")
        return Classification(change_type, source, target_path, source_hash, system_hash)

    def classify(self, key: str, entry: ConfigEntry, state: Optional[SyncState] = None) -> ChangeType:
        return self.inspect(key, entry, state).change_type
