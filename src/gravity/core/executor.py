#!/usr/bin/env python3
"""
Sync execution for Gravity.

A sync copies the effective source of an entry onto its system target,
keeping a timestamped backup of what was there, and records the new
fingerprints in the sync state. The batch sync applies the skip/force
policy for each classification and always runs to completion.
"""

import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Iterable

from .classifier import ChangeType
from .errors import SyncIOError, UnknownEntryError
from .manifest import ConfigEntry, Manifest
from .resolver import OverrideResolver
from .state import StateStore, SyncRecord, utc_timestamp
from .status import StatusAggregator
from ..utils.hashing import hash_file
from ..utils.logger import get_logger

BACKUP_TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


@dataclass(frozen=True)
class SyncOptions:
    """Policy switches for a sync."""

    force: bool = False
    quiet: bool = False
    no_backup: bool = False


class SyncSummary:
    """Outcome of a batch sync."""

    def __init__(self):
        self.synced = 0
        self.unchanged = 0
        self.skipped = 0
        self.synced_keys: List[str] = []
        self.skipped_keys: Dict[str, ChangeType] = {}
        self.failed: Dict[str, str] = {}

    def mark_synced(self, key: str):
        self.synced += 1
        self.synced_keys.append(key)

    def mark_unchanged(self, key: str):
        self.unchanged += 1

    def mark_skipped(self, key: str, change_type: ChangeType):
        self.skipped += 1
        self.skipped_keys[key] = change_type

    def add_failure(self, key: str, error: str):
        """Record an entry whose sync was attempted but failed."""
        self.failed[key] = error

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def to_dict(self) -> Dict[str, object]:
        return {
            'synced': self.synced,
            'unchanged': self.unchanged,
            'skipped': self.skipped,
            'failed': dict(self.failed),
        }


def backup_file(path: Path, backups_dir: Path, now: Optional[datetime] = None) -> Path:
    """
    Copy a file into the backup directory as ``<name>.<YYYYMMDD_HHMMSS>``.

    A numeric suffix is appended when a backup with the same name already
    exists, so earlier backups are never overwritten.
    """
    timestamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    backups_dir.mkdir(parents=True, exist_ok=True)

    backup_path = backups_dir / f"{path.name}.{timestamp}"
    counter = 1
    while backup_path.exists():
        backup_path = backups_dir / f"{path.name}.{timestamp}.{counter}"
        counter += 1

    shutil.copy2(path, backup_path)
    return backup_path


class SyncExecutor:
    """Applies sync decisions to individual entries and batches."""

    def __init__(
        self,
        resolver: OverrideResolver,
        store: StateStore,
        aggregator: StatusAggregator,
        backups_dir: Path
    ):
        self.logger = get_logger(f"{__name__}.SyncExecutor")
        self.resolver = resolver
        self.store = store
        self.aggregator = aggregator
        self.backups_dir = backups_dir

    def _backup(self, target_path: Path, options: SyncOptions) -> Optional[Path]:
        """Back up the current target; failures are logged and never abort the sync."""
        try:
            backup_path = backup_file(target_path, self.backups_dir)
        except OSError as e:
            self.logger.warning(f"Failed to back up {target_path}: {e}")
            return None

        if not options.quiet:
            self.logger.info(f"  Backed up to: {backup_path}")
        return backup_path

    def sync_one(self, key: str, entry: ConfigEntry, options: Optional[SyncOptions] = None) -> bool:
        """
        Copy an entry's effective source onto its target and record the sync.

        When the target already holds the source content nothing is copied and
        only the sync record is refreshed.

        Raises:
            SyncIOError: the source could not be read, or the target or the
                state file could not be written. The sync record is only
                updated after the content is in place.
        """
        options = options or SyncOptions()
        source = self.resolver.resolve_source(entry)
        target_path = self.resolver.resolve_target(entry)

        source_hash = hash_file(source.path)
        if source_hash is None:
            raise SyncIOError(f"Failed to read source file: {source.path}", key=key, path=source.path)

        if target_path.is_dir():
            raise SyncIOError(f"Target is a directory: {target_path}", key=key, path=target_path)

        if hash_file(target_path) != source_hash:
            if target_path.exists() and not options.no_backup:
                self._backup(target_path, options)

            try:
                target_path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source.path, target_path)
            except OSError as e:
                raise SyncIOError(
                    f"Failed to write {target_path}: {e}", key=key, path=target_path
                ) from e
        else:
            self.logger.debug(f"{key}: target already matches source, refreshing state only")

        system_hash = hash_file(target_path)
        if system_hash is None:
            raise SyncIOError(f"Failed to read back {target_path}", key=key, path=target_path)

        state = self.store.load()
        state.set_record(key, SyncRecord(
            source_hash=source_hash,
            system_hash=system_hash,
            used_override=source.used_override,
            last_sync=utc_timestamp(),
        ))
        self.store.save(state)

        return True

    def sync_all(
        self,
        manifest: Manifest,
        options: Optional[SyncOptions] = None,
        keys: Optional[Iterable[str]] = None
    ) -> SyncSummary:
        """
        Classify every entry and sync those the policy allows.

        Args:
            manifest: Freshly loaded manifest
            options: Policy switches; ``force`` only affects system-side changes
            keys: Restrict the batch to these config keys

        Returns:
            SyncSummary with synced/unchanged/skipped counts and failures
        """
        options = options or SyncOptions()
        summary = SyncSummary()

        selected = None
        if keys is not None:
            selected = set(keys)
            for key in sorted(selected):
                if key not in manifest.configs:
                    raise UnknownEntryError(key)

        status = self.aggregator.get_status(manifest)

        for key, info in status.items():
            if selected is not None and key not in selected:
                continue

            change_type = info.change_type

            if change_type is ChangeType.UNCHANGED:
                summary.mark_unchanged(key)
                continue

            if change_type is ChangeType.MISSING_SOURCE:
                self.logger.warning(f"Skipping {key} (missing source file)")
                summary.mark_skipped(key, change_type)
                continue

            if change_type is ChangeType.CONFLICT:
                self.logger.error(
                    f"Conflict: {key} (both source and system changed, "
                    f"use 'gravity diff {key}' to review)"
                )
                summary.mark_skipped(key, change_type)
                continue

            if change_type is ChangeType.SYSTEM_CHANGED and not options.force:
                self.logger.warning(
                    f"Skipping {key} (system changed, use 'gravity diff {key}' to review)"
                )
                summary.mark_skipped(key, change_type)
                continue

            if not options.quiet:
                override_note = ' (override)' if info.used_override else ''
                self.logger.info(f"Syncing {key}{override_note}")

            try:
                self.sync_one(key, info.entry, options)
            except SyncIOError as e:
                self.logger.error(f"Failed to sync {key}: {e}")
                summary.add_failure(key, str(e))
                continue

            summary.mark_synced(key)

        self.logger.debug(
            f"Sync finished: {summary.synced} synced, {summary.unchanged} unchanged, "
            f"{summary.skipped} skipped, {len(summary.failed)} failed"
        )
        return summary
