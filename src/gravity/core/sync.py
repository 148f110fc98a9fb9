#!/usr/bin/env python3
"""
Synchronization manager for Gravity.

This module exposes the operations the command line (or any other front end)
uses: status of all tracked config files, batch and single-entry sync, and
explicit access to the persisted sync state. The manifest is reloaded on
every call, so edits to manifests or override files apply immediately.
"""

from typing import Dict, Optional, Iterable, Union
from pathlib import Path

from .classifier import ChangeClassifier, ChangeType
from .errors import UnknownEntryError
from .executor import SyncExecutor, SyncOptions, SyncSummary
from .manifest import ManifestLoader, Manifest, ConfigEntry
from .resolver import OverrideResolver
from .state import StateStore, SyncState
from .status import StatusAggregator, StatusEntry
from .workspace import Workspace
from ..utils.logger import get_logger


class SyncManager:
    """Main synchronization manager class."""

    def __init__(self, workspace: Union[Workspace, str, Path], store: Optional[StateStore] = None):
        """
        Initialize sync manager.

        Args:
            workspace: Workspace or path to its root directory
            store: State store to use (defaults to the workspace state file)
        """
        self.logger = get_logger(f"{__name__}.SyncManager")
        if not isinstance(workspace, Workspace):
            workspace = Workspace.from_root(workspace)

        self.workspace = workspace
        self.manifest_loader = ManifestLoader(workspace)
        self.store = store or StateStore(workspace.state_file)
        self.resolver = OverrideResolver(workspace)
        self.classifier = ChangeClassifier(self.resolver, self.store)
        self.aggregator = StatusAggregator(self.classifier)
        self.executor = SyncExecutor(
            self.resolver, self.store, self.aggregator, workspace.backups_dir
        )

    def load_manifest(self) -> Manifest:
        return self.manifest_loader.load()

    def get_entry(self, key: str, manifest: Optional[Manifest] = None) -> ConfigEntry:
        """Look up a config entry, raising UnknownEntryError if it is not defined."""
        manifest = manifest or self.load_manifest()
        entry = manifest.get_entry(key)
        if entry is None:
            raise UnknownEntryError(key)
        return entry

    def get_status(self) -> Dict[str, StatusEntry]:
        """Snapshot of every tracked entry, ordered by key."""
        return self.aggregator.get_status(self.load_manifest())

    def classify(self, key: str) -> ChangeType:
        return self.classifier.classify(key, self.get_entry(key))

    def sync_all(
        self,
        options: Optional[SyncOptions] = None,
        keys: Optional[Iterable[str]] = None
    ) -> SyncSummary:
        """Sync every entry the policy allows. See SyncExecutor.sync_all."""
        return self.executor.sync_all(self.load_manifest(), options, keys)

    def sync_one(self, key: str, entry: ConfigEntry, options: Optional[SyncOptions] = None) -> bool:
        """Unconditionally sync one entry. See SyncExecutor.sync_one."""
        return self.executor.sync_one(key, entry, options)

    def load_state(self) -> SyncState:
        return self.store.load()

    def save_state(self, state: SyncState):
        self.store.save(state)
