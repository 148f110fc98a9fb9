#!/usr/bin/env python3
"""
Tests for three-way change classification.
"""

import pytest

from gravity.core.classifier import ChangeClassifier, ChangeType, compare_hashes
from gravity.core.manifest import ConfigEntry
from gravity.core.resolver import OverrideResolver
from gravity.core.state import StateStore, SyncState, SyncRecord
from gravity.core.workspace import Workspace
from gravity.utils.hashing import hash_string


H1 = hash_string("x=1")
H2 = hash_string("x=2")
H3 = hash_string("x=3")


def record(source_hash, system_hash):
    return SyncRecord(source_hash=source_hash, system_hash=system_hash)


class TestCompareHashes:
    """Test the decision table."""

    @pytest.mark.parametrize("source_hash, system_hash, prev, expected", [
        (H1, H1, None, ChangeType.UNCHANGED),
        (H1, H2, None, ChangeType.OUT_OF_SYNC),
        (H1, H1, record(H1, H1), ChangeType.UNCHANGED),
        (H2, H2, record(H1, H1), ChangeType.SOURCE_CHANGED),
        (H2, H2, record(H2, H1), ChangeType.SOURCE_CHANGED),
        (H2, H3, record(H1, H1), ChangeType.CONFLICT),
        (H2, H1, record(H1, H1), ChangeType.SOURCE_CHANGED),
        (H1, H3, record(H1, H1), ChangeType.SYSTEM_CHANGED),
        (H1, H2, record(H1, H2), ChangeType.UNCHANGED),
    ])
    def test_decision_table(self, source_hash, system_hash, prev, expected):
        assert compare_hashes(source_hash, system_hash, prev) == expected


class TestChangeType:
    """Test ChangeType helpers."""

    def test_values(self):
        assert {c.value for c in ChangeType} == {
            "unchanged", "source_changed", "system_changed", "conflict",
            "missing_system", "missing_source", "out_of_sync",
        }

    def test_safe_types(self):
        safe = {c for c in ChangeType if c.is_safe}
        assert safe == {ChangeType.SOURCE_CHANGED, ChangeType.MISSING_SYSTEM, ChangeType.OUT_OF_SYNC}

    def test_needs_attention(self):
        assert not ChangeType.UNCHANGED.needs_attention
        assert ChangeType.CONFLICT.needs_attention
        assert ChangeType.CONFLICT.description == "CONFLICT"


@pytest.fixture
def workspace(root):
    return Workspace.from_root(root)


@pytest.fixture
def store(workspace):
    return StateStore(workspace.state_file)


@pytest.fixture
def classifier(workspace, store):
    return ChangeClassifier(OverrideResolver(workspace), store)


@pytest.fixture
def entry():
    return ConfigEntry("shell", "configs/shell.conf", "~/shell.conf")


class TestChangeClassifier:
    """Test ChangeClassifier against files on disk."""

    def test_missing_source(self, classifier, entry, home):
        (home / "shell.conf").write_text("x=1")
        assert classifier.classify("shell", entry) == ChangeType.MISSING_SOURCE

    def test_missing_source_and_system(self, classifier, entry, home):
        assert classifier.classify("shell", entry) == ChangeType.MISSING_SOURCE

    def test_missing_system(self, classifier, entry, workspace, home):
        (workspace.configs_dir / "shell.conf").write_text("x=1")
        assert classifier.classify("shell", entry) == ChangeType.MISSING_SYSTEM

    def test_first_run_matching(self, classifier, entry, workspace, home):
        (workspace.configs_dir / "shell.conf").write_text("x=1")
        (home / "shell.conf").write_text("x=1")
        assert classifier.classify("shell", entry) == ChangeType.UNCHANGED

    def test_first_run_differing(self, classifier, entry, workspace, home):
        """Without a baseline neither side is assumed authoritative."""
        (workspace.configs_dir / "shell.conf").write_text("x=1")
        (home / "shell.conf").write_text("x=9")
        assert classifier.classify("shell", entry) == ChangeType.OUT_OF_SYNC

    def test_system_changed_since_sync(self, classifier, entry, workspace, store, home):
        (workspace.configs_dir / "shell.conf").write_text("x=2")
        (home / "shell.conf").write_text("x=3")
        state = SyncState()
        state.set_record("shell", record(H2, H2))
        store.save(state)

        assert classifier.classify("shell", entry) == ChangeType.SYSTEM_CHANGED

    def test_conflict(self, classifier, entry, workspace, store, home):
        (workspace.configs_dir / "shell.conf").write_text("x=2")
        (home / "shell.conf").write_text("x=3")
        state = SyncState()
        state.set_record("shell", record(H1, H1))
        store.save(state)

        assert classifier.classify("shell", entry) == ChangeType.CONFLICT

    def test_record_read_fresh(self, classifier, entry, workspace, store, home):
        (workspace.configs_dir / "shell.conf").write_text("x=2")
        (home / "shell.conf").write_text("x=1")
        assert classifier.classify("shell", entry) == ChangeType.OUT_OF_SYNC

        state = SyncState()
        state.set_record("shell", record(H1, H1))
        store.save(state)
        assert classifier.classify("shell", entry) == ChangeType.SOURCE_CHANGED

    def test_corrupt_state_is_conservative(self, classifier, entry, workspace, store, home):
        (workspace.configs_dir / "shell.conf").write_text("x=2")
        (home / "shell.conf").write_text("x=1")
        store.state_path.write_text("not json")
        assert classifier.classify("shell", entry) == ChangeType.OUT_OF_SYNC

    def test_override_used_for_comparison(self, classifier, entry, workspace, home):
        (workspace.configs_dir / "shell.conf").write_text("base")
        (workspace.overrides_dir / "shell.conf").write_text("override")
        (home / "shell.conf").write_text("override")

        result = classifier.inspect("shell", entry)
        assert result.change_type == ChangeType.UNCHANGED
        assert result.source.used_override is True
        assert result.source_hash == hash_string("override")

    def test_explicit_state_used(self, classifier, entry, workspace, home):
        (workspace.configs_dir / "shell.conf").write_text("x=1")
        (home / "shell.conf").write_text("x=3")
        state = SyncState()
        state.set_record("shell", record(H1, H1))

        assert classifier.classify("shell", entry, state) == ChangeType.SYSTEM_CHANGED
