"""
Status snapshot of every tracked entry.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any

from .classifier import ChangeClassifier, ChangeType
from .manifest import ConfigEntry, Manifest


@dataclass(frozen=True)
class StatusEntry:
    """Classification of one entry at the time the snapshot was taken."""

    key: str
    entry: ConfigEntry
    change_type: ChangeType
    used_override: bool
    source_path: Path
    target_path: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'source': self.entry.source,
            'target': self.entry.target,
            'change_type': self.change_type.value,
            'used_override': self.used_override,
            'source_path': str(self.source_path),
            'target_path': str(self.target_path),
        }


class StatusAggregator:
    """Runs the classifier over every manifest entry."""

    def __init__(self, classifier: ChangeClassifier):
        self.classifier = classifier

    def get_status(self, manifest: Manifest) -> Dict[str, StatusEntry]:
        """Classify all entries in key order against a single state read."""
        state = self.classifier.store.load()
        status = {}

        for entry in manifest.sorted_entries():
            result = self.classifier.inspect(entry.key, entry, state)
            status[entry.key] = StatusEntry(
                key=entry.key,
                entry=entry,
                change_type=result.change_type,
                used_override=result.source.used_override,
                source_path=result.source.path,
                target_path=result.target_path,
            )

        return status
