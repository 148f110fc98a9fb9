#!/usr/bin/env python3
"""
Persisted sync state for Gravity.

The state file records, per config key, the fingerprints of the source and
system content at the last successful sync. A record exists for a key only
if that key has been synced since the state was last cleared.

Only one process is expected to touch the state file at a time. There is no
locking: concurrent invocations race on read-modify-write and the last
writer wins.
"""

import json
import os
import tempfile
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

from .errors import SyncIOError
from ..utils.logger import get_logger

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Current UTC time as ISO-8601 with a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


@dataclass
class SyncRecord:
    """Fingerprints recorded at the last successful sync of one entry."""

    source_hash: str
    system_hash: str
    used_override: bool = False
    last_sync: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> 'SyncRecord':
        """Create a record from its JSON form. Raises ValueError if malformed."""
        if not isinstance(data, dict):
            raise ValueError("record must be an object")

        source_hash = data.get('source_hash')
        system_hash = data.get('system_hash')
        if not isinstance(source_hash, str) or not isinstance(system_hash, str):
            raise ValueError("record requires 'source_hash' and 'system_hash' strings")

        return cls(
            source_hash=source_hash,
            system_hash=system_hash,
            used_override=bool(data.get('used_override', False)),
            last_sync=str(data.get('last_sync') or ''),
        )


@dataclass
class SyncState:
    """The whole persisted store."""

    manifest_hash: str = ''
    dotfiles: Dict[str, SyncRecord] = field(default_factory=dict)

    def get_record(self, key: str) -> Optional[SyncRecord]:
        return self.dotfiles.get(key)

    def set_record(self, key: str, record: SyncRecord):
        self.dotfiles[key] = record

    def remove_record(self, key: str) -> bool:
        return self.dotfiles.pop(key, None) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'manifest_hash': self.manifest_hash,
            'dotfiles': {key: record.to_dict() for key, record in sorted(self.dotfiles.items())},
        }


class StateStore:
    """Loads and saves the sync state file."""

    def __init__(self, state_path: Path):
        self.logger = get_logger(f"{__name__}.StateStore")
        self.state_path = Path(state_path)

    def load(self) -> SyncState:
        """
        Load the sync state.

        Never fails: a missing or unparsable file yields an empty state, and
        individual malformed records are dropped so those entries are treated
        as never synced.
        """
        if not self.state_path.exists():
            return SyncState()

        try:
            with open(self.state_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Ignoring unreadable sync state {self.state_path}: {e}")
            return SyncState()

        if not isinstance(data, dict):
            self.logger.warning(f"Ignoring malformed sync state {self.state_path}")
            return SyncState()

        state = SyncState(manifest_hash=str(data.get('manifest_hash') or ''))

        dotfiles = data.get('dotfiles')
        if not isinstance(dotfiles, dict):
            return state

        for key, record_data in dotfiles.items():
            try:
                state.dotfiles[key] = SyncRecord.from_dict(record_data)
            except ValueError as e:
                self.logger.warning(f"Dropping malformed sync record '{key}': {e}")

        return state

    def save(self, state: SyncState):
        """
        Write the state atomically.

        Raises:
            SyncIOError: the state file could not be written.
        """
        fd = None
        tmp_path = None
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.state_path.parent, prefix='.sync_state.', suffix='.tmp'
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                fd = None
                json.dump(state.to_dict(), f, indent=2)
                f.write('\n')
            os.replace(tmp_path, self.state_path)
            tmp_path = None
        except OSError as e:
            raise SyncIOError(
                f"Failed to write sync state {self.state_path}: {e}", path=self.state_path
            ) from e
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        self.logger.debug(f"Saved sync state ({len(state.dotfiles)} records)")

    def clear(self):
        """Reset the store to an empty state."""
        self.save(SyncState())
