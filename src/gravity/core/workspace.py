"""
Layout of a Gravity configuration tree.

A workspace root holds the manifest files, the tracked base sources under
``configs/``, machine specific overrides under ``configs.overrides/``, the
backup directory and the persisted sync state.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..utils.path import expand_path
from ..utils.platform import platform_detector

ROOT_ENV_VAR = 'GRAVITY_ROOT'

CONFIGS_DIR_NAME = 'configs'
OVERRIDES_DIR_NAME = 'configs.overrides'
BACKUPS_DIR_NAME = 'backups'
STATE_FILE_NAME = '.sync_state.json'
MANIFEST_STEM = 'manifest'
MANIFEST_OVERRIDES_STEM = 'manifest.overrides'
MANIFEST_SUFFIXES = ('.json', '.yaml', '.yml', '.toml')


def default_root() -> Path:
    """Workspace root from ``$GRAVITY_ROOT``, else ``<config dir>/gravity``."""
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return expand_path(env_root)
    return platform_detector.get_config_dir() / 'gravity'


@dataclass(frozen=True)
class Workspace:
    """Resolved paths of a configuration tree."""

    root: Path

    @classmethod
    def from_root(cls, root: Union[str, Path]) -> 'Workspace':
        return cls(root=expand_path(root).resolve())

    @property
    def configs_dir(self) -> Path:
        return self.root / CONFIGS_DIR_NAME

    @property
    def overrides_dir(self) -> Path:
        return self.root / OVERRIDES_DIR_NAME

    @property
    def backups_dir(self) -> Path:
        return self.root / BACKUPS_DIR_NAME

    @property
    def state_file(self) -> Path:
        return self.root / STATE_FILE_NAME

    def find_manifest(self, stem: str = MANIFEST_STEM) -> Path:
        """
        Locate a manifest file by stem, trying each supported suffix in order.

        Returns the ``.json`` candidate when none exists, so error messages
        point at the conventional location.
        """
        for suffix in MANIFEST_SUFFIXES:
            candidate = self.root / f"{stem}{suffix}"
            if candidate.is_file():
                return candidate
        return self.root / f"{stem}.json"

    @property
    def manifest_file(self) -> Path:
        return self.find_manifest(MANIFEST_STEM)

    @property
    def manifest_overrides_file(self) -> Path:
        return self.find_manifest(MANIFEST_OVERRIDES_STEM)

    def source_path(self, source: str) -> Path:
        """Absolute path of a base source given relative to the root."""
        path = expand_path(source)
        if path.is_absolute():
            return path
        return self.root / path

    def override_path_for(self, source: str) -> Path:
        """Override candidate: the source's filename inside the overrides directory."""
        return self.overrides_dir / Path(source).name
