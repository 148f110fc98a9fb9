#!/usr/bin/env python3
"""
Manifest loading for Gravity.

The manifest declares every tracked config entry. A base manifest is
required; an optional ``manifest.overrides`` document with the same version
is deep-merged on top of it. JSON, YAML and TOML documents are accepted.
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

import toml
import yaml

from .errors import ManifestError
from .workspace import Workspace
from ..utils.logger import get_logger


@dataclass(frozen=True)
class ConfigEntry:
    """A tracked config file: where its content lives and where it syncs to."""

    key: str
    source: str
    target: str

    @classmethod
    def from_dict(cls, key: str, data: Any) -> 'ConfigEntry':
        """Create an entry from its manifest mapping, validating required fields."""
        if not isinstance(data, dict):
            raise ManifestError(f"Config '{key}' must be a mapping with 'source' and 'target'")

        for field_name in ('source', 'target'):
            value = data.get(field_name)
            if not isinstance(value, str) or not value.strip():
                raise ManifestError(f"Config '{key}' is missing required field '{field_name}'")

        return cls(key=key, source=data['source'], target=data['target'])

    def to_dict(self) -> Dict[str, str]:
        return {'source': self.source, 'target': self.target}


@dataclass
class Manifest:
    """The merged manifest."""

    version: str
    configs: Dict[str, ConfigEntry] = field(default_factory=dict)
    dependencies: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Manifest':
        """Build a manifest from a merged document."""
        if 'version' not in data or data['version'] in (None, ''):
            raise ManifestError('Manifest is missing required "version" field')

        configs_data = data.get('configs') or {}
        if not isinstance(configs_data, dict):
            raise ManifestError('Manifest "configs" must be a mapping of key to entry')

        configs = {
            str(key): ConfigEntry.from_dict(str(key), value)
            for key, value in configs_data.items()
        }

        dependencies = data.get('dependencies') or {}
        if not isinstance(dependencies, dict):
            raise ManifestError('Manifest "dependencies" must be a mapping')

        return cls(
            version=str(data['version']),
            configs=configs,
            dependencies=dependencies,
            raw=data,
        )

    def get_entry(self, key: str) -> Optional[ConfigEntry]:
        return self.configs.get(key)

    def sorted_entries(self):
        """Entries in key order."""
        return [self.configs[key] for key in sorted(self.configs)]


def deep_merge(base: Any, overrides: Any) -> Any:
    """
    Merge ``overrides`` into a copy of ``base``.

    Mappings merge recursively, while lists and scalars replace the base value.
    Override keys starting with ``_`` are comment fields and are ignored.
    """
    if not isinstance(base, dict) or not isinstance(overrides, dict):
        return copy.deepcopy(overrides)

    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(key, str) and key.startswith('_'):
            continue

        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def read_document(path: Path) -> Optional[Dict[str, Any]]:
    """
    Parse a manifest document based on its suffix.

    Returns None if the file does not exist. Raises ManifestError if it cannot
    be read or parsed, or if its top level is not a mapping.
    """
    if not path.is_file():
        return None

    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    try:
        if path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(content)
        elif path.suffix == '.toml':
            data = toml.loads(content)
        else:
            data = json.loads(content)
    except (ValueError, yaml.YAMLError, toml.TomlDecodeError) as e:
        raise ManifestError(f"Failed to parse manifest file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest file {path} must contain a mapping at the top level")

    return data


class ManifestLoader:
    """Loads and merges the base and override manifests of a workspace."""

    def __init__(self, workspace: Workspace):
        self.logger = get_logger(f"{__name__}.ManifestLoader")
        self.workspace = workspace

    def load(self) -> Manifest:
        """Load the merged manifest. Always reads from disk."""
        base_path = self.workspace.manifest_file
        base = read_document(base_path)
        if base is None:
            raise ManifestError(f"Manifest not found at: {base_path}")

        if 'version' not in base:
            raise ManifestError(f'{base_path.name} missing required "version" field')

        overrides_path = self.workspace.manifest_overrides_file
        overrides = read_document(overrides_path)

        if overrides is None:
            self.logger.debug(f"Loaded manifest {base_path}")
            return Manifest.from_dict(base)

        if 'version' not in overrides:
            raise ManifestError(f'{overrides_path.name} missing required "version" field')

        if str(base['version']) != str(overrides['version']):
            raise ManifestError(
                f"Manifest version mismatch: base v{base['version']}, "
                f"overrides v{overrides['version']}. Update {overrides_path.name} "
                f"to match the v{base['version']} format."
            )

        self.logger.debug(f"Loaded manifest {base_path} with overrides {overrides_path}")
        return Manifest.from_dict(deep_merge(base, overrides))
