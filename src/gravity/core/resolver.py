"""
Effective source resolution.

An override file named like an entry's base source (by filename only) inside
the overrides directory fully replaces the base content for that entry.
Nothing is cached: adding or removing an override takes effect on the next
call.
"""

from pathlib import Path
from typing import NamedTuple

from .manifest import ConfigEntry
from .workspace import Workspace
from ..utils.path import expand_path


class EffectiveSource(NamedTuple):
    path: Path
    used_override: bool


class OverrideResolver:
    """Decides which physical file supplies an entry's content."""

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def resolve_source(self, entry: ConfigEntry) -> EffectiveSource:
        override_path = self.workspace.override_path_for(entry.source)
        if override_path.is_file():
            return EffectiveSource(override_path, True)
        return EffectiveSource(self.workspace.source_path(entry.source), False)

    @staticmethod
    def resolve_target(entry: ConfigEntry) -> Path:
        """Target path with ``~`` and environment variables expanded."""
        return expand_path(entry.target)
