"""
Shared fixtures: an isolated home directory and an empty Gravity workspace.
"""

import json
import pytest

from gravity.core.sync import SyncManager


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point ~ at a temporary directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    monkeypatch.delenv("GRAVITY_ROOT", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return home_dir


@pytest.fixture
def root(tmp_path):
    """Create a workspace root with base and override directories."""
    root_dir = tmp_path / "gravity"
    (root_dir / "configs").mkdir(parents=True)
    (root_dir / "configs.overrides").mkdir()
    return root_dir


@pytest.fixture
def write_manifest(root):
    """Write manifest.json with the given configs."""
    def _write(configs, version="1.0.0", name="manifest.json"):
        path = root / name
        path.write_text(json.dumps({"version": version, "configs": configs}))
        return path
    return _write


@pytest.fixture
def manager(root, home):
    """Create a SyncManager for the temporary workspace."""
    return SyncManager(root)
