#!/usr/bin/env python3
"""
Tests for manifest loading and merging.
"""

import json
import pytest

from gravity.core.errors import ManifestError
from gravity.core.manifest import ConfigEntry, Manifest, ManifestLoader, deep_merge
from gravity.core.workspace import Workspace


@pytest.fixture
def loader(root):
    return ManifestLoader(Workspace.from_root(root))


def write_json(path, data):
    path.write_text(json.dumps(data))


class TestConfigEntry:
    """Test ConfigEntry validation."""

    def test_from_dict(self):
        entry = ConfigEntry.from_dict("zshrc", {"source": "configs/zshrc", "target": "~/.zshrc"})
        assert entry.key == "zshrc"
        assert entry.source == "configs/zshrc"
        assert entry.target == "~/.zshrc"
        assert entry.to_dict() == {"source": "configs/zshrc", "target": "~/.zshrc"}

    @pytest.mark.parametrize("data", [
        {"source": "configs/zshrc"},
        {"target": "~/.zshrc"},
        {"source": "", "target": "~/.zshrc"},
        {"source": 1, "target": "~/.zshrc"},
        "configs/zshrc",
    ])
    def test_malformed_entry_rejected(self, data):
        with pytest.raises(ManifestError, match="zshrc"):
            ConfigEntry.from_dict("zshrc", data)


class TestDeepMerge:
    """Test deep_merge semantics."""

    def test_nested_mappings_merge(self):
        base = {"configs": {"a": {"source": "configs/a", "target": "~/a"}}}
        overrides = {"configs": {"a": {"target": "~/b"}, "c": {"source": "configs/c", "target": "~/c"}}}
        merged = deep_merge(base, overrides)
        assert merged["configs"]["a"] == {"source": "configs/a", "target": "~/b"}
        assert "c" in merged["configs"]

    def test_lists_replace(self):
        assert deep_merge({"tools": [1, 2]}, {"tools": [3]}) == {"tools": [3]}

    def test_comment_fields_ignored(self):
        merged = deep_merge({"version": "1"}, {"_comment": "note", "version": "1"})
        assert "_comment" not in merged

    def test_base_not_mutated(self):
        base = {"configs": {"a": {"target": "~/a"}}}
        deep_merge(base, {"configs": {"a": {"target": "~/b"}}})
        assert base["configs"]["a"]["target"] == "~/a"


class TestManifestLoader:
    """Test ManifestLoader."""

    def test_load_base_manifest(self, loader, write_manifest):
        write_manifest({"zshrc": {"source": "configs/zshrc", "target": "~/.zshrc"}})
        manifest = loader.load()

        assert manifest.version == "1.0.0"
        assert manifest.configs["zshrc"] == ConfigEntry("zshrc", "configs/zshrc", "~/.zshrc")

    def test_missing_manifest(self, loader):
        with pytest.raises(ManifestError, match="not found"):
            loader.load()

    def test_unparsable_manifest(self, loader, root):
        (root / "manifest.json").write_text("{not json")
        with pytest.raises(ManifestError, match="parse"):
            loader.load()

    def test_invalid_utf8_manifest(self, loader, root):
        (root / "manifest.json").write_bytes(b'{"version": "1.0.0", "x": "\xff"}')
        with pytest.raises(ManifestError, match="read"):
            loader.load()

    def test_missing_version(self, loader, root):
        write_json(root / "manifest.json", {"configs": {}})
        with pytest.raises(ManifestError, match="version"):
            loader.load()

    def test_non_mapping_manifest(self, loader, root):
        write_json(root / "manifest.json", ["not", "a", "mapping"])
        with pytest.raises(ManifestError, match="mapping"):
            loader.load()

    def test_missing_configs_is_empty(self, loader, root):
        write_json(root / "manifest.json", {"version": "1.0.0"})
        assert loader.load().configs == {}

    def test_malformed_entry(self, loader, write_manifest):
        write_manifest({"zshrc": {"source": "configs/zshrc"}})
        with pytest.raises(ManifestError, match="target"):
            loader.load()

    def test_overrides_merged(self, loader, root, write_manifest):
        write_manifest({
            "zshrc": {"source": "configs/zshrc", "target": "~/.zshrc"},
            "vimrc": {"source": "configs/vimrc", "target": "~/.vimrc"},
        })
        write_json(root / "manifest.overrides.json", {
            "version": "1.0.0",
            "_comment": "work laptop",
            "configs": {
                "vimrc": {"target": "~/.config/vim/vimrc"},
                "tmux": {"source": "configs/tmux.conf", "target": "~/.tmux.conf"},
            },
        })

        manifest = loader.load()

        assert sorted(manifest.configs) == ["tmux", "vimrc", "zshrc"]
        assert manifest.configs["vimrc"].source == "configs/vimrc"
        assert manifest.configs["vimrc"].target == "~/.config/vim/vimrc"
        assert "_comment" not in manifest.raw

    def test_overrides_require_version(self, loader, root, write_manifest):
        write_manifest({})
        write_json(root / "manifest.overrides.json", {"configs": {}})
        with pytest.raises(ManifestError, match="manifest.overrides.json"):
            loader.load()

    def test_overrides_version_mismatch(self, loader, root, write_manifest):
        write_manifest({}, version="2.0.0")
        write_json(root / "manifest.overrides.json", {"version": "1.0.0"})
        with pytest.raises(ManifestError, match="mismatch"):
            loader.load()

    def test_yaml_manifest(self, loader, root):
        (root / "manifest.yaml").write_text(
            "version: '1.0.0'\n"
            "configs:\n"
            "  gitconfig:\n"
            "    source: configs/gitconfig\n"
            "    target: ~/.gitconfig\n"
        )
        manifest = loader.load()
        assert manifest.configs["gitconfig"].target == "~/.gitconfig"

    def test_toml_manifest(self, loader, root):
        (root / "manifest.toml").write_text(
            'version = "1.0.0"\n'
            '\n'
            '[configs.gitconfig]\n'
            'source = "configs/gitconfig"\n'
            'target = "~/.gitconfig"\n'
        )
        manifest = loader.load()
        assert manifest.configs["gitconfig"].source == "configs/gitconfig"

    def test_unparsable_yaml(self, loader, root):
        (root / "manifest.yaml").write_text("version: [unclosed\n")
        with pytest.raises(ManifestError):
            loader.load()

    def test_reloaded_on_every_call(self, loader, write_manifest):
        write_manifest({"a": {"source": "configs/a", "target": "~/a"}})
        assert list(loader.load().configs) == ["a"]

        write_manifest({"b": {"source": "configs/b", "target": "~/b"}})
        assert list(loader.load().configs) == ["b"]

    def test_dependencies_exposed(self, loader, root):
        write_json(root / "manifest.json", {"version": "1", "dependencies": {"tools": ["rg"]}})
        assert loader.load().dependencies == {"tools": ["rg"]}


class TestManifest:
    """Test Manifest helpers."""

    def test_sorted_entries(self):
        manifest = Manifest.from_dict({
            "version": "1",
            "configs": {
                "b": {"source": "configs/b", "target": "~/b"},
                "a": {"source": "configs/a", "target": "~/a"},
            },
        })
        assert [e.key for e in manifest.sorted_entries()] == ["a", "b"]
        assert manifest.get_entry("missing") is None
