"""Tests for configuration loading and merging."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from extkit.config.loader import (
    config_layers,
    get_extension_config_path,
    get_user_config_path,
    load_config,
    load_yaml_config,
    save_config,
)
from extkit.config.schema import DEFAULT_CONFIG, ExtkitConfig


class TestExtkitConfig:
    """Tests for ExtkitConfig dataclass."""

    def test_default_config_values(self) -> None:
        """Test that DEFAULT_CONFIG has expected values."""
        assert DEFAULT_CONFIG.manifest == "extension.json"
        assert DEFAULT_CONFIG.commands_dir == "commands"
        assert DEFAULT_CONFIG.templates_dir == "templates"
        assert DEFAULT_CONFIG.setup_policy == "skip-existing"
        assert DEFAULT_CONFIG.exclude == (".git", ".github")
        assert DEFAULT_CONFIG.dist_dir == "dist"

    def test_merge_prefers_other_values(self) -> None:
        """Test that merge prefers values from 'other' when set."""
        base = ExtkitConfig(commands_dir="commands", setup_policy="skip-existing")
        override = ExtkitConfig(commands_dir="cmds", setup_policy="overwrite")
        merged = base.merge(override)

        assert merged.commands_dir == "cmds"
        assert merged.setup_policy == "overwrite"

    def test_merge_preserves_base_when_other_is_none(self) -> None:
        """Test that merge preserves base values when other is None."""
        base = ExtkitConfig(commands_dir="commands", dist_dir="dist")
        override = ExtkitConfig(commands_dir="cmds")
        merged = base.merge(override)

        assert merged.commands_dir == "cmds"
        assert merged.dist_dir == "dist"

    def test_merge_combines_substitutions(self) -> None:
        """Test that substitution mappings merge key by key."""
        base = ExtkitConfig(substitutions={"author": "base", "license": "MIT"})
        override = ExtkitConfig(substitutions={"author": "local"})
        merged = base.merge(override)

        assert merged.substitutions == {"author": "local", "license": "MIT"}

    def test_merge_returns_new_instance(self) -> None:
        """Test that merge returns a new instance, not mutating originals."""
        base = ExtkitConfig(commands_dir="commands")
        override = ExtkitConfig(dist_dir="out")
        merged = base.merge(override)

        assert merged is not base
        assert merged is not override
        assert base.dist_dir is None
        assert override.commands_dir is None

    def test_to_dict_excludes_none(self) -> None:
        """Test that to_dict excludes None values."""
        config = ExtkitConfig(commands_dir="commands", exclude=(".git",))
        data = config.to_dict()

        assert data == {"commands_dir": "commands", "exclude": [".git"]}

    def test_from_dict_creates_config(self) -> None:
        """Test that from_dict creates an ExtkitConfig from a dictionary."""
        data = {
            "manifest": "ext.json",
            "setup_policy": "overwrite",
            "exclude": [".git", "node_modules"],
            "substitutions": {"year": 2026},
        }
        config = ExtkitConfig.from_dict(data)

        assert config.manifest == "ext.json"
        assert config.setup_policy == "overwrite"
        assert config.exclude == (".git", "node_modules")
        assert config.substitutions == {"year": "2026"}

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test that from_dict ignores unknown keys."""
        config = ExtkitConfig.from_dict({"commands_dir": "cmds", "unknown": 1})

        assert config.commands_dir == "cmds"
        assert not hasattr(config, "unknown")

    def test_from_dict_drops_invalid_policy(self) -> None:
        """Test that an unrecognized setup policy is treated as not set."""
        config = ExtkitConfig.from_dict({"setup_policy": "merge"})

        assert config.setup_policy is None

    def test_from_dict_roundtrip(self) -> None:
        """Test that to_dict output recreates an equal config."""
        config = ExtkitConfig(
            commands_dir="cmds",
            setup_policy="overwrite",
            exclude=(".git",),
            substitutions={"author": "someone"},
        )

        assert ExtkitConfig.from_dict(config.to_dict()) == config


class TestConfigPaths:
    """Tests for config path functions."""

    def test_get_user_config_path(self) -> None:
        """Test that the user config path is in ~/.extkit/."""
        path = get_user_config_path()
        assert path.name == "config.yaml"
        assert path.parent.name == ".extkit"
        assert path.parent.parent == Path.home()

    def test_get_extension_config_path(self, tmp_path: Path) -> None:
        """Test that the extension config lives under the extension root."""
        path = get_extension_config_path(tmp_path / "ext")
        assert path == tmp_path / "ext" / ".extkit" / "config.yaml"

    def test_config_layers_order(self, tmp_path: Path) -> None:
        """Test that the extension layer comes after the user layer."""
        labels = [label for label, _ in config_layers(tmp_path)]
        assert labels == ["User", "Extension"]


class TestConfigLoading:
    """Tests for config file loading."""

    def test_load_yaml_config_returns_dict(self, tmp_path: Path) -> None:
        """Test that load_yaml_config returns a dictionary."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("commands_dir: cmds\ndist_dir: out\n")

        data = load_yaml_config(config_file)
        assert data == {"commands_dir": "cmds", "dist_dir": "out"}

    def test_load_yaml_config_returns_none_for_missing_file(
        self, tmp_path: Path
    ) -> None:
        """Test that load_yaml_config returns None for missing file."""
        assert load_yaml_config(tmp_path / "nonexistent.yaml") is None

    def test_load_yaml_config_returns_none_for_empty_file(self, tmp_path: Path) -> None:
        """Test that load_yaml_config returns None for empty file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_yaml_config(config_file) is None

    def test_load_yaml_config_returns_none_for_invalid_yaml(
        self, tmp_path: Path
    ) -> None:
        """Test that load_yaml_config returns None for invalid YAML."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        assert load_yaml_config(config_file) is None

    def test_load_yaml_config_returns_none_for_list(self, tmp_path: Path) -> None:
        """Test that a top-level list is not accepted as config."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        assert load_yaml_config(config_file) is None


class TestConfigMerging:
    """Tests for config loading and merging."""

    def test_load_config_uses_defaults_when_no_files(self, tmp_path: Path) -> None:
        """Test that load_config uses defaults when no config files exist."""
        user_config = tmp_path / "home" / ".extkit" / "config.yaml"

        with patch(
            "extkit.config.loader.get_user_config_path", return_value=user_config
        ):
            config = load_config(tmp_path / "ext")

        assert config == DEFAULT_CONFIG

    def test_load_config_extension_overrides_user(self, tmp_path: Path) -> None:
        """Test that the extension's config overrides user config values."""
        user_config = tmp_path / "home" / ".extkit" / "config.yaml"
        root = tmp_path / "ext"
        extension_config = root / ".extkit" / "config.yaml"

        user_config.parent.mkdir(parents=True)
        user_config.write_text(
            "setup_policy: overwrite\nsubstitutions:\n  author: Home\n"
        )
        extension_config.parent.mkdir(parents=True)
        extension_config.write_text(
            "dist_dir: release\nsubstitutions:\n  team: core\n"
        )

        with patch(
            "extkit.config.loader.get_user_config_path", return_value=user_config
        ):
            config = load_config(root)

        # User value preserved
        assert config.setup_policy == "overwrite"
        # Extension override applied
        assert config.dist_dir == "release"
        assert config.substitutions == {"author": "Home", "team": "core"}
        # Default values still apply
        assert config.commands_dir == "commands"

    def test_load_config_ignores_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a config in the working directory is not applied."""
        user_config = tmp_path / "home" / ".extkit" / "config.yaml"
        cwd = tmp_path / "elsewhere"
        (cwd / ".extkit").mkdir(parents=True)
        (cwd / ".extkit" / "config.yaml").write_text("commands_dir: other\n")
        monkeypatch.chdir(cwd)

        with patch(
            "extkit.config.loader.get_user_config_path", return_value=user_config
        ):
            config = load_config(tmp_path / "ext")

        assert config.commands_dir == "commands"


class TestConfigSaving:
    """Tests for config file saving."""

    def test_save_config_creates_file(self, tmp_path: Path) -> None:
        """Test that save_config writes only the values that are set."""
        config_file = tmp_path / "deep" / ".extkit" / "config.yaml"
        config = ExtkitConfig(commands_dir="cmds", exclude=(".git", "build"))

        save_config(config, config_file)

        with config_file.open() as f:
            data = yaml.safe_load(f)
        assert data == {"commands_dir": "cmds", "exclude": [".git", "build"]}
