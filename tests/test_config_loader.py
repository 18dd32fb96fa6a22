"""Tests for notes_worktree.config_loader — hierarchical settings loading."""

import pytest

from notes_worktree.config_loader import (
    CONFIG_ENV_VAR,
    _interpolate_recursive,
    discover_config_files,
    interpolate_env_vars,
    load_hierarchical_config,
)
from notes_worktree.errors import ConfigError

# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("NOTES_DIR", "docs-notes")
        assert interpolate_env_vars("${NOTES_DIR}") == "docs-notes"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert (
            interpolate_env_vars("${UNSET_VAR_XYZ:-fallback}")
            == "fallback"
        )

    def test_default_ignored_when_set(self, monkeypatch):
        monkeypatch.setenv("MY_LEVEL", "DEBUG")
        assert interpolate_env_vars("${MY_LEVEL:-INFO}") == "DEBUG"

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR", "")
        assert (
            interpolate_env_vars("${EMPTY_VAR:-fallback}") == "fallback"
        )

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("LOG_PATH", "/var/log/notes.log")
        data = {
            "logging": {"file": "${LOG_PATH}", "level": "INFO"},
            "sync": {"skip_dirs": ["${UNSET_ABC:-build}", "dist"], "interactive": True},
        }
        assert _interpolate_recursive(data) == {
            "logging": {"file": "/var/log/notes.log", "level": "INFO"},
            "sync": {"skip_dirs": ["build", "dist"], "interactive": True},
        }


# -------------------------------------------------------------------------
# Convention-based file discovery
# -------------------------------------------------------------------------


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty CWD and a fake HOME."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "fakehome"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return tmp_path


class TestDiscoverConfigFiles:
    """Tests for discover_config_files() precedence and filtering."""

    def test_none_found(self, isolated):
        assert discover_config_files() == []

    def test_env_var_takes_highest_precedence(self, isolated, monkeypatch):
        custom = isolated / "custom.yml"
        custom.write_text("sync: {}\n")
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("sync: {}\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

        assert discover_config_files() == [custom.resolve(), project]

    def test_project_before_global(self, isolated):
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("a: 1\n")
        global_cfg = isolated / "fakehome" / ".config" / "notes_worktree" / "config.yml"
        global_cfg.parent.mkdir(parents=True)
        global_cfg.write_text("b: 2\n")

        assert discover_config_files() == [project, global_cfg]

    def test_missing_env_path_skipped(self, isolated, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(isolated / "nope.yml"))
        assert discover_config_files() == []


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    def test_zero_config(self, isolated):
        assert load_hierarchical_config() == {}

    def test_project_wins_shallow(self, isolated):
        global_cfg = isolated / "fakehome" / ".config" / "notes_worktree" / "config.yml"
        global_cfg.parent.mkdir(parents=True)
        global_cfg.write_text(
            "logging:\n  level: DEBUG\n  format: json\nsync:\n  worktree: docs\n"
        )
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("logging:\n  level: WARNING\n")

        merged = load_hierarchical_config()

        # Top-level sections replace, not deep-merge
        assert merged["logging"] == {"level": "WARNING"}
        assert merged["sync"] == {"worktree": "docs"}

    def test_interpolates_after_merge(self, isolated, monkeypatch):
        monkeypatch.setenv("NOTES_LOG", "/tmp/notes.log")
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("logging:\n  file: ${NOTES_LOG}\n")

        assert load_hierarchical_config() == {"logging": {"file": "/tmp/notes.log"}}

    def test_non_dict_root_skipped(self, isolated):
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("- just\n- a list\n")

        assert load_hierarchical_config() == {}

    def test_invalid_yaml_raises_config_error(self, isolated):
        project = isolated / ".notes_worktree" / "config.yml"
        project.parent.mkdir()
        project.write_text("logging: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_hierarchical_config()
