"""Tests for exclusion-pattern management."""

from __future__ import annotations

import json

import pytest

from notes_worktree.config import load_notes_config
from notes_worktree.errors import ConfigError
from notes_worktree.sync.patterns import (
    COMMIT_MESSAGE,
    add_patterns,
    list_patterns,
    remove_patterns,
    split_patterns,
)


class TestSplitPatterns:
    def test_comma_and_separate_args(self):
        assert split_patterns(["SKILL.md, CHANGELOG.md", "TODO.md", "SKILL.md"]) == [
            "CHANGELOG.md",
            "SKILL.md",
            "TODO.md",
        ]

    def test_empty_rejected(self):
        with pytest.raises(ConfigError, match="No patterns"):
            split_patterns([" , "])

    def test_path_separator_rejected(self):
        with pytest.raises(ConfigError, match="file names only"):
            split_patterns(["docs/SKILL.md"])


class TestAddPatterns:
    def test_add_writes_and_commits(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(exclude_patterns="TODO.md")
        fake_vcs.status_lines = [" M .notesrc"]

        change = add_patterns(ctx, fake_vcs, ["SKILL.md,TODO.md"])

        assert change.changed == ["SKILL.md"]
        assert change.unchanged == ["TODO.md"]
        assert change.patterns == ["SKILL.md", "TODO.md"]
        assert change.committed is True
        assert fake_vcs.commits == [(ctx.notes_root, [".notesrc"], COMMIT_MESSAGE)]
        stored = json.loads(ctx.config_path.read_text())
        assert stored["exclude_patterns"] == "SKILL.md,TODO.md"
        assert stored["worktree"] == "./notes"

    def test_no_commit(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(branch="notes")
        fake_vcs.status_lines = [" M .notesrc"]

        change = add_patterns(ctx, fake_vcs, ["SKILL.md"], no_commit=True)

        assert change.committed is False
        assert fake_vcs.commits == []
        assert load_notes_config(project).patterns == ["SKILL.md"]

    def test_nothing_to_add_leaves_file(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(exclude_patterns="SKILL.md")
        before = ctx.config_path.read_text()

        change = add_patterns(ctx, fake_vcs, ["SKILL.md"])

        assert change.changed == []
        assert ctx.config_path.read_text() == before
        assert fake_vcs.commits == []

    def test_missing_notesrc(self, fake_vcs, ctx):
        with pytest.raises(ConfigError, match="Config file not found"):
            add_patterns(ctx, fake_vcs, ["SKILL.md"])

    def test_unknown_keys_preserved(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(branch="notes")
        data = json.loads(ctx.config_path.read_text())
        data["created_by"] = "setup"
        ctx.config_path.write_text(json.dumps(data))

        add_patterns(ctx, fake_vcs, ["SKILL.md"], no_commit=True)

        assert json.loads(ctx.config_path.read_text())["created_by"] == "setup"


class TestRemovePatterns:
    def test_remove(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(exclude_patterns="SKILL.md,TODO.md")

        change = remove_patterns(ctx, fake_vcs, ["TODO.md", "NOPE.md"], no_commit=True)

        assert change.changed == ["TODO.md"]
        assert change.unchanged == ["NOPE.md"]
        assert load_notes_config(project).patterns == ["SKILL.md"]

    def test_remove_last_pattern(self, project, fake_vcs, make_ctx):
        ctx = make_ctx(exclude_patterns="SKILL.md")

        change = remove_patterns(ctx, fake_vcs, ["SKILL.md"], no_commit=True)

        assert change.patterns == []
        assert json.loads(ctx.config_path.read_text())["exclude_patterns"] == ""


class TestListPatterns:
    def test_list(self, make_ctx):
        ctx = make_ctx(exclude_patterns="b.md,a.md")
        assert list_patterns(ctx) == ["a.md", "b.md"]

    def test_list_defaults_empty(self, ctx):
        assert list_patterns(ctx) == []
