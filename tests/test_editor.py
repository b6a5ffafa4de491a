"""Tests for the editor integration."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import click
import pytest

from parrot.errors import EditorError
from parrot.services.editor import EDIT_FILE, Editor, parse_edit, render_template


def fake_editor(new_text: str):
    """Simulate a user who replaces the scratch file content and saves."""

    def edit(filename: str, editor=None, **kwargs):
        path = Path(filename)
        original = path.stat().st_mtime_ns
        path.write_text(new_text, encoding="utf-8")
        # Guarantee a different mtime on coarse filesystems.
        os.utime(path, ns=(original + 1_000_000_000, original + 1_000_000_000))

    return edit


class TestParseEdit:
    def test_full_template(self):
        text = render_template("echo hi", name="Greet", description="Says hi", tags=["b", "a"])
        result = parse_edit(text)
        assert result.name == "Greet"
        assert result.description == "Says hi"
        assert result.tags == ["a", "b"]

    def test_empty_template(self):
        result = parse_edit(render_template("echo hi"))
        assert result.name is None
        assert result.description is None
        assert result.tags == []

    def test_tags_split_on_commas_and_spaces(self):
        result = parse_edit("tags: smoke, slow  cli\n")
        assert result.tags == ["smoke", "slow", "cli"]

    def test_comments_ignored(self):
        result = parse_edit("# name: nope\nname: real\nline one\n# hidden\nline two\n")
        assert result.name == "real"
        assert result.description == "line one\nline two"


class TestEditor:
    def test_open_for_new(self, app_config, tmp_path):
        editor = Editor(app_config)
        with patch("parrot.services.editor.typer.edit", side_effect=fake_editor("name: My Snap\ntags: x\n\nHello\n")):
            result = editor.open_for_new(tmp_path, "echo hi")
        assert result.name == "My Snap"
        assert result.tags == ["x"]
        assert result.description == "Hello"
        assert not (tmp_path / EDIT_FILE).exists()

    def test_open_for_edit_prefills(self, app_config, tmp_path):
        seen = {}

        def edit(filename: str, editor=None, **kwargs):
            seen["text"] = Path(filename).read_text(encoding="utf-8")
            fake_editor(seen["text"].replace("Old", "New"))(filename)

        with patch("parrot.services.editor.typer.edit", side_effect=edit):
            result = Editor(app_config).open_for_edit(tmp_path, "greet", "Old text", "echo hi", {"smoke"})
        assert "name: greet" in seen["text"]
        assert "tags: smoke" in seen["text"]
        assert "# cmd: echo hi" in seen["text"]
        assert result.description == "New text"

    def test_unsaved_file_is_cancelled(self, app_config, tmp_path):
        with patch("parrot.services.editor.typer.edit", return_value=None):
            with pytest.raises(EditorError) as exc_info:
                Editor(app_config).open_for_new(tmp_path, "echo hi")
        assert "without saving" in exc_info.value.message
        assert not (tmp_path / EDIT_FILE).exists()

    def test_editor_failure(self, app_config, tmp_path):
        with patch("parrot.services.editor.typer.edit", side_effect=click.ClickException("vim: Editing failed")):
            with pytest.raises(EditorError) as exc_info:
                Editor(app_config).open_for_new(tmp_path, "echo hi")
        assert "Editing failed" in exc_info.value.message

    def test_configured_editor_is_used(self, app_config, tmp_path):
        app_config.editor.command = "nano"
        with patch("parrot.services.editor.typer.edit", side_effect=fake_editor("name: x\n")) as edit:
            Editor(app_config).open_for_new(tmp_path, "echo hi")
        assert edit.call_args.kwargs["editor"] == "nano"
