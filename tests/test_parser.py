"""Tests for the session command parser."""

from __future__ import annotations

import pytest

from parrot.errors import InvalidArgument, ParseError, UnknownCommand, UnknownFilterKey
from parrot.session.parser import (
    Clear,
    Edit,
    Filter,
    Help,
    Quit,
    Run,
    Show,
    Target,
    Update,
    parse,
)
from parrot.session.predicates import ByName, ByStatus, BySubstring, ByTag
from parrot.session.scanner import scan
from parrot.storage.models import SnapshotStatus


def parse_line(line: str):
    return parse(scan(line))


class TestKeywords:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("quit", Quit()),
            ("q", Quit()),
            ("help", Help()),
            ("h", Help()),
            ("edit", Edit()),
            ("e", Edit()),
            ("clear", Clear()),
            ("QUIT", Quit()),
            ("Run", Run(Target.SELECTED)),
        ],
    )
    def test_keywords(self, line, expected):
        assert parse_line(line) == expected

    def test_abbreviations_are_exact(self):
        with pytest.raises(UnknownCommand):
            parse_line("r")
        with pytest.raises(UnknownCommand):
            parse_line("qu")
        with pytest.raises(UnknownCommand):
            parse_line("cl")

    def test_unknown_command(self):
        with pytest.raises(UnknownCommand) as exc_info:
            parse_line("launch")
        assert exc_info.value.token == "launch"
        assert "launch" in exc_info.value.message

    def test_flag_is_not_a_command(self):
        with pytest.raises(UnknownCommand):
            parse_line("--run")

    def test_empty_tokens(self):
        with pytest.raises(ParseError):
            parse([])

    def test_no_argument_commands_reject_arguments(self):
        with pytest.raises(InvalidArgument):
            parse_line("quit now")


class TestTargets:
    def test_run_all(self):
        assert parse_line("run all") == Run(Target.ALL)

    @pytest.mark.parametrize("word", ["sel", "selected", "SEL"])
    def test_selected_aliases(self, word):
        assert parse_line(f"show {word}") == Show(Target.SELECTED)

    def test_default_target_is_selected(self):
        assert parse_line("update") == Update(Target.SELECTED)
        assert parse_line("show") == Show(Target.SELECTED)

    def test_invalid_target(self):
        with pytest.raises(InvalidArgument) as exc_info:
            parse_line("run everything")
        assert "everything" in exc_info.value.message

    def test_too_many_targets(self):
        with pytest.raises(InvalidArgument):
            parse_line("run all sel")


class TestFilter:
    def test_filter_without_predicates(self):
        with pytest.raises(ParseError):
            parse_line("filter")

    def test_keyed_predicates(self):
        script = parse_line("filter tag:smoke status:failed name:greet")
        assert script == Filter(
            (ByTag("smoke"), ByStatus(SnapshotStatus.FAILED), ByName("greet"))
        )

    def test_bare_substring(self):
        assert parse_line("filter echo") == Filter((BySubstring("echo"),))

    def test_quoted_text_is_substring(self):
        assert parse_line('filter "tag:x"') == Filter((BySubstring("tag:x"),))

    def test_flag_form(self):
        assert parse_line("filter --tag smoke") == Filter((ByTag("smoke"),))

    def test_flag_without_value(self):
        with pytest.raises(InvalidArgument):
            parse_line("filter --tag")

    def test_unknown_filter_key(self):
        with pytest.raises(UnknownFilterKey) as exc_info:
            parse_line("filter color:red")
        assert exc_info.value.key == "color"

    def test_unknown_flag_key(self):
        with pytest.raises(UnknownFilterKey):
            parse_line("filter --color red")

    def test_invalid_status_value(self):
        with pytest.raises(InvalidArgument):
            parse_line("filter status:broken")

    def test_status_is_case_insensitive(self):
        assert parse_line("filter STATUS:Passed") == Filter((ByStatus(SnapshotStatus.PASSED),))

    def test_missing_value(self):
        with pytest.raises(InvalidArgument):
            parse_line("filter tag:")
