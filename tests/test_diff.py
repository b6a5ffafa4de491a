"""Tests for the line diff."""

from __future__ import annotations

from parrot.utils.diff import DiffKind, DiffLine, diff_lines, split_lines


def kinds(lines):
    return [line.kind for line in lines]


class TestSplitLines:
    def test_keeps_carriage_return(self):
        assert split_lines(b"a\r\nb") == [b"a\r", b"b"]

    def test_trailing_newline(self):
        assert split_lines(b"hi\n") == [b"hi", b""]


class TestDiffLines:
    def test_identical_blob_reconstructs(self):
        blob = b"one\ntwo\r\n\nthree\n"
        lines = diff_lines(blob, blob)
        assert all(line.kind is DiffKind.UNCHANGED for line in lines)
        assert b"\n".join(line.content for line in lines) == blob

    def test_empty_blobs(self):
        assert diff_lines(b"", b"") == [DiffLine(DiffKind.UNCHANGED, b"")]

    def test_replaced_line(self):
        lines = diff_lines(b"hi\n", b"bye\n")
        assert lines == [
            DiffLine(DiffKind.REMOVED, b"hi"),
            DiffLine(DiffKind.ADDED, b"bye"),
            DiffLine(DiffKind.UNCHANGED, b""),
        ]

    def test_insertion_in_the_middle(self):
        lines = diff_lines(b"a\nb\nc", b"a\nb\nx\nc")
        assert kinds(lines) == [
            DiffKind.UNCHANGED,
            DiffKind.UNCHANGED,
            DiffKind.ADDED,
            DiffKind.UNCHANGED,
        ]
        assert lines[2].content == b"x"

    def test_removed_before_added_in_block(self):
        lines = diff_lines(b"a\nold1\nold2\nz", b"a\nnew1\nz")
        assert kinds(lines) == [
            DiffKind.UNCHANGED,
            DiffKind.REMOVED,
            DiffKind.REMOVED,
            DiffKind.ADDED,
            DiffKind.UNCHANGED,
        ]

    def test_edit_script_is_minimal(self):
        old = b"a\nb\nc\nd\ne"
        new = b"b\nc\nx\ne\nf"
        lines = diff_lines(old, new)
        unchanged = [line.content for line in lines if line.kind is DiffKind.UNCHANGED]
        assert unchanged == [b"b", b"c", b"e"]
        # Both sides can be rebuilt from the script.
        assert [l.content for l in lines if l.kind is not DiffKind.ADDED] == old.split(b"\n")
        assert [l.content for l in lines if l.kind is not DiffKind.REMOVED] == new.split(b"\n")

    def test_binary_content(self):
        old = b"\x00\xff\n\x80"
        new = b"\x00\xff\n\x81"
        lines = diff_lines(old, new)
        assert lines[0] == DiffLine(DiffKind.UNCHANGED, b"\x00\xff")
        assert lines[1:] == [DiffLine(DiffKind.REMOVED, b"\x80"), DiffLine(DiffKind.ADDED, b"\x81")]
