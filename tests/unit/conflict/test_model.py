"""Tests for conflict handles and file write-back."""

import pytest

from conflux.conflict.model import ConflictFile, Resolution, split_lines
from conflux.core.errors import MarkerError, WriteError


def load(tmp_path, text, name="file.py"):
    path = tmp_path / name
    path.write_bytes(text.encode("utf-8"))
    return ConflictFile.load(path, name)


def test_split_lines_detects_crlf():
    lines, newline, trailing = split_lines("a\r\nb\r\n")

    assert lines == ["a", "b"]
    assert newline == "\r\n"
    assert trailing


def test_split_lines_without_trailing_newline():
    lines, newline, trailing = split_lines("a\nb")

    assert lines == ["a", "b"]
    assert newline == "\n"
    assert not trailing


def test_conflicts_are_attached_to_their_file(tmp_path, two_conflicts):
    conflict_file = load(tmp_path, two_conflicts, "two.txt")

    assert len(conflict_file.conflicts) == 2
    assert all(c.file is conflict_file for c in conflict_file.conflicts)
    assert conflict_file.conflicts[1].identity == "two.txt:8"


@pytest.mark.parametrize("resolution, expected", [
    (Resolution.LOCAL, ["local one"]),
    (Resolution.INCOMING, ["incoming one"]),
    (Resolution.BOTH, ["local one", "incoming one"]),
])
def test_resolved_lines(tmp_path, two_conflicts, resolution, expected):
    conflict = load(tmp_path, two_conflicts).conflicts[0]
    conflict.resolve(resolution)

    assert conflict.resolved
    assert conflict.resolved_lines() == expected


def test_resolve_refuses_custom_and_unresolved(tmp_path, two_sides):
    conflict = load(tmp_path, two_sides).conflicts[0]

    with pytest.raises(ValueError):
        conflict.resolve(Resolution.CUSTOM)
    with pytest.raises(ValueError):
        conflict.resolve(Resolution.UNRESOLVED)


def test_render_applies_resolutions_and_keeps_unresolved(tmp_path, two_conflicts):
    conflict_file = load(tmp_path, two_conflicts)
    conflict_file.conflicts[1].resolve(Resolution.INCOMING)

    assert conflict_file.render() == (
        "header\n"
        "<<<<<<< HEAD\n"
        "local one\n"
        "=======\n"
        "incoming one\n"
        ">>>>>>> feature\n"
        "middle\n"
        "incoming two\n"
        "footer\n"
    )


def test_write_changes_preserves_crlf(tmp_path, two_sides):
    text = two_sides.replace("\n", "\r\n")
    conflict_file = load(tmp_path, text)
    conflict_file.conflicts[0].resolve(Resolution.LOCAL)

    conflict_file.write_changes()

    assert (tmp_path / "file.py").read_bytes() == (
        b'def greet():\r\n    return "hello"\r\n'
    )


def test_write_changes_preserves_missing_trailing_newline(tmp_path, two_sides):
    conflict_file = load(tmp_path, two_sides.rstrip("\n"))
    conflict_file.conflicts[0].resolve(Resolution.INCOMING)

    conflict_file.write_changes()

    assert (tmp_path / "file.py").read_text() == 'def greet():\n    return "hi"'


def test_write_failure_raises_write_error(tmp_path, two_sides):
    conflict_file = load(tmp_path, two_sides)
    conflict_file.path = tmp_path / "missing" / "file.py"

    with pytest.raises(WriteError, match="file.py"):
        conflict_file.write_changes()


def test_update_without_markers_is_custom(tmp_path, two_sides):
    conflict = load(tmp_path, two_sides).conflicts[0]

    conflict.update(['    return "hey"'])

    assert conflict.resolution is Resolution.CUSTOM
    assert conflict.resolved_lines() == ['    return "hey"']
    assert conflict.editable_lines() == ['    return "hey"']


def test_update_with_one_conflict_replaces_sides(tmp_path, two_sides):
    conflict_file = load(tmp_path, two_sides)
    conflict = conflict_file.conflicts[0]

    conflict.update([
        "<<<<<<< HEAD",
        "    return 'hello'",
        "=======",
        "    return 'hi!'",
        ">>>>>>> feature",
    ])

    assert not conflict.resolved
    assert conflict.edited
    assert conflict.local_lines == ["    return 'hello'"]
    assert conflict.incoming_lines == ["    return 'hi!'"]
    # The edited markers are what gets written if it stays unresolved.
    assert "    return 'hi!'" in conflict_file.render()


@pytest.mark.parametrize("lines", [
    [">>>>>>> stray"],
    ["<<<<<<< a", "x", "=======", "y"],
    ["<<<<<<<", "1", "=======", "2", ">>>>>>>",
     "<<<<<<<", "3", "=======", "4", ">>>>>>>"],
    ["extra", "<<<<<<<", "1", "=======", "2", ">>>>>>>"],
])
def test_update_rejects_invalid_edits(tmp_path, two_sides, lines):
    conflict = load(tmp_path, two_sides).conflicts[0]
    before = conflict.marker_lines()

    with pytest.raises(MarkerError):
        conflict.update(lines)

    assert conflict.resolution is Resolution.UNRESOLVED
    assert conflict.marker_lines() == before


def test_peeked_context(tmp_path, two_conflicts):
    conflict = load(tmp_path, two_conflicts).conflicts[1]
    conflict.top_peek = 2
    conflict.bottom_peek = 5

    assert conflict.context_before() == [">>>>>>> feature", "middle"]
    assert conflict.context_after() == ["footer"]
