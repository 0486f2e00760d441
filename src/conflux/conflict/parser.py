"""Parse git conflict markers into Conflict objects."""

from __future__ import annotations

from conflux.core.errors import MarkerError

START = "<<<<<<<"
BASE = "|||||||"
SEPARATOR = "======="
END = ">>>>>>>"


def is_marker(line: str, marker: str) -> bool:
    """True if line is marker, optionally followed by a space and a label.

    Longer runs such as a "=========" heading underline are content.
    The separator never carries a label.
    """
    if line == marker:
        return True
    return marker != SEPARATOR and line.startswith(marker + " ")


def _find(lines: list[str], marker: str, start: int, stop_at: tuple = ()):
    """Index of the first marker line at or after start.

    Returns None when the file ends, or one of the stop_at markers
    comes first.
    """
    for j in range(start, len(lines)):
        if is_marker(lines[j], marker):
            return j
        if any(is_marker(lines[j], stop) for stop in stop_at):
            return None
    return None


def parse(lines: list[str]) -> list:
    """Parse conflict regions out of a file's lines.

    Args:
        lines: File content split into lines, without line endings

    Returns:
        Conflicts in file order. They are not yet attached to a
        ConflictFile.

    Raises:
        MarkerError: If a region is missing its separator or end
            marker, or a start marker appears inside a region
    """
    from conflux.conflict.model import Conflict

    conflicts = []
    i = 0
    while i < len(lines):
        if not is_marker(lines[i], START):
            i += 1
            continue

        line_no = i + 1
        base_idx = _find(lines, BASE, i + 1, stop_at=(SEPARATOR, START, END))
        separator_idx = _find(
            lines, SEPARATOR, (base_idx or i) + 1, stop_at=(START, END)
        )
        if separator_idx is None:
            raise MarkerError(
                f"Malformed conflict at line {line_no}: no separator found"
            )

        end_idx = _find(lines, END, separator_idx + 1, stop_at=(START,))
        if end_idx is None:
            raise MarkerError(
                f"Malformed conflict at line {line_no}: no end marker found"
            )

        local_end = base_idx if base_idx is not None else separator_idx
        conflicts.append(Conflict(
            start=line_no,
            end=end_idx + 1,
            local_lines=lines[i + 1:local_end],
            base_lines=(
                lines[base_idx + 1:separator_idx]
                if base_idx is not None else None
            ),
            incoming_lines=lines[separator_idx + 1:end_idx],
            local_ref=lines[i][len(START):].strip() or "ours",
            incoming_ref=lines[end_idx][len(END):].strip() or "theirs",
            base_ref=(
                lines[base_idx][len(BASE):].strip()
                if base_idx is not None else ""
            ),
        ))
        i = end_idx + 1

    return conflicts


def has_markers(lines: list[str]) -> bool:
    """True if any line looks like a start, base or end marker.

    A lone separator line is ordinary text (reST and setext headings).
    """
    return any(
        is_marker(line, marker) for line in lines for marker in (START, BASE, END)
    )
