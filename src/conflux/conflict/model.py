"""Conflict handles and the files that contain them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from conflux.conflict.parser import BASE, END, SEPARATOR, START, has_markers, parse
from conflux.core.errors import MarkerError, WriteError


class Resolution(str, Enum):
    """How a conflict was resolved."""

    UNRESOLVED = "unresolved"
    LOCAL = "local"
    INCOMING = "incoming"
    BOTH = "both"
    CUSTOM = "custom"


def split_lines(text: str) -> tuple[list[str], str, bool]:
    """Split text into lines.

    Returns:
        (lines without endings, newline style, whether the text ended
        with a newline)
    """
    newline = "\r\n" if "\r\n" in text else "\n"
    trailing = text.endswith("\n")
    lines = text.split("\n")
    if trailing:
        lines.pop()
    if newline == "\r\n":
        lines = [line.removesuffix("\r") for line in lines]
    return lines, newline, trailing


@dataclass(eq=False)
class Conflict:
    """One conflict region of a file.

    start and end are the 1-based line numbers of the start and end
    markers in the file as it was read; they do not move when the
    conflict is resolved or edited.
    """

    start: int
    end: int
    local_lines: list[str]
    incoming_lines: list[str]
    base_lines: list[str] | None = None
    local_ref: str = "ours"
    incoming_ref: str = "theirs"
    base_ref: str = ""
    resolution: Resolution = Resolution.UNRESOLVED
    custom_lines: list[str] = field(default_factory=list)
    top_peek: int = 0
    bottom_peek: int = 0
    edited: bool = False
    file: ConflictFile | None = field(default=None, repr=False)

    @property
    def identity(self) -> str:
        name = self.file.name if self.file else "?"
        return f"{name}:{self.start}"

    @property
    def resolved(self) -> bool:
        return self.resolution is not Resolution.UNRESOLVED

    def resolve(self, resolution: Resolution) -> None:
        """Pick one side, or both.

        Custom resolutions only come from update().
        """
        if resolution in (Resolution.UNRESOLVED, Resolution.CUSTOM):
            raise ValueError(f"cannot resolve to {resolution.value!r}")
        self.resolution = resolution

    def resolved_lines(self) -> list[str] | None:
        if self.resolution is Resolution.LOCAL:
            return list(self.local_lines)
        if self.resolution is Resolution.INCOMING:
            return list(self.incoming_lines)
        if self.resolution is Resolution.BOTH:
            return self.local_lines + self.incoming_lines
        if self.resolution is Resolution.CUSTOM:
            return list(self.custom_lines)
        return None

    def marker_lines(self) -> list[str]:
        """The region as it would appear in the file, markers included."""
        lines = [f"{START} {self.local_ref}", *self.local_lines]
        if self.base_lines is not None:
            lines += [f"{BASE} {self.base_ref}".rstrip(), *self.base_lines]
        lines += [SEPARATOR, *self.incoming_lines, f"{END} {self.incoming_ref}"]
        return lines

    def editable_lines(self) -> list[str]:
        """What the editor is given: a custom resolution, else the markers."""
        if self.resolution is Resolution.CUSTOM:
            return list(self.custom_lines)
        return self.marker_lines()

    def update(self, lines: list[str]) -> None:
        """Replace the content with lines returned from an editor.

        Lines free of conflict markers become a custom resolution.
        Lines holding exactly one conflict replace the local, base and
        incoming sides and leave the conflict unresolved.

        Raises:
            MarkerError: If markers are malformed, more than one
                conflict is present, or text sits outside the markers.
                The conflict is unchanged in that case.
        """
        lines = list(lines)
        found = parse(lines)

        if not found:
            if has_markers(lines):
                raise MarkerError(
                    f"{self.identity}: stray conflict markers in edited text"
                )
            self.custom_lines = lines
            self.resolution = Resolution.CUSTOM
            return

        if len(found) != 1:
            raise MarkerError(
                f"{self.identity}: expected one conflict after editing, "
                f"found {len(found)}"
            )

        edited = found[0]
        outside = lines[:edited.start - 1] + lines[edited.end:]
        if any(line.strip() for line in outside):
            raise MarkerError(
                f"{self.identity}: edited text outside the conflict markers"
            )

        self.local_lines = edited.local_lines
        self.base_lines = edited.base_lines
        self.incoming_lines = edited.incoming_lines
        self.local_ref = edited.local_ref
        self.incoming_ref = edited.incoming_ref
        self.base_ref = edited.base_ref
        self.custom_lines = []
        self.resolution = Resolution.UNRESOLVED
        self.edited = True

    def context_before(self) -> list[str]:
        if not self.file or self.top_peek <= 0:
            return []
        first = max(0, self.start - 1 - self.top_peek)
        return self.file.lines[first:self.start - 1]

    def context_after(self) -> list[str]:
        if not self.file or self.bottom_peek <= 0:
            return []
        return self.file.lines[self.end:self.end + self.bottom_peek]


@dataclass(eq=False)
class ConflictFile:
    """A file holding one or more conflicts.

    lines always holds the content as read; resolutions are applied
    only when the file is rendered or written.
    """

    path: Path
    name: str
    lines: list[str]
    conflicts: list[Conflict] = field(default_factory=list)
    newline: str = "\n"
    trailing_newline: bool = True

    @classmethod
    def from_text(
        cls, path: Path, text: str, name: str | None = None
    ) -> ConflictFile:
        """Build from text.

        Raises:
            MarkerError: If the conflict markers are malformed
        """
        lines, newline, trailing = split_lines(text)
        conflict_file = cls(
            path=Path(path),
            name=name or str(path),
            lines=lines,
            newline=newline,
            trailing_newline=trailing,
        )
        conflict_file.conflicts = parse(lines)
        for conflict in conflict_file.conflicts:
            conflict.file = conflict_file
        return conflict_file

    @classmethod
    def load(cls, path: Path, name: str | None = None) -> ConflictFile:
        """Read and parse a file.

        Raises:
            OSError, UnicodeDecodeError: If the file cannot be read
            MarkerError: If the conflict markers are malformed
        """
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
        return cls.from_text(path, text, name)

    def render(self) -> str:
        """File content with every resolution applied."""
        lines = list(self.lines)
        for conflict in reversed(self.conflicts):
            replacement = conflict.resolved_lines()
            if replacement is None:
                if not conflict.edited:
                    continue
                replacement = conflict.marker_lines()
            lines[conflict.start - 1:conflict.end] = replacement

        text = self.newline.join(lines)
        if self.trailing_newline and lines:
            text += self.newline
        return text

    def write_changes(self) -> None:
        """Persist the rendered content.

        Raises:
            WriteError: If the file cannot be written
        """
        content = self.render()
        try:
            with open(self.path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise WriteError(f"{self.name}: {e.strerror or e}") from e
