"""Ordered conflict handles with a cursor on the active one."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from conflux.conflict.model import Conflict, ConflictFile


class ConflictRegistry:
    """Every conflict of the session in discovery order.

    The registry knows identity and position only. The cursor moves
    when the presentation layer selects a conflict; the session
    controller reads it but never sets it.
    """

    def __init__(self, conflicts: Sequence[Conflict] = ()):
        self._conflicts = list(conflicts)
        self._cursor = 0

    @classmethod
    def from_files(cls, files: Sequence[ConflictFile]) -> ConflictRegistry:
        return cls([c for f in files for c in f.conflicts])

    def size(self) -> int:
        return len(self._conflicts)

    def __len__(self) -> int:
        return len(self._conflicts)

    def __iter__(self) -> Iterator[Conflict]:
        return iter(self._conflicts)

    @property
    def cursor(self) -> int:
        return self._cursor

    def at(self, index: int) -> Conflict:
        """Conflict at index.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self._conflicts):
            raise IndexError(
                f"conflict index {index} out of range "
                f"(registry holds {len(self._conflicts)})"
            )
        return self._conflicts[index]

    def active(self) -> Conflict:
        return self.at(self._cursor)

    def index_of(self, conflict: Conflict) -> int:
        for index, candidate in enumerate(self._conflicts):
            if candidate is conflict:
                return index
        raise ValueError(f"{conflict.identity} is not registered")

    def select(self, conflict: Conflict) -> bool:
        """Make conflict the active one.

        Returns:
            True if the cursor moved
        """
        index = self.index_of(conflict)
        moved = index != self._cursor
        self._cursor = index
        return moved

    def next_unresolved(self) -> Conflict | None:
        """First unresolved conflict after the cursor, wrapping around.

        The active conflict itself is considered last.
        """
        count = len(self._conflicts)
        for step in range(1, count + 1):
            candidate = self._conflicts[(self._cursor + step) % count]
            if not candidate.resolved:
                return candidate
        return None
