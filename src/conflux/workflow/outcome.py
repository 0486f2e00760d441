"""Outcomes of dispatching one line of user input.

A closed set of variants. EditorRequested, Quit and Fatal end the
current UI context; Applied and UnknownCommand keep it running.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Applied:
    """Input understood; state may have changed."""


@dataclass(frozen=True)
class UnknownCommand:
    """Input not understood.

    fallback is True when this miss triggered the fallback resolution.
    """

    text: str = ""
    fallback: bool = False


@dataclass(frozen=True)
class EditorRequested:
    """The active conflict is to be edited in the external editor."""


@dataclass(frozen=True)
class Quit:
    """The session is over, either on request or because nothing is left."""

    reason: str = "user"


@dataclass(frozen=True)
class Fatal:
    """Unrecoverable error; the session aborts."""

    error: BaseException


Outcome = Applied | UnknownCommand | EditorRequested | Quit | Fatal


def ends_interface(outcome: Outcome) -> bool:
    return isinstance(outcome, (EditorRequested, Quit, Fatal))


__all__ = [
    "Applied",
    "UnknownCommand",
    "EditorRequested",
    "Quit",
    "Fatal",
    "Outcome",
    "ends_interface",
]
