"""Collaborators the session graph calls out to."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from conflux.conflict import finder
from conflux.conflict.model import Conflict, ConflictFile
from conflux.core.config import Config, EditorConfig, SessionState
from conflux.editor import open_editor
from conflux.workflow.outcome import Outcome


async def open_interface(session: SessionState, config: Config) -> Outcome:
    """Run one textual UI context to completion.

    The app has released the terminal by the time this returns.
    """
    from conflux.ui.app import ConflictApp

    return await ConflictApp(session, config).run_interface()


@dataclass
class SessionDeps:
    """Everything outside the session controller itself.

    Tests swap in scripted interfaces and fake editors here.
    """

    find: Callable[[Path], list[ConflictFile]] = finder.find
    open_interface: Callable[[SessionState, Config], Awaitable[Outcome]] = (
        open_interface
    )
    open_editor: Callable[[Conflict, EditorConfig], list[str]] = open_editor
    console: Console = field(default_factory=Console)
    root: Path = field(default_factory=Path.cwd)
