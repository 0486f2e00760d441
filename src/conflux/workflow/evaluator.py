"""Command evaluator: turns prompt input into actions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conflux.conflict.model import Conflict, Resolution
from conflux.core.keys import HELP_KEY, KeyBinding
from conflux.core.log import logger
from conflux.workflow.outcome import (
    Applied,
    EditorRequested,
    Outcome,
    Quit,
    UnknownCommand,
)

if TYPE_CHECKING:
    from conflux.ui.presenter import Presenter

_RESOLUTIONS = {
    "select_local": Resolution.LOCAL,
    "select_incoming": Resolution.INCOMING,
    "select_both": Resolution.BOTH,
}


class Evaluator:
    """Applies each character of the input in order.

    Every character is looked up in the key binding and applied to the
    conflict that is active at that moment, so "aa" resolves two
    conflicts. The first character that is not bound stops evaluation
    with UnknownCommand; what came before it stays applied.
    """

    def __init__(self, keys: KeyBinding):
        self.keys = keys

    def evaluate(
        self, presenter: Presenter, conflict: Conflict, text: str
    ) -> Outcome:
        text = text.strip()
        if not text:
            return Applied()
        if text == HELP_KEY:
            presenter.show_help()
            return Applied()

        for key in text:
            action = self.keys.action_for(key)
            if action is None:
                logger.debug("Unknown command", text=text, key=key)
                return UnknownCommand(text)

            logger.spew("Applying command", action=action, conflict=conflict.identity)
            outcome = self._apply(action, presenter, conflict)
            if outcome is not None:
                return outcome
            conflict = presenter.registry.active()

        return Applied()

    def _apply(
        self, action: str, presenter: Presenter, conflict: Conflict
    ) -> Outcome | None:
        if action in _RESOLUTIONS:
            conflict.resolve(_RESOLUTIONS[action])
            logger.info(
                "Conflict resolved",
                conflict=conflict.identity,
                resolution=conflict.resolution.value,
            )
            if not presenter.advance():
                return Quit(reason="resolved")
        elif action == "edit":
            return EditorRequested()
        elif action == "quit":
            return Quit()
        elif action == "next":
            presenter.move(1)
        elif action == "previous":
            presenter.move(-1)
        elif action == "show_up":
            presenter.peek(conflict, above=True)
        elif action == "show_down":
            presenter.peek(conflict, above=False)
        elif action == "scroll_up":
            presenter.scroll(-1)
        elif action == "scroll_down":
            presenter.scroll(1)
        elif action == "toggle_view":
            presenter.toggle_orientation()
        elif action == "help":
            presenter.show_help()
        else:
            raise ValueError(f"no handler for action {action!r}")
        return None
