"""Command dispatch: evaluate input and apply the tolerance policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conflux.conflict.model import Conflict
from conflux.core.log import logger
from conflux.workflow.evaluator import Evaluator
from conflux.workflow.outcome import (
    Applied,
    Fatal,
    Outcome,
    Quit,
    UnknownCommand,
)
from conflux.workflow.tolerance import ErrorToleranceTracker

if TYPE_CHECKING:
    from conflux.ui.presenter import Presenter


class CommandDispatch:
    """Forwards raw input to the evaluator and classifies the result.

    - Applied resets the miss counter.
    - UnknownCommand counts a miss; past the threshold the presenter
      is told to force the fallback resolution on the active conflict.
    - EditorRequested and Quit pass through untouched.
    - Anything the evaluator raises comes back as Fatal.
    """

    def __init__(self, evaluator: Evaluator, tracker: ErrorToleranceTracker):
        self.evaluator = evaluator
        self.tracker = tracker

    def evaluate(
        self, presenter: Presenter, conflict: Conflict, raw: str
    ) -> Outcome:
        try:
            outcome = self.evaluator.evaluate(presenter, conflict, raw)
        except Exception as e:
            logger.error(
                "Command evaluation failed",
                conflict=conflict.identity,
                input=raw,
                _exc_info=e,
            )
            return Fatal(e)

        if isinstance(outcome, Applied):
            self.tracker.record_success()
        elif isinstance(outcome, UnknownCommand):
            if self.tracker.record_unknown():
                # Earlier characters of the line may have moved the cursor.
                active = presenter.registry.active()
                logger.warn(
                    "Too many unknown commands, applying fallback",
                    conflict=active.identity,
                    threshold=self.tracker.threshold,
                )
                if not presenter.select(active, force_fallback=True):
                    return Quit(reason="resolved")
                return UnknownCommand(outcome.text, fallback=True)
        return outcome
