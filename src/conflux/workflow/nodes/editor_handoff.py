"""EditorHandoff node - let the external editor change the active conflict."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from conflux.core.config import Phase, State
from conflux.core.errors import MarkerError
from conflux.core.log import logger
from conflux.workflow.deps import SessionDeps


@dataclass
class EditorHandoff(BaseNode[State, SessionDeps, int]):
    """Edit the active conflict while no UI context is alive.

    Cursor, registry and miss counter carry over untouched; a rejected
    edit counts as one miss, and once the counter is already past the
    threshold it makes the next UI context apply the fallback.
    """

    async def run(
        self, ctx: GraphRunContext[State, SessionDeps]
    ) -> RunInterface:
        session = ctx.state.runtime.session
        session.enter(Phase.EDITOR_HANDOFF)
        session.handoffs += 1

        conflict = session.registry.active()
        lines = ctx.deps.open_editor(conflict, ctx.state.config.editor)

        try:
            conflict.update(lines)
        except MarkerError as e:
            logger.warn("Edit rejected", conflict=conflict.identity, error=str(e))
            if session.tracker.record_failure():
                logger.warn(
                    "Too many failed edits, applying fallback",
                    conflict=conflict.identity,
                    threshold=session.tracker.threshold,
                )
                session.pending_fallback = True
        else:
            logger.info(
                "Conflict edited",
                conflict=conflict.identity,
                resolution=conflict.resolution.value,
            )

        from conflux.workflow.nodes.run_interface import RunInterface
        return RunInterface()
