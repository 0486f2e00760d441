"""Finalize node - write resolved files and report."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from conflux.core.config import Phase, State
from conflux.core.log import logger
from conflux.ui.summary import print_summary
from conflux.workflow.deps import SessionDeps


@dataclass
class Finalize(BaseNode[State, SessionDeps, int]):
    """Write every conflicted file in discovery order, then summarize.

    A failed write stops here: earlier files stay written and later
    ones keep their original content.
    """

    async def run(
        self, ctx: GraphRunContext[State, SessionDeps]
    ) -> End[int]:
        session = ctx.state.runtime.session
        session.enter(Phase.QUITTING)

        for conflict_file in session.files:
            conflict_file.write_changes()
            logger.debug("Wrote file", file=conflict_file.name)

        counts = print_summary(ctx.deps.console, session.registry)
        logger.info(
            "Session complete",
            **{kind.value: count for kind, count in counts.items()},
        )
        return End(0)
