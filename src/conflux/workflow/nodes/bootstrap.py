"""Bootstrap node - find conflicts and load the registry."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from conflux.core.config import Phase, State
from conflux.core.log import logger
from conflux.workflow.deps import SessionDeps


@dataclass
class Bootstrap(BaseNode[State, SessionDeps, int]):
    """Scan the working tree and prepare the session."""

    async def run(
        self, ctx: GraphRunContext[State, SessionDeps]
    ) -> RunInterface | End[int]:
        """Find conflicts and load them into the session.

        Returns:
            RunInterface: First UI context
            End[int]: Exit code 0 when there is nothing to resolve
        """
        session = ctx.state.runtime.session
        settings = ctx.state.config.session
        session.enter(Phase.BOOTSTRAPPING)

        session.tracker.threshold = settings.error_threshold
        session.orientation = settings.orientation
        logger.info(
            "Starting session",
            root=str(ctx.deps.root),
            **ctx.state.session_settings(),
        )

        files = ctx.deps.find(ctx.deps.root)
        if not files:
            logger.info("No conflicts found")
            ctx.deps.console.print("No conflicts detected 🎉", style="green")
            return End(0)

        session.load(files)
        logger.info(
            "Conflicts loaded",
            files=len(files),
            conflicts=session.registry.size(),
        )

        from conflux.workflow.nodes.run_interface import RunInterface
        return RunInterface()
