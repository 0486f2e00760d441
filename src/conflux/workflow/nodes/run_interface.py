"""RunInterface node - one UI context from creation to teardown."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from conflux.core.config import Phase, SessionState, State
from conflux.core.log import logger
from conflux.workflow.deps import SessionDeps
from conflux.workflow.outcome import EditorRequested, Fatal, Quit


@asynccontextmanager
async def interface_scope(session: SessionState) -> AsyncIterator[None]:
    """Account for one live UI context.

    The context is released on every path out, fatal ones included.

    Raises:
        RuntimeError: If another UI context is still alive
    """
    if session.live_interfaces:
        raise RuntimeError("a UI context is already running")
    session.interfaces_opened += 1
    session.live_interfaces += 1
    logger.debug("UI context opened", number=session.interfaces_opened)
    try:
        yield
    finally:
        session.live_interfaces -= 1
        logger.debug("UI context closed", number=session.interfaces_opened)


@dataclass
class RunInterface(BaseNode[State, SessionDeps, int]):
    """Run a UI context until it ends, then decide what comes next."""

    async def run(
        self, ctx: GraphRunContext[State, SessionDeps]
    ) -> EditorHandoff | Finalize:
        """Drive one UI context.

        Returns:
            EditorHandoff: The user asked for the external editor
            Finalize: The session is over

        Raises:
            Exception: Whatever a Fatal outcome carries
        """
        session = ctx.state.runtime.session
        session.enter(Phase.ACTIVE)

        async with interface_scope(session):
            outcome = await ctx.deps.open_interface(session, ctx.state.config)

        if isinstance(outcome, EditorRequested):
            from conflux.workflow.nodes.editor_handoff import EditorHandoff
            return EditorHandoff()

        if isinstance(outcome, Quit):
            logger.info("Quitting", reason=outcome.reason)
            from conflux.workflow.nodes.finalize import Finalize
            return Finalize()

        if isinstance(outcome, Fatal):
            raise outcome.error

        raise RuntimeError(f"UI context ended with {outcome!r}")
