"""Session graph definition and runner."""

from __future__ import annotations

from pydantic_graph import End, Graph
from rich.console import Console
from rich.text import Text

from conflux.core.config import Phase, State
from conflux.core.log import logger
from conflux.workflow.deps import SessionDeps


def create_workflow() -> Graph:
    """Create the session graph.

    Bootstrap -> RunInterface <-> EditorHandoff, RunInterface -> Finalize.
    """
    logger.debug("Building session graph")

    # Node return annotations are resolved against these names.
    from conflux.workflow.nodes.bootstrap import Bootstrap
    from conflux.workflow.nodes.editor_handoff import EditorHandoff
    from conflux.workflow.nodes.finalize import Finalize
    from conflux.workflow.nodes.run_interface import RunInterface

    return Graph(
        nodes=(Bootstrap, RunInterface, EditorHandoff, Finalize),
        state_type=State,
    )


def report(console: Console, error: BaseException) -> None:
    """Print an error as the single red line users see."""
    console.print(Text(f"conflux: {error}", style="red"))


async def run_session(state: State, deps: SessionDeps | None = None) -> int:
    """Run a whole session.

    Any error escaping the graph aborts the session: it is logged,
    reported on one line, and turned into exit code 1.

    Returns:
        Process exit code
    """
    deps = deps or SessionDeps()
    session = state.runtime.session
    workflow = create_workflow()

    from conflux.workflow.nodes.bootstrap import Bootstrap

    try:
        async with workflow.iter(Bootstrap(), state=state, deps=deps) as run:
            async for node in run:
                if isinstance(node, End):
                    return node.data
    except Exception as e:
        session.enter(Phase.ABORTED)
        logger.error("Session aborted", error=str(e), _exc_info=e)
        report(deps.console, e)
        return 1

    logger.error("Session ended without an exit code")
    return 1
