"""Session graph nodes."""

from conflux.workflow.nodes.bootstrap import Bootstrap
from conflux.workflow.nodes.editor_handoff import EditorHandoff
from conflux.workflow.nodes.finalize import Finalize
from conflux.workflow.nodes.run_interface import RunInterface, interface_scope

__all__ = [
    "Bootstrap",
    "RunInterface",
    "EditorHandoff",
    "Finalize",
    "interface_scope",
]
