"""Exception taxonomy.

Only failures live here. Control signals from the command evaluator
(open the editor, quit, unknown command) are Outcome values, see
conflux.workflow.outcome.
"""


class ConfluxError(Exception):
    """Base class for every error conflux reports to the user."""


class ConfigError(ConfluxError):
    """Settings or key bindings could not be loaded."""


class ScanError(ConfluxError):
    """The working tree could not be scanned for conflicts."""


class MarkerError(ConfluxError, ValueError):
    """Conflict markers are malformed."""


class EditorError(ConfluxError):
    """The external editor could not be run to completion."""


class WriteError(ConfluxError):
    """Resolved content could not be written back."""


__all__ = [
    "ConfluxError",
    "ConfigError",
    "ScanError",
    "MarkerError",
    "EditorError",
    "WriteError",
]
