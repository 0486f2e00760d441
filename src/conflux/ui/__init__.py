"""Terminal UI: the presenter and the textual app that renders it."""
