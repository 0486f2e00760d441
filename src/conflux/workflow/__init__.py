"""Session controller: command dispatch and the session state machine."""
