"""Command execution on top of invoke."""

import sys
from pathlib import Path

from invoke import Context, Result

from conflux.core.log import logger


class Runner(Context):
    """invoke.Context with the two ways conflux runs programs.

    execute() captures output (git plumbing); interactive() hands the
    terminal to the child (the external editor).
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        check: bool = True,
    ) -> Result:
        """Run a command and capture its output.

        Args:
            command: Command string to execute
            cwd: Working directory for the command
            check: If True, raise on non-zero exit code

        Returns:
            invoke.Result with stdout, stderr, exited

        Raises:
            invoke.UnexpectedExit: If check=True and command fails
        """
        kwargs = {
            "hide": True,
            "warn": not check,
            "in_stream": False,
        }

        logger.spew("Running command", command=command, cwd=str(cwd or ""))
        if cwd:
            with self.cd(str(cwd)):
                return self.run(command, **kwargs)
        return self.run(command, **kwargs)

    def interactive(self, command: str, cwd: Path | None = None) -> Result:
        """Run a command that takes over the terminal until it exits.

        A pty is used only when stdin is a terminal; otherwise stdin is
        not forwarded at all. Non-zero exit codes are returned, not
        raised.
        """
        attached = sys.stdin.isatty()
        kwargs = {
            "warn": True,
            "pty": attached,
            "in_stream": None if attached else False,
        }

        logger.debug("Handing terminal to command", command=command)
        if cwd:
            with self.cd(str(cwd)):
                return self.run(command, **kwargs)
        return self.run(command, **kwargs)
