#!/usr/bin/env python3
"""Conflux CLI - resolve git merge conflicts one at a time."""

import asyncio

import yaml
from pydantic import ValidationError
from pydantic_settings import CliApp
from rich.console import Console

from conflux.core.config import State
from conflux.core.errors import ConfigError
from conflux.core.log import logger
from conflux.workflow.graph import report, run_session


class CliState(State):
    """Walk through the unresolved merge conflicts of the current git
    working tree, one at a time.

    For each conflict pick the local side, the incoming side, both, or
    edit it in $VISUAL/$EDITOR. Resolved files are written back when
    the session ends.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.keys.select_local x)
    2. Environment variables (CONFLUX_CONFIG__SESSION__FALLBACK=incoming)
    3. .env file
    4. --include files, ./conflux.yaml, the user config file, and
       the packaged defaults
    """

    def cli_cmd(self):
        """Run the session and exit with its status."""
        # The logger context closes the log file on the way out.
        with logger:
            exit_code = asyncio.run(run_session(self))
        raise SystemExit(exit_code)


def describe(error: ValidationError) -> str:
    """Collapse a validation error to one line."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "invalid configuration: " + "; ".join(problems)


def die(error: Exception) -> None:
    """Report a startup failure and exit 1."""
    report(Console(), error)
    raise SystemExit(1)


def main():
    """Main entry point for CLI."""
    try:
        CliApp.run(CliState)
    except ValidationError as e:
        die(ConfigError(describe(e)))
    except (ValueError, OSError, yaml.YAMLError) as e:
        die(ConfigError(str(e)))


if __name__ == "__main__":
    main()
