"""Hand a conflict to an external editor."""

from __future__ import annotations

import os
import shlex
import tempfile
from pathlib import Path

from conflux.conflict.model import Conflict, split_lines
from conflux.core.config import EditorConfig
from conflux.core.errors import EditorError
from conflux.core.log import logger
from conflux.core.runner import Runner


def open_editor(
    conflict: Conflict,
    config: EditorConfig,
    runner: Runner | None = None,
) -> list[str]:
    """Let the user edit conflict and return the lines they saved.

    The conflict (markers included, or its custom resolution after an
    earlier edit) goes into a temporary file with the original file's
    suffix so the editor picks the right syntax. The call blocks until
    the editor exits. The temporary file is always removed.

    Raises:
        EditorError: If the editor exits non-zero or the file cannot be
            written or read back
    """
    runner = runner or Runner()
    suffix = conflict.file.path.suffix if conflict.file else ""
    newline = conflict.file.newline if conflict.file else "\n"

    fd, name = tempfile.mkstemp(prefix="conflux-", suffix=suffix)
    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(newline.join(conflict.editable_lines()) + newline)
        except OSError as e:
            raise EditorError(f"could not prepare edit file: {e}") from e

        command = f"{config.resolve_command()} {shlex.quote(str(path))}"
        logger.info(
            "Opening editor", conflict=conflict.identity, command=command
        )
        result = runner.interactive(command)
        if result.exited != 0:
            raise EditorError(
                f"editor exited with status {result.exited}: {command}"
            )

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EditorError(f"could not read edited file: {e}") from e
    finally:
        path.unlink(missing_ok=True)

    lines, _, _ = split_lines(text)
    logger.debug(
        "Editor returned", conflict=conflict.identity, lines=len(lines)
    )
    return lines
