"""Locate files with unresolved conflicts in a git working tree."""

from __future__ import annotations

from pathlib import Path

from invoke.exceptions import UnexpectedExit

from conflux.conflict.model import ConflictFile
from conflux.core.errors import MarkerError, ScanError
from conflux.core.log import logger
from conflux.core.runner import Runner


def _git(runner: Runner, args: str, cwd: Path) -> str:
    try:
        result = runner.execute(f"git --no-pager {args}", cwd=cwd)
    except UnexpectedExit as e:
        message = e.result.stderr.strip() or f"git {args} failed"
        raise ScanError(message) from e
    except OSError as e:
        raise ScanError(f"could not run git: {e}") from e
    return result.stdout


def find(root: Path, runner: Runner | None = None) -> list[ConflictFile]:
    """Return every conflicted file under root's repository.

    Files git reports as unmerged but which hold no conflict markers
    (binary files, deleted-by-them) are skipped.

    Raises:
        ScanError: If git fails, a file cannot be read or its markers
            are malformed
    """
    runner = runner or Runner()

    toplevel = Path(_git(runner, "rev-parse --show-toplevel", root).strip())
    names = _git(
        runner, "-c core.quotePath=false diff --name-only --diff-filter=U",
        toplevel,
    )

    files = []
    for name in dict.fromkeys(names.splitlines()):
        if not name:
            continue
        path = toplevel / name
        try:
            conflict_file = ConflictFile.load(path, name=name)
        except MarkerError as e:
            raise ScanError(f"{name}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ScanError(f"{name}: cannot read file ({e})") from e

        if not conflict_file.conflicts:
            logger.debug("Unmerged file without markers skipped", file=name)
            continue

        logger.info(
            "Found conflicts",
            file=name,
            count=len(conflict_file.conflicts),
        )
        files.append(conflict_file)

    return files
