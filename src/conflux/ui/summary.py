"""End-of-session summary."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from conflux.conflict.model import Conflict, Resolution

# Resolution kinds in the order the summary lists them.
ORDER = (
    Resolution.LOCAL,
    Resolution.INCOMING,
    Resolution.BOTH,
    Resolution.CUSTOM,
    Resolution.UNRESOLVED,
)


def tally(conflicts: Iterable[Conflict]) -> Counter:
    """Count conflicts per resolution kind."""
    return Counter(conflict.resolution for conflict in conflicts)


def summary_line(counts: Counter) -> str:
    total = sum(counts.values())
    resolved = total - counts[Resolution.UNRESOLVED]
    parts = [
        f"{counts[kind]} {kind.value}" for kind in ORDER if counts[kind]
    ]
    line = f"Resolved {resolved} of {total} conflicts"
    if parts:
        line += f" ({', '.join(parts)})"
    return line


def print_summary(console: Console, conflicts: Iterable[Conflict]) -> Counter:
    """Print one line per conflict, then the totals.

    Returns:
        The per-kind counts that were printed
    """
    conflicts = list(conflicts)
    for conflict in conflicts:
        if conflict.resolved:
            mark = Text("✔ ", style="green")
        else:
            mark = Text("✘ ", style="red")
        console.print(mark + Text(
            f"{conflict.identity}  {conflict.resolution.value}"
        ))

    counts = tally(conflicts)
    console.print(Text(summary_line(counts), style="bold"))
    return counts
