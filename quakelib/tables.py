"""Markdown table builder for reports.

Example::

    from quakelib.tables import md_table

    print(md_table(
        headers=["Intensity", "1yr", "3yr"],
        rows=[["3", "63.21%", "95.02%"]],
        alignments=["l", "r", "r"],
    ))

    # | Intensity | 1yr | 3yr |
    # | --- | ---: | ---: |
    # | 3 | 63.21% | 95.02% |
"""

from __future__ import annotations

from typing import Sequence

_SEPARATORS = {"l": "---", "r": "---:", "c": ":---:"}


def md_table(
    headers: Sequence[str],
    rows: Sequence[Sequence],
    alignments: Sequence[str] | None = None,
) -> str:
    """Build a Markdown table.

    Args:
        headers: Column header strings.
        rows: Row cell values; non-strings go through ``str()``. Short
            rows are padded with empty cells, long rows truncated.
        alignments: Optional ``'l'``, ``'r'`` or ``'c'`` per column
            (default left).

    Returns:
        The table, or ``""`` when there are no rows.
    """
    if not rows:
        return ""

    n_cols = len(headers)
    alignments = list(alignments or ["l"] * n_cols)

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(_SEPARATORS.get(a, "---") for a in alignments) + " |",
    ]
    for row in rows:
        cells = [str(c) for c in row][:n_cols]
        cells += [""] * (n_cols - len(cells))
        lines.append("| " + " | ".join(cells) + " |")

    return "\n".join(lines)
