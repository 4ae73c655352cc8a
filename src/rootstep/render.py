# -----------------------------------------------------------------------------
# Trace rendering
# Purpose:
#   Turn a finished trace into text for consumers:
#     render_lines -> one tab-separated line per step (the stable format)
#     render_table -> aligned columns with a header, for people
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Iterable, List

from .tracer import Step


def render_line(step: Step) -> str:
    return "\t".join(step.row()) + "\n"


def render_lines(steps: Iterable[Step]) -> str:
    return "".join(render_line(s) for s in steps)


def render_table(steps: Iterable[Step]) -> str:
    steps = list(steps)
    if not steps:
        return ""
    header = list(type(steps[0]).COLUMNS)
    rows: List[List[str]] = [list(s.row()) for s in steps]
    widths = [max(len(header[i]), *(len(r[i]) for r in rows)) for i in range(len(header))]

    def fmt(values: List[str]) -> str:
        return "  ".join(v.rjust(widths[i]) for i, v in enumerate(values)).rstrip()

    rule = "-" * (sum(widths) + 2 * (len(widths) - 1))
    lines = [fmt(header), rule] + [fmt(r) for r in rows]
    return "\n".join(lines) + "\n"
