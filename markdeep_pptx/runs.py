"""Text run builder: inline content to an ordered list of styled runs."""

import re
from dataclasses import dataclass
from typing import Optional

from .snapshot import RenderedNode
from .style import PLAIN, TextStyle, resolve

LINE_BREAK = "\n"

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextRun:
    text: str
    style: TextStyle = PLAIN

    @property
    def is_break(self) -> bool:
        return self.text == LINE_BREAK


def _collect(node: RenderedNode, style: TextStyle, skip, runs: list) -> list[TextRun]:
    # ``runs`` is shared by the whole subtree
    for child in node.children:
        if isinstance(child, str):
            if child.strip():
                runs.append(TextRun(child, style))
            elif runs and not runs[-1].is_break:
                # Whitespace between inline elements still separates words
                runs[-1] = TextRun(runs[-1].text + child, runs[-1].style)
        elif child.tag == "br":
            runs.append(TextRun(LINE_BREAK))
        elif child.tag not in skip:
            _collect(child, resolve(child, style), skip, runs)
    return runs


def build_runs(
    node: RenderedNode, style: Optional[TextStyle] = None, skip: tuple = ()
) -> list[TextRun]:
    """Runs for everything inside ``node``, in document order.

    ``style`` is the context already resolved for ``node``; when omitted it
    is resolved from the node's own computed style. Subtrees whose tag is in
    ``skip`` contribute nothing.
    """
    if style is None:
        style = resolve(node)
    if node.tag == "br":
        return [TextRun(LINE_BREAK)]
    return _collect(node, style, skip, [])


def collapse_whitespace(text: str) -> str:
    """Runs of whitespace, newlines included, become one space."""
    return _WS_RE.sub(" ", text)


def clean_text(text: str) -> str:
    return collapse_whitespace(text).strip()


def plain_text(runs) -> str:
    """Concatenated run text, trimmed."""
    return "".join(r.text for r in runs).strip()


def flat_text(runs) -> str:
    """Run text as laid out: whitespace collapsed, line-break runs kept."""
    lines: list = [[]]
    for run in runs:
        if run.is_break:
            lines.append([])
        else:
            lines[-1].append(run.text)
    return "\n".join(clean_text("".join(parts)) for parts in lines).strip()


def restyle(runs, color: str) -> list[TextRun]:
    """Same runs with every non-break run recolored."""
    return [r if r.is_break else TextRun(r.text, r.style.with_color(color)) for r in runs]
