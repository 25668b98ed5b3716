"""Markdown rendering for model output.

Only the small subset the analysis prompt asks for is recognised: bold, italic,
headings 1-3, list items and paragraph/line breaks. Input is escaped before any
markup is introduced, so the only tags in the output are the renderer's own.

The stages run in a fixed order and each one sees the output of the previous
one. CRLF line endings are read as plain line breaks. Rendering is one-shot:
feeding rendered HTML back in escapes the entities a second time.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

_HTML_ESCAPES: Tuple[Tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
)

_HEADING_PREFIXES: Tuple[Tuple[str, str], ...] = (
    ("### ", "h3"),
    ("## ", "h2"),
    ("# ", "h1"),
)

_ORDERED_ITEM = re.compile(r"^[ \t]*\d+\.[ \t]+(.*)$")
_UNORDERED_ITEM = re.compile(r"^[ \t]*-[ \t]+(.*)$")


def escape_html(text: str) -> str:
    for char, entity in _HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def _find_closing(text: str, marker: str, start: int) -> int:
    """Index of the first ``marker`` at or after ``start`` on the same line, else -1."""
    close = text.find(marker, start)
    if close == -1:
        return -1
    newline = text.find("\n", start, close)
    return -1 if newline != -1 else close


def replace_spans(text: str, marker: str, tag: str) -> str:
    """Wrap ``marker``-delimited spans in ``tag``.

    Scans left to right. At each opening marker the nearest closing marker on
    the same line ends the span, so the leftmost, shortest span always wins.
    An opening marker without a partner is emitted as a literal character and
    scanning resumes one character later.
    """
    out: List[str] = []
    i = 0
    width = len(marker)
    while i < len(text):
        if text.startswith(marker, i):
            close = _find_closing(text, marker, i + width)
            if close != -1:
                out.append(f"<{tag}>{text[i + width:close]}</{tag}>")
                i = close + width
                continue
        out.append(text[i])
        i += 1
    return "".join(out)


def strong_asterisks(text: str) -> str:
    return replace_spans(text, "**", "strong")


def em_asterisks(text: str) -> str:
    return replace_spans(text, "*", "em")


def strong_underscores(text: str) -> str:
    return replace_spans(text, "__", "strong")


def em_underscores(text: str) -> str:
    return replace_spans(text, "_", "em")


def _heading_line(line: str) -> str:
    for prefix, tag in _HEADING_PREFIXES:
        if line.startswith(prefix):
            return f"<{tag}>{line[len(prefix):]}</{tag}>"
    return line


def headings(text: str) -> str:
    return "\n".join(_heading_line(line) for line in text.split("\n"))


def _mark_items(text: str, pattern: "re.Pattern[str]") -> str:
    return "\n".join(pattern.sub(r"<li>\1</li>", line, count=1) for line in text.split("\n"))


def ordered_items(text: str) -> str:
    return _mark_items(text, _ORDERED_ITEM)


def unordered_items(text: str) -> str:
    return _mark_items(text, _UNORDERED_ITEM)


def _is_list_item(line: str) -> bool:
    return line.startswith("<li>") and line.endswith("</li>")


def wrap_lists(text: str) -> str:
    """Wrap each run of consecutive list-item lines in a single ``<ul>``."""
    out: List[str] = []
    run: List[str] = []
    for line in text.split("\n"):
        if _is_list_item(line):
            run.append(line)
            continue
        if run:
            out.append("<ul>" + "".join(run) + "</ul>")
            run = []
        out.append(line)
    if run:
        out.append("<ul>" + "".join(run) + "</ul>")
    return "\n".join(out)


def line_breaks(text: str) -> str:
    return text.replace("\n\n", "</p><p>").replace("\n", "<br>")


STAGES: Tuple[Callable[[str], str], ...] = (
    escape_html,
    strong_asterisks,
    em_asterisks,
    strong_underscores,
    em_underscores,
    headings,
    ordered_items,
    unordered_items,
    wrap_lists,
    line_breaks,
)


def render_markdown(text: Optional[str]) -> str:
    """Convert model Markdown to an HTML fragment safe for direct insertion."""
    if not text:
        return ""
    html = str(text).replace("\r\n", "\n")
    for stage in STAGES:
        html = stage(html)
    return html
