"""Snippet extraction and highlight spans.

The engine only reports where matches are. Turning spans into markup is
left to the presentation layer; render_highlights is a convenience for it.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable

from .models import HighlightSpan

ELLIPSIS = "..."


def create_snippet(
    content: str,
    term: str,
    max_length: int = 150,
    context: int = 50,
) -> str:
    """Extract a bounded excerpt around the first match of term.

    The window spans `context` characters either side of the first
    case-insensitive occurrence, with an ellipsis on each truncated edge.
    If the term is absent, the first `max_length` characters are used.

    Args:
        content: Full message text.
        term: The matched term to center on.
        max_length: Prefix length used when the term is not found.
        context: Characters kept before and after the match.

    Returns:
        The snippet string.
    """
    found = re.search(re.escape(term), content, re.IGNORECASE) if term else None
    if found is None:
        if len(content) <= max_length:
            return content
        return content[:max_length] + ELLIPSIS

    start = max(0, found.start() - context)
    end = min(len(content), found.end() + context)

    snippet = content[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS
    return snippet


def find_highlight_spans(
    text: str,
    terms: Iterable[str],
    case_sensitive: bool = False,
) -> list[HighlightSpan]:
    """Locate every occurrence of every term as non-overlapping spans.

    Longer terms claim text first, so "array methods" wins over "array"
    where both match. The result is sorted by start offset.
    """
    flags = 0 if case_sensitive else re.IGNORECASE
    unique_terms = sorted({t for t in terms if t}, key=lambda t: (-len(t), t))

    spans: list[HighlightSpan] = []
    taken: list[tuple[int, int]] = []
    for term in unique_terms:
        for m in re.finditer(re.escape(term), text, flags):
            start, end = m.span()
            if any(start < t_end and t_start < end for t_start, t_end in taken):
                continue
            taken.append((start, end))
            spans.append(HighlightSpan(start=start, end=end, text=m.group(0)))

    spans.sort(key=lambda s: s.start)
    return spans


def render_highlights(
    text: str,
    spans: list[HighlightSpan],
    before: str = "<mark>",
    after: str = "</mark>",
    escape: Callable[[str], str] | None = None,
) -> str:
    """Wrap each span with markup in a single pass.

    Args:
        text: The original text the spans were computed on.
        spans: Sorted, non-overlapping spans.
        before: Markup inserted before each span.
        after: Markup inserted after each span.
        escape: Optional escaper (e.g. html.escape) applied to the text
            pieces but not to the markup.

    Returns:
        The rendered string.
    """
    esc = escape or (lambda s: s)
    parts: list[str] = []
    cursor = 0
    for span in spans:
        if span.start < cursor:
            continue
        parts.append(esc(text[cursor : span.start]))
        parts.append(before + esc(text[span.start : span.end]) + after)
        cursor = span.end
    parts.append(esc(text[cursor:]))
    return "".join(parts)
