"""Highlighting of search matches in styled text."""

from __future__ import annotations

import re

from viddy.termtext import Style, Text


def search_and_mark(string: str, text: Text, query: str, style: Style) -> None:
    """Apply style to every non-overlapping occurrence of query in text."""
    if not query:
        return
    for match in re.finditer(re.escape(query), string):
        text.mark_text(match.start(), match.end(), style)