"""Character-level diffs between successive outputs, and highlighting of them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from difflib import SequenceMatcher

from viddy.termtext import AnsiColor, Style, Text

INSERT_STYLE = Style(fg=AnsiColor.BLACK, bg=AnsiColor.GREEN)
DELETE_STYLE = Style(fg=AnsiColor.BLACK, bg=AnsiColor.RED)


class ChunkKind(enum.Enum):
    """What a chunk of a diff does to the old text."""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class Chunk:
    """A run of characters that is kept, inserted or deleted."""

    kind: ChunkKind
    text: str


def diff_chunks(old: str, new: str) -> list[Chunk]:
    """Character-level diff turning old into new.

    Concatenating the EQUAL and DELETE chunks gives old; the EQUAL and
    INSERT chunks give new.
    """
    matcher = SequenceMatcher(None, old, new, autojunk=False)
    chunks: list[Chunk] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            chunks.append(Chunk(ChunkKind.EQUAL, old[i1:i2]))
            continue
        if i2 > i1:
            chunks.append(Chunk(ChunkKind.DELETE, old[i1:i2]))
        if j2 > j1:
            chunks.append(Chunk(ChunkKind.INSERT, new[j1:j2]))
    return chunks


def _mark_chunks(chunks: list[Chunk], marked: ChunkKind, text: Text, style: Style) -> None:
    cursor = 0
    for chunk in chunks:
        if chunk.kind is ChunkKind.EQUAL:
            cursor += len(chunk.text)
        elif chunk.kind is marked:
            for c in chunk.text:
                if not c.isspace():
                    text.mark_text(cursor, cursor + 1, style)
                cursor += 1


def diff_and_mark(current: str, previous: str, text: Text) -> None:
    """Highlight in text (the current output) the characters added since previous."""
    _mark_chunks(diff_chunks(previous, current), ChunkKind.INSERT, text, INSERT_STYLE)


def diff_and_mark_delete(current: str, previous: str, text: Text) -> None:
    """Highlight in text (the previous output) the characters removed in current."""
    _mark_chunks(diff_chunks(previous, current), ChunkKind.DELETE, text, DELETE_STYLE)