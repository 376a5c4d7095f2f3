"""Bounded prefix/suffix extraction around the cursor."""

from __future__ import annotations

from typing import Callable

from .document import Position, TextSource
from .llm.types import CompletionRequestContext

CHAR_LIMIT = 4000


def extract_context(
    offset: int,
    char_limit: int,
    text: Callable[[int, int], str],
    current_suggestion_text: str = "",
    language_id: str = "",
) -> CompletionRequestContext:
    """Reads up to ``char_limit`` characters on each side of ``offset``.

    ``text(start, end)`` must tolerate an ``end`` past the end of the content.
    ``current_suggestion_text`` is an already accepted partial completion and
    is appended to the prefix so completions can be continued step by step.
    """
    prefix_start = max(0, offset - char_limit)
    suffix_end = offset + char_limit
    return CompletionRequestContext(
        prefix=text(prefix_start, offset) + current_suggestion_text,
        suffix=text(offset, suffix_end),
        language_id=language_id,
    )


def context_from_document(
    document: TextSource,
    position: Position,
    char_limit: int = CHAR_LIMIT,
    current_suggestion_text: str = "",
) -> CompletionRequestContext:
    def text(start: int, end: int) -> str:
        return document.get_text(document.position_at(start), document.position_at(end))

    return extract_context(
        offset=document.offset_at(position),
        char_limit=char_limit,
        text=text,
        current_suggestion_text=current_suggestion_text,
        language_id=document.language_id,
    )
