"""
chunking/segmenter.py
---------------------
Splits raw text into the ordered sequence of TextUnits that every later stage
works on.

A unit is one sentence, or one line when a line holds no sentence break.
Offsets always point back into the original string, so any run of
consecutive units can be re-sliced from the source with its formatting
(indentation, blank lines inside code fences) intact. Whitespace between
units is the only content ever dropped.
"""

import re
from typing import Iterator, List, Optional, Tuple

from chunking.types import TextUnit

# Sentence end: terminal punctuation (optionally closed by a quote/bracket)
# followed by whitespace.
_SENTENCE_BREAK = re.compile(r"(?:(?<=[.!?])|(?<=[.!?][\"')\]]))\s+")

# "- item", "* item", "+ item", "• item", "1. item", "2) item"
LIST_MARKER = re.compile(r"^[ \t]*(?:[-*+•]|\d{1,3}[.)])[ \t]+")

_LINE = re.compile(r"[^\n]+")


def _strip_span(text: str, start: int, end: int) -> Optional[Tuple[int, int]]:
    """Shrinks [start, end) to exclude surrounding whitespace; None if blank."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return (start, end) if start < end else None


def _sentence_spans(text: str, start: int, end: int) -> Iterator[Tuple[int, int]]:
    """Yields sentence spans of one line, never cutting after a list marker."""
    line = text[start:end]
    marker = LIST_MARKER.match(line)
    search_from = marker.end() if marker else 0

    cursor = 0
    for match in _SENTENCE_BREAK.finditer(line, search_from):
        yield start + cursor, start + match.start()
        cursor = match.end()
    yield start + cursor, end


def _wrap(text: str, start: int, end: int, width: int) -> Iterator[Tuple[int, int]]:
    """
    Hard-wraps an over-long span into pieces of at most `width` characters,
    preferring to cut at the last whitespace in the second half of a piece.
    """
    while end - start > width:
        limit = start + width
        cut = text.rfind(" ", start + width // 2, limit + 1)
        if cut <= start:
            cut = limit
        yield start, cut
        start = cut
        while start < end and text[start].isspace():
            start += 1
    if start < end:
        yield start, end


def segment_text(text: str, max_unit_size: Optional[int] = None) -> List[TextUnit]:
    """
    Splits text into sentence/line units with source offsets.

    Args:
        text:          Raw input text. May be empty or whitespace-only.
        max_unit_size: If given, units longer than this are hard-wrapped so
                       the assembler can always place them within its size
                       limits.

    Returns:
        Ordered, non-overlapping TextUnits; empty for blank input.

    Raises:
        ValueError: If max_unit_size is not positive.
    """
    if max_unit_size is not None and max_unit_size <= 0:
        raise ValueError("max_unit_size must be a positive integer.")
    if not text or not text.strip():
        return []

    units: List[TextUnit] = []
    for line in _LINE.finditer(text):
        for raw_start, raw_end in _sentence_spans(text, line.start(), line.end()):
            span = _strip_span(text, raw_start, raw_end)
            if span is None:
                continue
            pieces = [span]
            if max_unit_size is not None and span[1] - span[0] > max_unit_size:
                pieces = list(_wrap(text, span[0], span[1], max_unit_size))
            for piece in pieces:
                start, end = _strip_span(text, *piece) or piece
                units.append(TextUnit(text[start:end], start, end))
    return units


def span_length(units: List[TextUnit], first: int, last: int) -> int:
    """Characters covered by units[first..last] in the source, gaps included."""
    return units[last].end - units[first].start
