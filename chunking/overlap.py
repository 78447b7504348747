"""
chunking/overlap.py
-------------------
Prepends trailing context of chunk i to the head of chunk i + 1.

Overlap is purely additive: cut points from the assembler are untouched, and
the duplicated prefix is not counted against max_chunk_size. The prefix is
made of whole units only and never starts inside a structural block, so no
unit or block is partially duplicated.
"""

from typing import List, Sequence, Tuple

from chunking.types import StructuralBlock, TextUnit

Span = Tuple[int, int]


def _overlap_start(
    units: List[TextUnit],
    prev: Span,
    budget: int,
    block_end_of: Sequence[int],
) -> int:
    """
    First unit of the longest whole-unit suffix of `prev` within `budget` chars.

    When even the last unit exceeds the budget, it is used alone provided it
    is at most 2 × budget long; otherwise no overlap is added.
    """
    first, last = prev
    start = last + 1
    # Never repeat the whole previous chunk.
    while start - 1 > first and units[last].end - units[start - 1].start <= budget:
        start -= 1
    if start > last and last > first and units[last].size <= 2 * budget:
        # No suffix fits: a last unit up to twice the budget is still repeated whole.
        start = last
    if start <= last and block_end_of[start] >= 0:
        # Suffix begins mid-block: drop that block from the overlap.
        start = block_end_of[start] + 1
    return start


def overlap_spans(
    units: List[TextUnit],
    spans: List[Span],
    blocks: List[StructuralBlock],
    overlap: int,
) -> List[Span]:
    """
    Widens each span after the first to start `overlap` characters earlier,
    snapped to unit boundaries.

    Args:
        units:   Unit sequence.
        spans:   Assembler output, in order, contiguous.
        blocks:  Structural blocks (used to avoid partial block duplication).
        overlap: Character budget for the duplicated prefix.

    Returns:
        New spans with the same end units; start units moved back where a
        suffix of the previous chunk fits in the budget.
    """
    if overlap <= 0 or len(spans) < 2:
        return list(spans)

    # For each unit: last unit of the block containing it, or -1 (first unit excluded).
    block_end_of = [-1] * len(units)
    for block in blocks:
        for i in range(block.start_unit + 1, block.end_unit + 1):
            block_end_of[i] = block.end_unit

    widened = [spans[0]]
    for prev, (first, last) in zip(spans, spans[1:]):
        start = _overlap_start(units, prev, overlap, block_end_of)
        widened.append((min(start, first), last))
    return widened


def span_text(text: str, units: List[TextUnit], span: Span) -> str:
    """Source slice covered by a span, with original inner formatting."""
    first, last = span
    return text[units[first].start:units[last].end]
