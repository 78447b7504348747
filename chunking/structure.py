"""
chunking/structure.py
---------------------
Single-pass detection of spans that must not be cut: fenced code regions,
bulleted / numbered lists and pipe tables.

Works on the unit sequence from segmenter.py and returns typed
StructuralBlock ranges (inclusive unit indices). Code fences are scanned first;
list and table detection only considers units outside any fence.
"""

import re
from typing import List, Optional, Tuple

from chunking.logging_config import get_logger
from chunking.segmenter import LIST_MARKER
from chunking.types import BlockKind, StructuralBlock, TextUnit

log = get_logger(__name__)

_FENCE_OPEN  = re.compile(r"^(`{3,}|~{3,})")
_FENCE_CLOSE = re.compile(r"^(`{3,}|~{3,})\s*$")

MIN_BLOCK_LINES = 2


# ── Internal helpers ───────────────────────────────────────────────────────────

def _line_numbers(text: str, units: List[TextUnit]) -> List[int]:
    """Line index of each unit's first character."""
    numbers: List[int] = []
    line, cursor = 0, 0
    for unit in units:
        line += text.count("\n", cursor, unit.start)
        cursor = unit.start
        numbers.append(line)
    return numbers


def _starts_line(lines: List[int], i: int) -> bool:
    return i == 0 or lines[i] != lines[i - 1]


def _fence_open(unit: TextUnit) -> Optional[str]:
    match = _FENCE_OPEN.match(unit.text)
    if not match:
        return None
    fence = match.group(1)
    # ```inline``` on one line is already atomic as a single unit
    rest = unit.text[len(fence):].rstrip()
    if rest.endswith(fence[0] * 3):
        return None
    return fence


def _closes(unit: TextUnit, fence: str) -> bool:
    match = _FENCE_CLOSE.match(unit.text)
    if not match:
        return False
    marker = match.group(1)
    return marker[0] == fence[0] and len(marker) >= len(fence)


def _code_blocks(units: List[TextUnit], lines: List[int]) -> List[StructuralBlock]:
    blocks: List[StructuralBlock] = []
    i = 0
    while i < len(units):
        fence = _fence_open(units[i]) if _starts_line(lines, i) else None
        if fence is None:
            i += 1
            continue

        end = i + 1
        while end < len(units) and not (_starts_line(lines, end) and _closes(units[end], fence)):
            end += 1
        if end >= len(units):
            log.warning(
                "Unterminated code fence at offset %d — treating it as running "
                "to end of text", units[i].start,
            )
            end = len(units) - 1

        blocks.append(StructuralBlock(i, end, BlockKind.CODE))
        i = end + 1
    return blocks


def _line_kind(unit: TextUnit) -> Optional[BlockKind]:
    if unit.text.startswith("|"):
        return BlockKind.TABLE
    if LIST_MARKER.match(unit.text):
        return BlockKind.LIST
    return None


def _line_blocks(
    units: List[TextUnit],
    lines: List[int],
    in_code: List[bool],
) -> List[StructuralBlock]:
    """List and table runs outside code, found in one pass over the units."""
    blocks: List[StructuralBlock] = []
    run: Optional[Tuple[int, int, BlockKind]] = None   # (first unit, line count, kind)

    def close(last: int) -> None:
        if run is not None and run[1] >= MIN_BLOCK_LINES:
            blocks.append(StructuralBlock(run[0], last, run[2]))

    for i, unit in enumerate(units):
        if in_code[i]:
            close(i - 1)
            run = None
            continue
        if not _starts_line(lines, i):
            continue    # further sentences of the current item or row

        kind = _line_kind(unit)
        if run is not None and kind is run[2]:
            run = (run[0], run[1] + 1, kind)
            continue
        close(i - 1)
        run = (i, 1, kind) if kind is not None else None
    close(len(units) - 1)
    return blocks


# ── Public API ─────────────────────────────────────────────────────────────────

def detect_blocks(text: str, units: List[TextUnit]) -> List[StructuralBlock]:
    """
    Finds code-fence, list and table regions in the unit sequence.

    A code block runs from an opening fence line (``` or ~~~, three or more)
    to the next line holding only a fence of the same character and at least
    the same length. An unterminated fence runs to the end of the text.
    A list block is two or more consecutive lines that each start with a
    bullet or numeric marker, together with the sentences that follow the
    marker on the same line. A table block is two or more consecutive lines
    starting with "|".

    Args:
        text:  The source string the units were cut from.
        units: Output of segment_text(text).

    Returns:
        Non-overlapping blocks sorted by start_unit.
    """
    if not units:
        return []

    lines  = _line_numbers(text, units)
    code   = _code_blocks(units, lines)
    in_code = [False] * len(units)
    for block in code:
        for i in range(block.start_unit, block.end_unit + 1):
            in_code[i] = True

    blocks = code + _line_blocks(units, lines, in_code)
    blocks.sort(key=lambda b: b.start_unit)
    log.debug(
        "Structural scan — %d code block(s), %d list/table block(s)",
        len(code), len(blocks) - len(code),
    )
    return blocks


def mark_structural(units: List[TextUnit], blocks: List[StructuralBlock]) -> List[TextUnit]:
    """Returns a copy of `units` with `structural` set for every unit inside a block."""
    flags = [False] * len(units)
    for block in blocks:
        for i in range(block.start_unit, block.end_unit + 1):
            flags[i] = True
    return [u._replace(structural=True) if flag else u for u, flag in zip(units, flags)]
