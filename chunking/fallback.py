"""
chunking/fallback.py
--------------------
Deterministic fixed-window chunking, used whenever the similarity signal is
unavailable (no provider, provider error or timeout).

Slides a window of target_chunk_size characters over the text, pulling each
window's end back to the last period or newline when one sits past the middle
of the window. Consecutive windows share `overlap` characters. No external
calls; operates entirely on local text.
"""

from typing import List, Tuple

from chunking.config import ChunkingConfig
from chunking.logging_config import get_logger

log = get_logger(__name__)


def fallback_windows(text: str, config: ChunkingConfig) -> List[Tuple[int, int]]:
    """
    Computes [start, end) character windows over the text.

    Always terminates: every iteration advances the window start by at least
    one character. A final window shorter than min_chunk_size is folded into
    the previous one when the result stays within max_chunk_size.

    Args:
        text:   Non-empty source text.
        config: Validated chunking configuration.

    Returns:
        Ordered windows covering the whole text.
    """
    size, overlap = config.target_chunk_size, config.overlap
    windows: List[Tuple[int, int]] = []
    start = 0

    while start < len(text):
        end = min(start + size, len(text))

        # Try to break at a sentence boundary or line end
        if end < len(text):
            window = text[start:end]
            break_point = max(window.rfind("."), window.rfind("\n"))
            if break_point > size * 0.5:
                end = start + break_point + 1

        windows.append((start, end))
        if end >= len(text):
            break

        next_start = end - overlap
        start = next_start if next_start > start else end

    if len(windows) > 1:
        tail_start, tail_end = windows[-1]
        prev_start = windows[-2][0]
        tail_len = len(text[tail_start:tail_end].strip())
        if tail_len < config.min_chunk_size and tail_end - prev_start <= config.max_chunk_size:
            windows[-2:] = [(prev_start, tail_end)]
    return windows


def fallback_chunk(text: str, config: ChunkingConfig) -> List[str]:
    """
    Splits text into overlapping fixed-size chunks.

    Args:
        text:   Raw input text.
        config: Validated chunking configuration.

    Returns:
        Stripped chunk texts; empty for blank input, at least one chunk
        otherwise.
    """
    if not text or not text.strip():
        return []

    chunks = [
        text[start:end].strip()
        for start, end in fallback_windows(text, config)
        if text[start:end].strip()
    ]
    log.debug("Fallback chunking — %d chunk(s) from %d chars", len(chunks), len(text))
    return chunks
