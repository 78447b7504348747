"""
chunking/assembler.py
---------------------
Size-constrained assembly of units into chunks.

Walks the unit sequence once, growing a chunk until it reaches its (possibly
adapted) target, then cuts at the nearest boundary candidate within a short
look-ahead window, or right away if none is in reach. Structural blocks are
appended atomically. Output is a list of inclusive (first_unit, last_unit)
spans; chunk text is re-sliced from the source by the orchestrator.

Rules, in order of precedence:
  1. A structural block is never split. If it does not fit in the current
     chunk, the chunk is closed first, unless the chunk is still below
     min_chunk_size, in which case the block is committed anyway and the
     chunk is closed right after it. A block longer than max_chunk_size is
     emitted whole.
  2. max_chunk_size is a hard ceiling for ordinary units: a unit that would
     push the chunk over it starts the next chunk.
  3. A trailing chunk below min_chunk_size is merged into its predecessor,
     provided the merged chunk still fits within max_chunk_size. Otherwise
     the cut between the two is moved back over whole units until both
     chunks lie within [min_chunk_size, max_chunk_size]. Only when no unit
     boundary allows that is the short tail kept standalone.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple

from chunking.config import ChunkingConfig
from chunking.logging_config import get_logger
from chunking.sizing import adaptive_target, upcoming_text
from chunking.types import StructuralBlock, TextUnit

log = get_logger(__name__)

Span = Tuple[int, int]


class _Assembler:
    """Holds the per-call state of one assembly pass."""

    def __init__(
        self,
        units: List[TextUnit],
        blocks: List[StructuralBlock],
        candidates: FrozenSet[int],
        config: ChunkingConfig,
    ):
        self.units      = units
        self.block_at: Dict[int, StructuralBlock] = {b.start_unit: b for b in blocks}
        self.in_block   = {i for b in blocks for i in range(b.start_unit + 1, b.end_unit + 1)}
        self.candidates = candidates
        self.config     = config
        self.spans: List[Span] = []
        self.start: Optional[int] = None
        self.target = config.target_chunk_size

    def length(self, first: int, last: int) -> int:
        return self.units[last].end - self.units[first].start

    def open(self, first: int) -> None:
        self.start  = first
        self.target = adaptive_target(
            upcoming_text(self.units, first, self.config.target_chunk_size),
            self.config,
        )
        if self.target != self.config.target_chunk_size:
            log.debug("Chunk at unit %d — adapted target %d", first, self.target)

    def close(self, last: int, reason: str) -> None:
        if self.start is None:
            raise RuntimeError(f"close() at unit {last} with no open chunk")
        self.spans.append((self.start, last))
        log.debug(
            "Cut after unit %d (%s) — chunk of %d chars",
            last, reason, self.length(self.start, last),
        )
        self.start = None

    def _lookahead(self, after: int) -> Optional[int]:
        """Nearest candidate reachable from `after` without crossing a block or the max."""
        n = len(self.units)
        for j in range(after + 1, min(n, after + 1 + self.config.lookahead_units)):
            if j in self.block_at or self.length(self.start, j) > self.config.max_chunk_size:
                return None
            if j in self.candidates:
                return j
        return None

    def run(self) -> List[Span]:
        n, cfg = len(self.units), self.config
        i = 0
        while i < n:
            block = self.block_at.get(i)
            last  = block.end_unit if block else i

            if self.start is None:
                self.open(i)
            elif self.length(self.start, last) > cfg.max_chunk_size:
                undersized = self.length(self.start, i - 1) < cfg.min_chunk_size
                if block is not None and undersized:
                    self.close(last, f"{block.kind.value} block committed into undersized chunk")
                    i = last + 1
                    continue
                self.close(i - 1, "max size")
                self.open(i)

            size = self.length(self.start, last)
            i = last + 1

            if block is not None and size > cfg.max_chunk_size:
                self.close(last, f"oversized {block.kind.value} block")
                continue
            if i >= n or size < self.target:
                continue

            if last in self.candidates:
                self.close(last, "boundary candidate")
                continue
            ahead = self._lookahead(last)
            if ahead is not None:
                self.close(ahead, "boundary candidate in look-ahead")
                i = ahead + 1
            else:
                self.close(last, "target reached")

        if self.start is not None:
            self.close(n - 1, "end of text")
        self._merge_tail()
        return self.spans

    def _merge_tail(self) -> None:
        if len(self.spans) < 2:
            return
        first, last = self.spans[-1]
        if self.length(first, last) >= self.config.min_chunk_size:
            return
        prev_first = self.spans[-2][0]
        if self.length(prev_first, last) <= self.config.max_chunk_size:
            self.spans[-2:] = [(prev_first, last)]
            return

        cut = self._rebalance(prev_first, first, last)
        if cut is not None:
            self.spans[-2:] = [(prev_first, cut - 1), (cut, last)]
            log.debug(
                "Trailing chunk rebalanced — cut moved from unit %d to unit %d", first, cut,
            )
        else:
            log.warning(
                "Trailing chunk of %d chars is below min_chunk_size=%d but cannot be "
                "merged without exceeding max_chunk_size=%d — kept standalone",
                self.length(first, last), self.config.min_chunk_size,
                self.config.max_chunk_size,
            )

    def _rebalance(self, prev_first: int, first: int, last: int) -> Optional[int]:
        """Latest unit, before `first`, at which both final chunks fit [min, max]."""
        cfg = self.config
        for cut in range(first - 1, prev_first, -1):
            tail = self.length(cut, last)
            if tail > cfg.max_chunk_size:
                return None
            if cut in self.in_block:
                continue
            if tail >= cfg.min_chunk_size and self.length(prev_first, cut - 1) >= cfg.min_chunk_size:
                return cut
        return None


def assemble(
    units: List[TextUnit],
    blocks: List[StructuralBlock],
    candidates: FrozenSet[int],
    config: ChunkingConfig,
) -> List[Span]:
    """
    Groups units into chunk spans honouring the size limits.

    Args:
        units:      Unit sequence (structural flags already applied).
        blocks:     Non-overlapping structural blocks; empty when content-aware
                    chunking is off.
        candidates: Preferred cut points (i = between unit i and i + 1).
        config:     Validated chunking configuration.

    Returns:
        Inclusive (first_unit, last_unit) spans covering every unit in order.
    """
    if not units:
        return []
    return _Assembler(units, blocks, candidates, config).run()
