"""
chunking/types.py
-----------------
Value types shared by every stage of the chunking engine.

TextUnit and StructuralBlock are immutable NamedTuples produced once per call
and never mutated. Chunk is the output record handed back to the ingestion
pipeline, which persists it externally.
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, NamedTuple, Optional

from typing_extensions import TypedDict


# Reserved metadata key the engine adds to every chunk; all other keys are opaque.
CHUNK_INDEX_KEY = "chunk_index"


class TextUnit(NamedTuple):
    """An atomic span of source text (sentence or line) — never split further."""
    text:  str    # source[start:end], free of leading/trailing whitespace
    start: int    # inclusive character offset into the source text
    end:   int    # exclusive character offset
    structural: bool = False   # True when inside a code, list or table block

    @property
    def size(self) -> int:
        return self.end - self.start


class BlockKind(str, Enum):
    CODE  = "code"
    LIST  = "list"
    TABLE = "table"


class StructuralBlock(NamedTuple):
    """Inclusive unit range that must land in a single chunk."""
    start_unit: int
    end_unit:   int
    kind:       BlockKind


class ChunkingPath(str, Enum):
    """Which chunker produced the boundaries for one call."""
    SEMANTIC = "semantic"
    FALLBACK = "fallback"


class BoundaryDetection(NamedTuple):
    """
    Outcome of the similarity step.

    `candidates` holds unit indices i such that a cut between unit i and
    unit i + 1 is preferred. On the FALLBACK path it is empty and `error`
    describes why the similarity signal was unavailable.
    """
    path:       ChunkingPath
    candidates: FrozenSet[int] = frozenset()
    error:      Optional[str] = None


class Chunk(TypedDict):
    """Canonical output record of the chunking engine."""
    text:        str              # chunk content, overlap included
    metadata:    Dict[str, Any]   # caller metadata + CHUNK_INDEX_KEY
    chunk_index: int              # 0-based, sequential within one output list
