"""
chunking/boundaries.py
----------------------
Similarity boundary detection over adjacent units.

Every distinct unit text is embedded in one provider call; cosine similarity
is computed for each adjacent pair, and pairs below the configured threshold
become boundary candidates (preferred cut points for the assembler).

This step is all-or-nothing: any provider error, malformed response or
timeout yields a FALLBACK result with no candidates, and the orchestrator
switches the whole call to fixed-window chunking. Exceptions never escape.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Dict, List, Optional

import numpy as np

from chunking.embedder import ProviderLike, as_embed_function, to_matrix
from chunking.logging_config import get_logger
from chunking.types import BoundaryDetection, ChunkingPath, TextUnit

log = get_logger(__name__)


# ── Internal helpers ───────────────────────────────────────────────────────────

def adjacent_similarity(vectors: np.ndarray) -> np.ndarray:
    """
    Cosine similarity between each row and the next.

    Args:
        vectors: 2-D array of shape (n, dim).

    Returns:
        1-D array of shape (max(n - 1, 0),), values in [-1, 1]. A zero vector
        scores 0 against anything.
    """
    if len(vectors) < 2:
        return np.empty((0,), dtype=np.float32)
    # Normalise to unit vectors (epsilon keeps zero rows at zero)
    norms  = np.linalg.norm(vectors, axis=1, keepdims=True)
    normed = vectors / (norms + 1e-10)
    return np.sum(normed[:-1] * normed[1:], axis=1)


def _fetch(embed, texts: List[str], timeout: Optional[float]) -> np.ndarray:
    if timeout is None:
        return to_matrix(embed(texts), len(texts))

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chunking-embed")
    try:
        future = executor.submit(embed, texts)
        return to_matrix(future.result(timeout=timeout), len(texts))
    except FutureTimeout as exc:
        raise TimeoutError(f"embedding provider did not answer within {timeout}s") from exc
    finally:
        # Do not block on a hung provider; its late result is discarded. The
        # worker thread itself is not daemonic and lives until the call returns.
        executor.shutdown(wait=False, cancel_futures=True)


# ── Public API ─────────────────────────────────────────────────────────────────

def detect_boundaries(
    units: List[TextUnit],
    provider: Optional[ProviderLike],
    threshold: float,
    timeout: Optional[float] = None,
) -> BoundaryDetection:
    """
    Scores adjacent units and returns the preferred cut points.

    Args:
        units:     Unit sequence from segment_text().
        provider:  Embedding provider, plain embed function, or None to bypass
                   the semantic path.
        threshold: Similarity below which a pair becomes a candidate.
        timeout:   Optional bound, in seconds, on the provider call.

    Returns:
        BoundaryDetection — SEMANTIC with candidate indices (i means "cut
        between unit i and unit i + 1"), or FALLBACK with the reason.
    """
    if provider is None:
        return BoundaryDetection(ChunkingPath.FALLBACK, error="no embedding provider")
    if len(units) < 2:
        return BoundaryDetection(ChunkingPath.SEMANTIC)

    # Embed each distinct text once; duplicates share a row.
    row_of: Dict[str, int] = {}
    for unit in units:
        row_of.setdefault(unit.text, len(row_of))
    distinct = list(row_of)

    try:
        embed   = as_embed_function(provider)
        vectors = _fetch(embed, distinct, timeout)
    except Exception as exc:  # provider failures of any kind select the fallback path
        log.warning(
            "Embedding provider failed (%s: %s) — switching to fallback chunking",
            type(exc).__name__, exc,
        )
        return BoundaryDetection(ChunkingPath.FALLBACK, error=f"{type(exc).__name__}: {exc}")

    per_unit = vectors[[row_of[unit.text] for unit in units]]
    scores   = adjacent_similarity(per_unit)
    candidates = frozenset(int(i) for i in np.flatnonzero(scores < threshold))

    log.debug(
        "Boundary detection — %d units, %d distinct texts, %d candidate(s) below %.2f",
        len(units), len(distinct), len(candidates), threshold,
    )
    return BoundaryDetection(ChunkingPath.SEMANTIC, candidates)
