"""
chunking/chunker.py
-------------------
Entry points of the semantic chunking engine.

Pipeline for one text:

  SEMANTIC path
    text → segment_text() → detect_blocks() → detect_boundaries()
         → assemble() → overlap_spans() → Chunk records

  FALLBACK path (no provider, provider error, timeout)
    text → fallback_chunk() → Chunk records

The path is chosen by the BoundaryDetection value returned from the
similarity step. Both entry points are pure functions of their inputs and the
injected embedding provider; nothing survives between calls.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence

from chunking.assembler import assemble
from chunking.boundaries import detect_boundaries
from chunking.config import ConfigLike, resolve_config
from chunking.embedder import ProviderLike
from chunking.fallback import fallback_chunk
from chunking.logging_config import get_logger
from chunking.overlap import overlap_spans, span_text
from chunking.segmenter import segment_text
from chunking.structure import detect_blocks, mark_structural
from chunking.types import CHUNK_INDEX_KEY, Chunk, ChunkingPath

log = get_logger(__name__)


def estimate_token_count(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text) / 4)


def _make_chunks(texts: List[str], metadata: Mapping[str, Any]) -> List[Chunk]:
    chunks: List[Chunk] = []
    for index, text in enumerate(texts):
        chunk_metadata: Dict[str, Any] = dict(metadata)
        chunk_metadata[CHUNK_INDEX_KEY] = index
        chunks.append(Chunk(text=text, metadata=chunk_metadata, chunk_index=index))
    return chunks


# ── Public API ─────────────────────────────────────────────────────────────────

def chunk_text(
    text: str,
    metadata: Optional[Mapping[str, Any]] = None,
    config: ConfigLike = None,
    provider: Optional[ProviderLike] = None,
) -> List[Chunk]:
    """
    Splits one text into retrieval-sized, topic-coherent chunks.

    Args:
        text:     Raw document text. Blank input yields an empty list.
        metadata: Caller key/value record copied into every chunk; only the
                  'chunk_index' key is added or overwritten.
        config:   ChunkingConfig, mapping of overrides, or None for defaults.
        provider: Embedding provider (object with embed() or a function).
                  None bypasses the semantic path and uses fallback chunking.

    Returns:
        Chunks in source order with chunk_index 0, 1, 2, …

    Raises:
        pydantic.ValidationError: If the configuration is invalid.
    """
    cfg  = resolve_config(config)
    meta = metadata or {}
    if not text or not text.strip():
        return []

    units  = segment_text(text, max_unit_size=cfg.max_unit_size)
    blocks = detect_blocks(text, units) if cfg.enable_content_aware_chunking else []
    units  = mark_structural(units, blocks)

    detection = detect_boundaries(
        units, provider, cfg.similarity_threshold, timeout=cfg.embedding_timeout,
    )
    if detection.path is ChunkingPath.FALLBACK:
        log.info("Using fallback chunking (%s)", detection.error)
        return _make_chunks(fallback_chunk(text, cfg), meta)

    spans = assemble(units, blocks, detection.candidates, cfg)
    spans = overlap_spans(units, spans, blocks, cfg.overlap)
    texts = [span_text(text, units, span) for span in spans]

    log.debug(
        "Semantic chunking — %d units, %d block(s), %d chunk(s)",
        len(units), len(blocks), len(texts),
    )
    return _make_chunks(texts, meta)


def chunk_multiple_texts(
    items: Sequence[Mapping[str, Any]],
    config: ConfigLike = None,
    provider: Optional[ProviderLike] = None,
    max_workers: int = 1,
) -> List[Chunk]:
    """
    Chunks several texts (pages, rows, files) into one combined list.

    Each item is a mapping with a 'text' key and an optional 'metadata' key.
    Per-text metadata is preserved, while chunk_index (top-level and in
    metadata) is renumbered to run 0, 1, 2, … across the whole output.

    Args:
        items:       Ordered {text, metadata} records.
        config:      ChunkingConfig, mapping of overrides, or None for defaults.
        provider:    Embedding provider shared by all items.
        max_workers: Texts chunked concurrently; output order always follows
                     input order.

    Returns:
        The concatenated, globally indexed chunk list.

    Raises:
        pydantic.ValidationError: If the configuration is invalid.
        KeyError: If an item has no 'text' key.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be a positive integer.")
    cfg = resolve_config(config)

    def run(item: Mapping[str, Any]) -> List[Chunk]:
        return chunk_text(item["text"], item.get("metadata"), cfg, provider)

    if max_workers == 1 or len(items) < 2:
        per_text = [run(item) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_text = list(executor.map(run, items))

    combined: List[Chunk] = []
    for chunks in per_text:
        for chunk in chunks:
            index = len(combined)
            chunk["metadata"][CHUNK_INDEX_KEY] = index
            combined.append(Chunk(text=chunk["text"], metadata=chunk["metadata"], chunk_index=index))
    return combined
