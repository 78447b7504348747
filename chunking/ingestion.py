"""
chunking/ingestion.py
---------------------
Multi-document ingestion front end for the chunking engine.

Walks a directory of plaintext / Markdown documents, chunks each file
independently with the semantic chunker, and returns one globally indexed
chunk list. Each chunk carries source-level metadata
({"source": filename, "file_type": suffix}) for downstream attribution.

Persistence and embedding of the resulting chunks are left to the caller.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from chunking.chunker import chunk_multiple_texts, estimate_token_count
from chunking.config import ConfigLike
from chunking.embedder import ProviderLike
from chunking.logging_config import get_logger
from chunking.types import Chunk
from validator.chunk_validator import validate

log = get_logger(__name__)

SUPPORTED_SUFFIXES = (".txt", ".md")


def discover_files(
    data_dir: Union[str, Path],
    suffixes: Sequence[str] = SUPPORTED_SUFFIXES,
) -> List[Path]:
    """
    Lists supported documents directly under data_dir, sorted by name.

    Raises:
        FileNotFoundError: If data_dir does not exist.
    """
    root = Path(data_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Data directory not found: {root}")
    wanted = {s.lower() for s in suffixes}
    return sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() in wanted)


# ── Public API ─────────────────────────────────────────────────────────────────

def ingest(
    data_dir: Union[str, Path],
    config: ConfigLike = None,
    provider: Optional[ProviderLike] = None,
    max_workers: int = 1,
) -> List[Chunk]:
    """
    Loads every supported file in data_dir and chunks them into one list.

    Args:
        data_dir:    Directory containing .txt / .md documents.
        config:      Chunking configuration (ChunkingConfig, mapping, or None).
        provider:    Embedding provider for boundary detection; None uses
                     fallback chunking throughout.
        max_workers: Documents chunked concurrently.

    Returns:
        Validated chunks, chunk_index running across all documents.

    Raises:
        FileNotFoundError: If data_dir is missing or holds no supported files.
        validator.chunk_validator.ValidationError: If the output is malformed.
    """
    log.info("Ingestion started — scanning %s", data_dir)
    files = discover_files(data_dir)
    if not files:
        raise FileNotFoundError(
            f"No {'/'.join(SUPPORTED_SUFFIXES)} files found in {data_dir}. "
            "Add documents to the data directory before running."
        )
    log.info("Found %d document(s) to chunk", len(files))

    items: List[Dict[str, Any]] = [
        {
            "text": path.read_text(encoding="utf-8"),
            "metadata": {"source": path.name, "file_type": path.suffix.lower().lstrip(".")},
        }
        for path in files
    ]
    chunks = validate(chunk_multiple_texts(items, config, provider, max_workers=max_workers))

    for path in files:
        count = sum(1 for c in chunks if c["metadata"]["source"] == path.name)
        log.debug("%s → %d chunks", path.name, count)

    log.info(
        "Ingestion complete — %d chunks (~%d tokens) from %d document(s)",
        len(chunks), sum(estimate_token_count(c["text"]) for c in chunks), len(files),
    )
    return chunks
