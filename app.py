"""
app.py
------
Command-line entry point for the chunking engine.

  data/*.txt|*.md → ingest() → chunk_multiple_texts() → validate() → JSON on stdout

Boundary detection uses a local Ollama embedding model; when Ollama is down
the engine falls back to fixed-window chunking on its own, so the command
still succeeds. Pass --no-embed to skip the embedding step entirely.

Usage:
    python app.py [data_dir] [--no-embed]
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

from chunking.config import DEFAULT_EMBED_MODEL, HTTP_TIMEOUT, ChunkingConfig
from chunking.embedder import OllamaEmbedder
from chunking.ingestion import ingest
from chunking.logging_config import get_logger
from validator.chunk_validator import ValidationError

log = get_logger(__name__)

# ── Configuration ───────────────────────────────────────────────────────────────

DATA_DIR = Path(__file__).parent / "data"
CONFIG   = ChunkingConfig(
    enable_content_aware_chunking=True,
    enable_adaptive_sizing=True,
    embedding_timeout=120,
)


def build_provider(no_embed: bool = False) -> Optional[OllamaEmbedder]:
    """Ollama provider whose request timeout never outlives CONFIG.embedding_timeout."""
    if no_embed:
        return None
    timeout = min(HTTP_TIMEOUT, CONFIG.embedding_timeout or HTTP_TIMEOUT)
    return OllamaEmbedder(model=DEFAULT_EMBED_MODEL, timeout=timeout)


def main(argv: Optional[List[str]] = None) -> int:
    args     = list(sys.argv[1:] if argv is None else argv)
    no_embed = "--no-embed" in args
    paths    = [a for a in args if not a.startswith("--")]
    data_dir = Path(paths[0]) if paths else DATA_DIR

    provider = build_provider(no_embed)
    log.info("Embedding provider: %s", provider or "none — fallback chunking")
    try:
        chunks = ingest(data_dir, config=CONFIG, provider=provider)
    except FileNotFoundError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"[VALIDATION ERROR] {exc}", file=sys.stderr)
        return 2

    print(json.dumps(chunks, indent=2, ensure_ascii=False))
    return 0


# ── Entry point ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    sys.exit(main())
