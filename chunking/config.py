"""
chunking/config.py
------------------
Configuration surface of the chunking engine.

`ChunkingConfig` is validated on construction: an inconsistent configuration
(e.g. min_chunk_size > max_chunk_size) is a programming error and raises
immediately instead of being clamped.
"""

import os
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ── Deployment defaults ────────────────────────────────────────────────────────
OLLAMA_HOST         = os.environ.get("OLLAMA_HOST", "http://localhost:11434")
EMBED_URL           = f"{OLLAMA_HOST.rstrip('/')}/api/embed"
DEFAULT_EMBED_MODEL = os.environ.get("CHUNKING_EMBED_MODEL", "nomic-embed-text")
HTTP_TIMEOUT        = 60
EMBED_BATCH_SIZE    = 100
# ──────────────────────────────────────────────────────────────────────────────


class ChunkingConfig(BaseModel):
    """
    Size limits and feature switches for one chunking call.

    All sizes are character counts. Fields:
        target_chunk_size:  preferred chunk length; cuts are sought once reached.
        min_chunk_size:     chunks shorter than this are avoided.
        max_chunk_size:     hard ceiling, except for oversized structural blocks.
        similarity_threshold: adjacent units below this cosine similarity
                            mark a preferred cut.
        overlap:            trailing characters of chunk i repeated at the head
                            of chunk i + 1.
        enable_content_aware_chunking: keep code fences and lists intact.
        enable_adaptive_sizing: shrink the target over dense technical text.
        embedding_timeout:  seconds to wait for the embedding provider before
                            falling back (None waits indefinitely). The
                            abandoned call keeps running in its worker
                            thread, and interpreter exit waits for it, so
                            providers should carry their own request
                            timeout (OllamaEmbedder.timeout).
        lookahead_units:    how many units past the target to search for a
                            preferred cut.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target_chunk_size: int = Field(default=2000, gt=0)
    min_chunk_size:    int = Field(default=500, gt=0)
    max_chunk_size:    int = Field(default=4000, gt=0)
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    overlap:           int = Field(default=200, ge=0)
    enable_content_aware_chunking: bool = False
    enable_adaptive_sizing:        bool = False
    embedding_timeout: Optional[float] = Field(default=None, gt=0)
    lookahead_units:   int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _check_size_order(self) -> "ChunkingConfig":
        if not self.min_chunk_size <= self.target_chunk_size <= self.max_chunk_size:
            raise ValueError(
                "chunk sizes must satisfy min_chunk_size <= target_chunk_size <= "
                f"max_chunk_size, got min={self.min_chunk_size}, "
                f"target={self.target_chunk_size}, max={self.max_chunk_size}"
            )
        return self

    @property
    def max_unit_size(self) -> int:
        """Longest unit the assembler can always place without breaking [min, max]."""
        slack = self.max_chunk_size - self.min_chunk_size
        if slack <= 0:
            return self.max_chunk_size
        return min(self.target_chunk_size, slack)


ConfigLike = Union[ChunkingConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike = None) -> ChunkingConfig:
    """
    Normalises the accepted config forms into a validated ChunkingConfig.

    Args:
        config: A ChunkingConfig, a mapping of field overrides, or None.

    Returns:
        A ChunkingConfig instance.

    Raises:
        pydantic.ValidationError: If the overrides are invalid (a ValueError).
        TypeError: If `config` is of an unsupported type.
    """
    if config is None:
        return ChunkingConfig()
    if isinstance(config, ChunkingConfig):
        return config
    if isinstance(config, Mapping):
        return ChunkingConfig(**config)
    raise TypeError(
        f"config must be a ChunkingConfig, a mapping or None, got {type(config).__name__}"
    )
