"""
chunking/embedder.py
--------------------
Embedding provider contract and its Ollama-backed implementation.

The chunking engine never owns a global client: callers inject any object
with an `embed(texts)` method (or a plain function with that signature).
`OllamaEmbedder` is the production provider: it batches unit texts into
as few /api/embed requests as possible and returns a float32 matrix with one
row per input text, in input order.

Prerequisite:
    ollama pull nomic-embed-text
    ollama serve
"""

import time
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
from typing_extensions import Protocol, runtime_checkable

from chunking._http import post_json
from chunking.config import DEFAULT_EMBED_MODEL, EMBED_BATCH_SIZE, EMBED_URL, HTTP_TIMEOUT
from chunking.logging_config import get_logger

log = get_logger(__name__)


class EmbeddingError(RuntimeError):
    """Raised when a provider answers with something that is not one vector per text."""


@runtime_checkable
class EmbeddingProvider(Protocol):
    def embed(self, texts: Sequence[str]) -> Sequence[Sequence[float]]:
        ...


EmbedFunction = Callable[[Sequence[str]], Sequence[Sequence[float]]]
ProviderLike  = Union[EmbeddingProvider, EmbedFunction]


def as_embed_function(provider: ProviderLike) -> EmbedFunction:
    """Accepts either a provider object or a bare function and returns the callable."""
    if isinstance(provider, EmbeddingProvider):
        return provider.embed
    if callable(provider):
        return provider
    raise TypeError(
        f"embedding provider must define embed() or be callable, got {type(provider).__name__}"
    )


def to_matrix(vectors: Sequence[Sequence[float]], expected: int) -> np.ndarray:
    """
    Converts provider output to a 2-D float32 array and checks its shape.

    Raises:
        EmbeddingError: On a count mismatch or ragged / non-numeric vectors.
    """
    try:
        matrix = np.asarray(vectors, dtype=np.float32)
    except (TypeError, ValueError) as exc:
        raise EmbeddingError(f"Embedding vectors are not a numeric matrix: {exc}") from exc

    if matrix.ndim != 2 or matrix.shape[0] != expected:
        raise EmbeddingError(
            f"Expected {expected} embedding vectors, got array of shape {matrix.shape}"
        )
    return matrix


class OllamaEmbedder:
    """
    Batched embedding client for a local Ollama server.

    Args:
        model:       Ollama embedding model name.
        url:         Full /api/embed endpoint URL.
        timeout:     Per-request socket timeout in seconds.
        batch_size:  Texts per request.
        max_retries: Extra attempts per batch after a transport failure.
        retry_delay: Base delay in seconds; doubles on every retry.
    """

    def __init__(
        self,
        model: str = DEFAULT_EMBED_MODEL,
        url: str = EMBED_URL,
        timeout: float = HTTP_TIMEOUT,
        batch_size: int = EMBED_BATCH_SIZE,
        max_retries: int = 2,
        retry_delay: float = 1.0,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be a positive integer.")
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0.")
        self.model       = model
        self.url         = url
        self.timeout     = timeout
        self.batch_size  = batch_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def __repr__(self) -> str:
        return f"OllamaEmbedder(model={self.model!r}, url={self.url!r})"

    def _post_batch(self, batch: List[str]) -> List[List[float]]:
        attempt = 0
        while True:
            try:
                response = post_json(
                    self.url,
                    {"model": self.model, "input": batch},
                    timeout=self.timeout,
                )
                break
            except (ConnectionError, TimeoutError) as exc:
                attempt += 1
                if attempt > self.max_retries:
                    raise
                delay = self.retry_delay * 2 ** (attempt - 1)
                log.warning(
                    "Embedding request failed (%s) — retry %d/%d in %.1fs",
                    exc, attempt, self.max_retries, delay,
                )
                time.sleep(delay)

        if "embeddings" not in response:
            raise EmbeddingError(
                f"Ollama embedding response missing 'embeddings' key.\n"
                f"Got keys: {sorted(response)}"
            )
        return response["embeddings"]

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        """
        Embeds texts into a 2-D float32 numpy array.

        Args:
            texts: Strings to embed; may be empty.

        Returns:
            np.ndarray of shape (len(texts), embedding_dim).

        Raises:
            ConnectionError: If Ollama is unreachable after all retries.
            TimeoutError:    If Ollama keeps timing out after all retries.
            EmbeddingError:  If the response does not hold one vector per text.
        """
        texts = list(texts)
        if not texts:
            return np.empty((0, 0), dtype=np.float32)

        vectors: List[List[float]] = []
        for offset in range(0, len(texts), self.batch_size):
            batch = texts[offset:offset + self.batch_size]
            vectors.extend(self._post_batch(batch))

        log.debug("Embedded %d text(s) with model '%s'", len(texts), self.model)
        return to_matrix(vectors, len(texts))


def embed_texts(
    texts: Sequence[str],
    model: str = DEFAULT_EMBED_MODEL,
    timeout: Optional[float] = None,
) -> np.ndarray:
    """
    One-off convenience wrapper around OllamaEmbedder.embed().

    Args:
        texts:   Strings to embed.
        model:   Ollama embedding model name.
        timeout: Per-request timeout in seconds (default: HTTP_TIMEOUT).

    Returns:
        np.ndarray of shape (len(texts), embedding_dim).
    """
    embedder = OllamaEmbedder(model=model, timeout=timeout or HTTP_TIMEOUT)
    return embedder.embed(texts)
