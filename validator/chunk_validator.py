"""
validator/chunk_validator.py
----------------------------
Output schema enforcement for chunk lists handed to the ingestion pipeline.

Checks every record against the Chunk TypedDict contract before it is
persisted downstream. Raises a typed ValidationError on any violation — no
silent failures.
"""

import json
from typing import Any, Dict, List, Sequence

from chunking.logging_config import get_logger
from chunking.types import CHUNK_INDEX_KEY, Chunk

log = get_logger(__name__)


# ── Custom exception ───────────────────────────────────────────────────────────

class ValidationError(ValueError):
    """Raised when a chunk list fails schema validation."""


# ── Validators ─────────────────────────────────────────────────────────────────

def validate_json_string(raw: str) -> List[Dict[str, Any]]:
    """
    Parses a JSON array of chunk records (e.g. the CLI output).

    Args:
        raw: A JSON-encoded string.

    Returns:
        Decoded list of dicts, not yet validated.

    Raises:
        ValidationError: If the string is not valid JSON or not an array.
    """
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON: {exc}") from exc
    if not isinstance(decoded, list):
        raise ValidationError(f"Expected a JSON array, got {type(decoded).__name__}.")
    return decoded


def validate_chunk(record: Any, position: int) -> Chunk:
    """
    Validates a single chunk record.

    Checks:
      - record is a dict with keys: text, metadata, chunk_index
      - text is a non-blank string
      - metadata is a dict whose 'chunk_index' equals the record's chunk_index
      - chunk_index equals the record's position in the list

    Raises:
        ValidationError: If any check fails.
    """
    if not isinstance(record, dict):
        log.error("Validation failed — chunks[%d] is not a dict", position)
        raise ValidationError(
            f"chunks[{position}] must be a dict, got {type(record).__name__}."
        )

    missing = {"text", "metadata", "chunk_index"} - record.keys()
    if missing:
        log.error("Validation failed — chunks[%d] missing keys: %s", position, missing)
        raise ValidationError(f"chunks[{position}] missing required keys: {missing}")

    if not isinstance(record["text"], str) or not record["text"].strip():
        log.error("Validation failed — chunks[%d]['text'] is empty or wrong type", position)
        raise ValidationError(f"chunks[{position}]['text'] must be a non-empty string.")

    index = record["chunk_index"]
    if isinstance(index, bool) or not isinstance(index, int) or index != position:
        log.error("Validation failed — chunks[%d] has chunk_index=%r", position, index)
        raise ValidationError(
            f"chunks[{position}]['chunk_index'] must be {position}, got {index!r}."
        )

    metadata = record["metadata"]
    if not isinstance(metadata, dict):
        log.error("Validation failed — chunks[%d]['metadata'] is not a dict", position)
        raise ValidationError(f"chunks[{position}]['metadata'] must be a dict.")
    if metadata.get(CHUNK_INDEX_KEY) != index:
        log.error("Validation failed — chunks[%d] metadata index mismatch", position)
        raise ValidationError(
            f"chunks[{position}]['metadata']['{CHUNK_INDEX_KEY}'] must equal {index}."
        )

    return Chunk(**record)  # type: ignore[typeddict-item]


def validate(chunks: Sequence[Any]) -> List[Chunk]:
    """
    Validates a whole chunk list: each record, and sequential indices from 0.

    An empty list is valid (blank input produces no chunks).

    Args:
        chunks: Output of chunk_text() / chunk_multiple_texts(), or decoded JSON.

    Returns:
        The same records typed as Chunk.

    Raises:
        ValidationError: If the list or any record is malformed.
    """
    if not isinstance(chunks, (list, tuple)):
        log.error("Validation failed — chunks is not a list")
        raise ValidationError(f"chunks must be a list, got {type(chunks).__name__}.")

    validated = [validate_chunk(record, i) for i, record in enumerate(chunks)]
    log.debug("Validation succeeded — %d chunk(s)", len(validated))
    return validated
