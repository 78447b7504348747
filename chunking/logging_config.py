"""
chunking/logging_config.py
--------------------------
Centralized logging configuration for the chunking engine.

All modules import `get_logger(__name__)` to obtain a named logger under the
`chunking` namespace. Logging format is structured and human-readable.

Log levels:
    DEBUG   — cut decisions, unit and boundary counts, effective targets
    INFO    — ingestion milestones (files found, chunks produced)
    WARNING — recovered failures (embedding provider down → fallback path,
              unterminated code fence, undersized tail left standalone)
    ERROR   — validation failures that propagate to the caller

The initial level can be set with the CHUNKING_LOG_LEVEL environment variable,
or changed at runtime:
    import logging
    logging.getLogger("chunking").setLevel(logging.DEBUG)
"""

import logging
import os
import sys


# ── Configuration ──────────────────────────────────────────────────────────────

_LOG_FORMAT  = "%(asctime)s [%(levelname)-8s] %(name)s — %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME   = "chunking"
_LEVEL_ENV   = "CHUNKING_LOG_LEVEL"


def _level_from_env(default: int) -> int:
    name = os.environ.get(_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO) -> None:
    """
    Attaches a stderr StreamHandler to the 'chunking' logger.

    Safe to call multiple times — handlers are not duplicated.

    Args:
        level: Fallback level when CHUNKING_LOG_LEVEL is unset (default: INFO).
    """
    root = logging.getLogger(_ROOT_NAME)
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)   # stdout is reserved for CLI output
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(_level_from_env(level))
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Returns a child logger under the 'chunking' namespace.

    Modules outside the package (e.g. app.py, validator/) are re-rooted so
    their records share the same handler.

    Args:
        name: Typically __name__ of the calling module.

    Returns:
        A configured logging.Logger instance.
    """
    configure_logging()
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
