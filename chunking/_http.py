"""
chunking/_http.py
-----------------
JSON-over-HTTP transport used by the embedding provider.

`post_json()` is the single point of control for timeouts and error mapping,
so provider code never touches urllib directly. The chunking engine treats
every error raised here as a signal to take the fallback path.
"""

import json
import socket
import urllib.error
import urllib.request
from typing import Any, Dict


def post_json(
    url: str,
    payload: Dict[str, Any],
    timeout: float = 60,
) -> Dict[str, Any]:
    """
    Sends a JSON POST request and returns the decoded response body.

    Args:
        url:     Full endpoint URL.
        payload: Request body as a Python dict (will be JSON-encoded).
        timeout: Socket timeout in seconds.

    Returns:
        Parsed JSON response as a dict.

    Raises:
        TimeoutError:    If the server does not answer within `timeout`.
        ConnectionError: If the server is unreachable or answers with an
                         HTTP error status.
        RuntimeError:    If the body is not a JSON object.
    """
    body = json.dumps(payload).encode("utf-8")

    request = urllib.request.Request(
        url,
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            decoded = json.loads(response.read().decode("utf-8"))

    except socket.timeout as exc:
        raise TimeoutError(f"No response from {url} within {timeout}s") from exc

    except urllib.error.HTTPError as exc:
        raise ConnectionError(f"{url} answered HTTP {exc.code}: {exc.reason}") from exc

    except urllib.error.URLError as exc:
        if isinstance(exc.reason, socket.timeout):
            raise TimeoutError(f"No response from {url} within {timeout}s") from exc
        raise ConnectionError(
            f"Embedding server is not reachable at {url}.\n"
            "  → Make sure Ollama is running:  ollama serve\n"
            f"  Original error: {exc.reason}"
        ) from exc

    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Could not parse response from {url} as JSON: {exc}") from exc

    if not isinstance(decoded, dict):
        raise RuntimeError(
            f"Expected a JSON object from {url}, got {type(decoded).__name__}"
        )
    return decoded
