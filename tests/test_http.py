"""Unit tests for the JSON-over-HTTP transport and its error mapping."""

import json
import socket
import urllib.error
import urllib.request

import pytest

from chunking._http import post_json

URL = "http://localhost:11434/api/embed"


class FakeResponse:
    def __init__(self, body: bytes):
        self.body = body

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _serve(monkeypatch, outcome):
    seen = []

    def urlopen(request, timeout=None):
        seen.append((request, timeout))
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)

    monkeypatch.setattr(urllib.request, "urlopen", urlopen)
    return seen


def test_posts_json_and_decodes_object(monkeypatch):
    seen = _serve(monkeypatch, b'{"embeddings": [[0.1, 0.2]]}')
    result = post_json(URL, {"model": "m", "input": ["a"]}, timeout=5)

    assert result == {"embeddings": [[0.1, 0.2]]}
    request, timeout = seen[0]
    assert timeout == 5
    assert request.get_method() == "POST"
    assert request.full_url == URL
    assert request.get_header("Content-type") == "application/json"
    assert json.loads(request.data.decode("utf-8")) == {"model": "m", "input": ["a"]}


@pytest.mark.parametrize("error", [
    socket.timeout("timed out"),
    urllib.error.URLError(socket.timeout("timed out")),
])
def test_timeouts_raise_timeout_error(monkeypatch, error):
    _serve(monkeypatch, error)
    with pytest.raises(TimeoutError):
        post_json(URL, {})


def test_unreachable_server_raises_connection_error(monkeypatch):
    _serve(monkeypatch, urllib.error.URLError(ConnectionRefusedError(111, "refused")))
    with pytest.raises(ConnectionError, match="ollama serve"):
        post_json(URL, {})


def test_http_error_status_raises_connection_error(monkeypatch):
    _serve(monkeypatch, urllib.error.HTTPError(URL, 500, "Internal Server Error", {}, None))
    with pytest.raises(ConnectionError, match="500"):
        post_json(URL, {})


@pytest.mark.parametrize("body", [b"not json", b"[1, 2, 3]"])
def test_bad_body_raises_runtime_error(monkeypatch, body):
    _serve(monkeypatch, body)
    with pytest.raises(RuntimeError):
        post_json(URL, {})
