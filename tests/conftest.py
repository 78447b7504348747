"""Shared fixtures: deterministic embedding providers and sample documents."""

import time
from typing import List, Sequence

import pytest

TOPICS = ("cats", "rockets", "banking", "gardens")


def topic_sentence(topic: str, k: int) -> str:
    return f"The {topic} note {k:02d} says {topic} matter a great deal here."


def topic_paragraph(topic: str, sentences: int = 8) -> str:
    return " ".join(topic_sentence(topic, k) for k in range(sentences))


def topic_document(topics: Sequence[str] = TOPICS, sentences: int = 8) -> str:
    return "\n\n".join(topic_paragraph(t, sentences) for t in topics)


class TopicEmbedder:
    """One dimension per known topic word, plus a catch-all for text with none."""

    def __init__(self):
        self.calls: List[List[str]] = []

    def embed(self, texts):
        self.calls.append(list(texts))
        vectors = []
        for text in texts:
            lowered = text.lower()
            vector = [float(lowered.count(topic)) for topic in TOPICS]
            vectors.append(vector + [0.0 if any(vector) else 1.0])
        return vectors


class ConstantEmbedder:
    """Every text gets the same vector, so no pair is ever a boundary."""

    def embed(self, texts):
        return [[1.0, 2.0, 3.0] for _ in texts]


class FailingEmbedder:
    def __init__(self, exc: Exception = None):
        self.exc = exc or ConnectionError("embedding service unavailable")
        self.calls = 0

    def embed(self, texts):
        self.calls += 1
        raise self.exc


class SlowEmbedder:
    def __init__(self, delay: float):
        self.delay = delay

    def embed(self, texts):
        time.sleep(self.delay)
        return [[1.0] for _ in texts]


@pytest.fixture
def topic_embedder() -> TopicEmbedder:
    return TopicEmbedder()


@pytest.fixture
def constant_embedder() -> ConstantEmbedder:
    return ConstantEmbedder()


@pytest.fixture
def failing_embedder() -> FailingEmbedder:
    return FailingEmbedder()


@pytest.fixture
def metadata():
    return {"file_name": "test.txt", "source_location": "/path/to/test.txt"}
