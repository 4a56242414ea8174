"""Shared test doubles: deterministic embedder, in-memory store, scripted LLM, fixed clock."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pytest

from helpdesk_rag.application.ports.clock_port import ClockPort
from helpdesk_rag.application.ports.llm_port import ChatMessage, LLMResponse
from helpdesk_rag.domain.models import SimilarityResult, StoredDocument
from helpdesk_rag.domain.similarity import clamp_similarity

DIM = 16


def cosine(u: Sequence[float], v: Sequence[float]) -> float:
    dot = sum(a * b for a, b in zip(u, v, strict=False))
    nu = math.sqrt(sum(a * a for a in u)) or 1.0
    nv = math.sqrt(sum(b * b for b in v)) or 1.0
    return dot / (nu * nv)


class FakeEmbedding:
    """Bag-of-words vectors: same words → same direction."""

    def __init__(self, dimension: int = DIM) -> None:
        self.dimension = dimension
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vec = [0.0] * self.dimension
        for word in text.lower().split():
            word = word.strip(".,!?")
            if word:
                vec[sum(ord(c) for c in word) % self.dimension] += 1.0
        norm = math.sqrt(sum(x * x for x in vec)) or 1.0
        return [x / norm for x in vec]

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return [self.embed(t) for t in texts]


class FakeVectorStore:
    def __init__(self) -> None:
        self.docs: dict[str, StoredDocument] = {}
        self.queries: list[dict[str, Any]] = []

    def upsert(self, documents: Sequence[StoredDocument]) -> None:
        for d in documents:
            self.docs[d.id] = d

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        self.queries.append({"top_k": top_k, "metadata_filter": metadata_filter})
        hits = [
            SimilarityResult(
                id=d.id,
                content=d.content,
                metadata=dict(d.metadata),
                similarity=clamp_similarity(cosine(vector, d.vector)),
            )
            for d in self.docs.values()
            if all(d.metadata.get(k) == v for k, v in (metadata_filter or {}).items())
        ]
        hits.sort(key=lambda h: h.similarity, reverse=True)
        return hits[:top_k]

    def delete_all(self) -> None:
        self.docs.clear()

    def delete_by_metadata(self, metadata_filter: dict[str, Any]) -> None:
        self.docs = {
            k: d
            for k, d in self.docs.items()
            if not all(d.metadata.get(f) == v for f, v in metadata_filter.items())
        }


class ScriptedStore(FakeVectorStore):
    """Returns fixed hits regardless of the query vector."""

    def __init__(self, hits: list[SimilarityResult]) -> None:
        super().__init__()
        self.hits = hits

    def query(self, vector, top_k, metadata_filter=None):
        self.queries.append({"top_k": top_k, "metadata_filter": metadata_filter})
        return list(self.hits[:top_k])


class FakeLLM:
    def __init__(self, reply: str = "generated answer") -> None:
        self.reply = reply
        self.calls: list[list[ChatMessage]] = []

    def chat(self, messages, temperature=0.2, max_tokens=512, json_mode=False):
        self.calls.append(list(messages))
        return LLMResponse(text=self.reply)

    def complete(self, prompt, system=None, temperature=0.2, max_tokens=512):
        msgs = [ChatMessage("system", system)] if system else []
        msgs.append(ChatMessage("user", prompt))
        return self.chat(msgs).text


class FixedClock(ClockPort):
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


class RecordingTelemetry:
    def __init__(self) -> None:
        self.counters: list[tuple[str, dict]] = []
        self.values: list[tuple[str, float]] = []

    def incr(self, name, tags=None):
        self.counters.append((name, dict(tags or {})))

    def observe(self, name, value, tags=None):
        self.values.append((name, value))


NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def embedding() -> FakeEmbedding:
    return FakeEmbedding()


@pytest.fixture
def store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()
