import re
import threading

from conftest import DIM, FakeVectorStore

from helpdesk_rag.application.dto.ingest_dto import IngestRequest
from helpdesk_rag.application.use_cases.ingest_documents import IngestDocuments, mint_document_id
from helpdesk_rag.domain.errors import (
    EmbeddingError,
    RetrievalError,
    UpsertTimeoutError,
    ValidationError,
)
from helpdesk_rag.domain.services.chunking import ChunkingParams


class SlowStore(FakeVectorStore):
    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def upsert(self, documents):
        self.release.wait(timeout=5)
        super().upsert(documents)


class BrokenStore(FakeVectorStore):
    def upsert(self, documents):
        raise RuntimeError("connection reset")


def _uc(embedding, store, clock, telemetry=None, **kw):
    extra = {"telemetry": telemetry} if telemetry is not None else {}
    return IngestDocuments(embedding, store, dimension=DIM, clock=clock, **extra, **kw)


def test_single_chunk_is_stored_with_metadata(embedding, store, clock, telemetry):
    res = _uc(embedding, store, clock, telemetry).execute(
        IngestRequest(content="Returns are accepted within 30 days.", metadata={"category": "faq"})
    )
    assert res.ok
    assert res.value.chunks_created == 1
    (doc,) = store.docs.values()
    assert doc.metadata == {
        "category": "faq",
        "content": "Returns are accepted within 30 days.",
        "chunk_index": 0,
    }
    assert len(doc.vector) == DIM
    assert telemetry.values == [("ingest.chunks", 1.0)]


def test_long_text_is_chunked_and_ids_are_unique(embedding, store, clock):
    req = IngestRequest(
        content="a" * 2000, chunking=ChunkingParams(chunk_size=800, chunk_overlap=200)
    )
    res = _uc(embedding, store, clock).execute(req)
    assert res.value.chunks_created == 4
    ids = res.value.document_ids
    assert len(set(ids)) == 4
    assert [store.docs[i].metadata["chunk_index"] for i in ids] == [0, 1, 2, 3]


def test_document_id_format(now):
    doc_id = mint_document_id(3, now)
    assert re.fullmatch(rf"{int(now.timestamp() * 1000)}-3-[a-z0-9]{{9}}", doc_id)


def test_empty_content_is_rejected(embedding, store, clock):
    res = _uc(embedding, store, clock).execute(IngestRequest(content="   "))
    assert not res.ok
    assert isinstance(res.error, ValidationError)
    assert embedding.calls == []


def test_dimension_mismatch_is_embedding_error(embedding, store, clock):
    uc = IngestDocuments(embedding, store, dimension=DIM * 2, clock=clock)
    res = uc.execute(IngestRequest(content="hello world"))
    assert isinstance(res.error, EmbeddingError)
    assert store.docs == {}


def test_upsert_timeout(embedding, clock):
    slow = SlowStore()
    try:
        res = _uc(embedding, slow, clock, upsert_timeout_s=0.05).execute(
            IngestRequest(content="hello world")
        )
    finally:
        slow.release.set()
    assert not res.ok
    assert isinstance(res.error, UpsertTimeoutError)
    assert res.error.document_count == 1


def test_unexpected_store_error_is_wrapped(embedding, clock):
    res = _uc(embedding, BrokenStore(), clock).execute(IngestRequest(content="hello world"))
    assert isinstance(res.error, RetrievalError)
    assert "connection reset" in str(res.error)
