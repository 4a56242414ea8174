import sys
import types
from types import SimpleNamespace

import pytest

from helpdesk_rag.domain.errors import StoreQueryError, VectorStoreError
from helpdesk_rag.domain.models import StoredDocument
from helpdesk_rag.infrastructure.vectorstore import chroma_vector_store
from helpdesk_rag.infrastructure.vectorstore.chroma_vector_store import (
    ChromaVectorStoreAdapter,
    to_where,
)
from helpdesk_rag.infrastructure.vectorstore.qdrant_vector_store import (
    QdrantVectorStoreAdapter,
    point_id,
)

DOCS = [
    StoredDocument("1-0-abc", (0.1, 0.2), "first", {"category": "faq", "tags": ["a"]}),
    StoredDocument("1-1-def", (0.3, 0.4), "second", {"category": "faq", "note": None}),
]


# ---------- Chroma ----------


class FakeChromaCollection:
    def __init__(self):
        self.upserts = []
        self.deletes = []
        self.query_kwargs = None
        self.result = {"ids": [[]], "documents": [[]], "metadatas": [[]], "distances": [[]]}

    def upsert(self, **kwargs):
        self.upserts.append(kwargs)

    def query(self, **kwargs):
        self.query_kwargs = kwargs
        return self.result

    def delete(self, **kwargs):
        self.deletes.append(kwargs)


class FakeChromaClient:
    def __init__(self, path):
        self.path = path
        self.collections = {}
        self.deleted = []

    def get_or_create_collection(self, name, metadata=None):
        return self.collections.setdefault(name, FakeChromaCollection())

    def delete_collection(self, name):
        self.deleted.append(name)
        self.collections.pop(name, None)


@pytest.fixture
def chroma(monkeypatch, tmp_path):
    monkeypatch.setattr(
        chroma_vector_store, "chromadb", SimpleNamespace(PersistentClient=FakeChromaClient)
    )
    return ChromaVectorStoreAdapter(persist_dir=str(tmp_path / "chroma"), collection="docs")


def test_to_where():
    assert to_where(None) is None
    assert to_where({"category": "faq"}) == {"category": "faq"}
    assert to_where({"category": "faq", "node_id": "n1"}) == {
        "$and": [{"category": "faq"}, {"node_id": "n1"}]
    }


def test_chroma_upsert_flattens_metadata(chroma):
    chroma.upsert(DOCS)
    call = chroma._coll.upserts[0]
    assert call["ids"] == ["1-0-abc", "1-1-def"]
    assert call["documents"] == ["first", "second"]
    assert call["metadatas"] == [{"category": "faq", "tags": "['a']"}, {"category": "faq"}]


def test_chroma_query_converts_distance(chroma):
    chroma._coll.result = {
        "ids": [["a", "b"]],
        "documents": [["near", "far"]],
        "metadatas": [[{"category": "faq"}, None]],
        "distances": [[0.4, 0.1]],
    }
    hits = chroma.query([0.1, 0.2], top_k=2, metadata_filter={"category": "faq"})
    assert [h.id for h in hits] == ["b", "a"]
    assert hits[0].similarity == pytest.approx(0.9)
    assert hits[1].metadata == {"category": "faq"}
    assert chroma._coll.query_kwargs["where"] == {"category": "faq"}
    assert chroma._coll.query_kwargs["n_results"] == 2


def test_chroma_query_error(chroma):
    def boom(**kwargs):
        raise RuntimeError("corrupt index")

    chroma._coll.query = boom
    with pytest.raises(StoreQueryError):
        chroma.query([0.1], top_k=1)


def test_chroma_delete_all_recreates_collection(chroma):
    old = chroma._coll
    chroma.delete_all()
    assert chroma._client.deleted == ["docs"]
    assert chroma._coll is not old


def test_chroma_delete_by_metadata(chroma):
    chroma.delete_by_metadata({"category": "faq"})
    assert chroma._coll.deletes == [{"where": {"category": "faq"}}]
    with pytest.raises(VectorStoreError):
        chroma.delete_by_metadata({})


def test_chroma_missing_dependency(monkeypatch, tmp_path):
    monkeypatch.setattr(chroma_vector_store, "chromadb", None)
    with pytest.raises(VectorStoreError, match="chromadb not installed"):
        ChromaVectorStoreAdapter(persist_dir=str(tmp_path))


# ---------- Qdrant ----------


class _Model:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


class FakeQdrantClient:
    def __init__(self, url, api_key=None, timeout=None):
        self.url = url
        self.timeout = timeout
        self.exists = False
        self.calls = []
        self.points = []

    def collection_exists(self, name):
        return self.exists

    def create_collection(self, collection_name, vectors_config):
        self.calls.append(("create", collection_name, vectors_config.size))
        self.exists = True

    def delete_collection(self, collection_name):
        self.calls.append(("drop", collection_name))
        self.exists = False

    def upsert(self, collection_name, points, wait):
        self.calls.append(("upsert", collection_name, len(points)))
        self.points = points

    def query_points(self, collection_name, query, limit, query_filter, with_payload):
        self.calls.append(("query", limit, query_filter))
        return SimpleNamespace(
            points=[
                SimpleNamespace(id="u1", score=0.55, payload={"doc_id": "d1", "content": "one"}),
                SimpleNamespace(id="u2", score=1.0000002, payload={"content": "two"}),
            ]
        )

    def delete(self, collection_name, points_selector, wait):
        self.calls.append(("delete", points_selector))


@pytest.fixture
def qdrant(monkeypatch):
    client_mod = types.ModuleType("qdrant_client")
    client_mod.QdrantClient = FakeQdrantClient
    models = types.ModuleType("qdrant_client.models")
    for name in ("VectorParams", "PointStruct", "Filter", "FieldCondition", "MatchValue"):
        setattr(models, name, _Model)
    models.FilterSelector = _Model
    models.Distance = SimpleNamespace(COSINE="Cosine")
    monkeypatch.setitem(sys.modules, "qdrant_client", client_mod)
    monkeypatch.setitem(sys.modules, "qdrant_client.models", models)
    return QdrantVectorStoreAdapter(url="http://qdrant:6333", dimension=2, timeout_s=7.5)


def test_point_id_is_stable_uuid():
    assert point_id("1-0-abc") == point_id("1-0-abc")
    assert point_id("1-0-abc") != point_id("1-1-def")
    assert len(point_id("x")) == 36


def test_qdrant_creates_collection_once_and_upserts(qdrant):
    qdrant.upsert(DOCS)
    qdrant.upsert(DOCS[:1])
    cli = qdrant._cli
    assert cli.timeout == 7
    assert [c[0] for c in cli.calls] == ["create", "upsert", "upsert"]
    payload = cli.points[0].payload
    assert payload["doc_id"] == "1-0-abc"
    assert payload["content"] == "first"
    assert payload["category"] == "faq"
    assert cli.points[0].id == point_id("1-0-abc")


def test_qdrant_query_maps_payload_and_clamps(qdrant):
    hits = qdrant.query([0.1, 0.2], top_k=2, metadata_filter={"category": "faq"})
    assert [h.id for h in hits] == ["u2", "d1"]
    assert hits[0].similarity == 1.0
    assert hits[1].content == "one"
    _, limit, flt = qdrant._cli.calls[-1]
    assert limit == 2
    cond = flt.must[0]
    assert cond.key == "category"
    assert cond.match.value == "faq"


def test_qdrant_query_without_filter(qdrant):
    qdrant.query([0.1, 0.2], top_k=1)
    assert qdrant._cli.calls[-1][2] is None


def test_qdrant_query_failure(qdrant):
    def boom(**kwargs):
        raise ConnectionError("refused")

    qdrant._cli.query_points = boom
    with pytest.raises(StoreQueryError, match="refused"):
        qdrant.query([0.1, 0.2], top_k=1)


def test_qdrant_delete_all_recreates(qdrant):
    qdrant.upsert(DOCS)
    qdrant.delete_all()
    assert [c[0] for c in qdrant._cli.calls][-2:] == ["drop", "create"]


def test_qdrant_delete_by_metadata_uses_filter_selector(qdrant):
    qdrant.delete_by_metadata({"node_id": "n1"})
    kind, selector = qdrant._cli.calls[-1]
    assert kind == "delete"
    assert selector.filter.must[0].key == "node_id"
