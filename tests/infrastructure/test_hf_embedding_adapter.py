import sys
import types

import pytest

from helpdesk_rag.domain.errors import EmbeddingError
from helpdesk_rag.infrastructure.embeddings import hf_sentence_transformers as hf
from helpdesk_rag.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter


class FakeSentenceTransformer:
    instances: list["FakeSentenceTransformer"] = []

    def __init__(self, model_name, device="cpu", local_files_only=False):
        self.model_name = model_name
        self.device = device
        self.local_files_only = local_files_only
        self.encoded: list[dict] = []
        FakeSentenceTransformer.instances.append(self)

    def encode(self, text, **kwargs):
        self.encoded.append({"text": text, **kwargs})
        if text == "explode":
            raise RuntimeError("CUDA out of memory")
        return [0.5] * (4 if text == "short" else 8)


@pytest.fixture(autouse=True)
def fake_st(monkeypatch):
    FakeSentenceTransformer.instances = []
    mod = types.ModuleType("sentence_transformers")
    mod.SentenceTransformer = FakeSentenceTransformer
    monkeypatch.setitem(sys.modules, "sentence_transformers", mod)
    hf.reset_model_cache()
    yield mod
    hf.reset_model_cache()


def test_model_is_loaded_once_per_name_and_device():
    a = HFEmbeddingAdapter(model_name="m", dimension=8)
    b = HFEmbeddingAdapter(model_name="m", dimension=8)
    a.embed("hello")
    b.embed("world")
    assert len(FakeSentenceTransformer.instances) == 1
    HFEmbeddingAdapter(model_name="m", dimension=8, device="cuda").embed("x")
    assert len(FakeSentenceTransformer.instances) == 2


def test_encode_arguments():
    HFEmbeddingAdapter(model_name="m", dimension=8, local_files_only=True).embed("hello")
    model = FakeSentenceTransformer.instances[0]
    assert model.local_files_only is True
    assert model.encoded[0] == {
        "text": "hello",
        "normalize_embeddings": True,
        "convert_to_numpy": True,
        "show_progress_bar": False,
    }


def test_dimension_is_fitted(caplog):
    adapter = HFEmbeddingAdapter(model_name="m", dimension=6)
    assert adapter.embed("hello") == [0.5] * 6
    assert adapter.embed("short") == [0.5] * 4 + [0.0, 0.0]
    assert "normalizing to 6" in caplog.text


def test_embed_batch_keeps_order():
    adapter = HFEmbeddingAdapter(model_name="m", dimension=8)
    assert len(adapter.embed_batch(["a", "b", "c"])) == 3
    assert [e["text"] for e in FakeSentenceTransformer.instances[0].encoded] == ["a", "b", "c"]


def test_encode_failure_is_embedding_error():
    with pytest.raises(EmbeddingError, match="CUDA out of memory"):
        HFEmbeddingAdapter(model_name="m", dimension=8).embed("explode")


def test_load_failure_is_embedding_error(fake_st):
    def broken(*args, **kwargs):
        raise OSError("model not found")

    fake_st.SentenceTransformer = broken
    with pytest.raises(EmbeddingError, match="Failed to load embedding model"):
        HFEmbeddingAdapter(model_name="missing").embed("x")
