import pytest
from conftest import FakeLLM, ScriptedStore

from helpdesk_rag.application.use_cases.answer_with_context import (
    SYSTEM_PROMPTS,
    AnswerWithContext,
    format_raw,
)
from helpdesk_rag.application.use_cases.search_documents import SearchDocuments
from helpdesk_rag.domain.errors import GenerationBackendError, RAGConfigError
from helpdesk_rag.domain.models import SimilarityResult
from helpdesk_rag.domain.rag_config import DEFAULT_FALLBACK_MESSAGE, RAGConfig

HITS = [
    SimilarityResult("1", "Returns are accepted within 30 days.", {"category": "faq"}, 0.912),
    SimilarityResult("2", "Refunds take 5-7 business days.", {"category": "faq"}, 0.708),
]


def _answerer(embedding, hits, llm=None, telemetry=None):
    store = ScriptedStore(hits)
    kw = {"telemetry": telemetry} if telemetry is not None else {}
    return AnswerWithContext(SearchDocuments(embedding, store), llm=llm, **kw), store


def test_concise_answer_uses_llm(embedding, telemetry):
    llm = FakeLLM("  Within 30 days.  ")
    answerer, _ = _answerer(embedding, HITS, llm, telemetry)
    answer = answerer.execute(RAGConfig(response_mode="concise"), "How long can I return?")
    assert answer.answer == "Within 30 days."
    assert answer.has_context
    assert answer.confidence == pytest.approx(0.81)
    assert [s.similarity for s in answer.sources] == [0.91, 0.71]
    assert all(s.content is None for s in answer.sources)
    system, user = llm.calls[0]
    assert system.content == SYSTEM_PROMPTS["concise"]
    assert "User Question: How long can I return?" in user.content
    assert "Returns are accepted within 30 days." in user.content
    assert telemetry.values == [("rag.answer.confidence", pytest.approx(0.81))]


def test_raw_mode_skips_llm(embedding):
    llm = FakeLLM()
    answerer, _ = _answerer(embedding, HITS, llm)
    answer = answerer.execute(RAGConfig(response_mode="raw"), "returns")
    assert answer.answer == format_raw(HITS)
    assert answer.answer.split("\n\n---\n\n")[1].startswith("[Source 2]")
    assert answer.sources[0].content == HITS[0].content
    assert llm.calls == []


def test_no_hits_returns_configured_fallback(embedding):
    answerer, _ = _answerer(embedding, [])
    answer = answerer.execute(RAGConfig(response_mode="concise", fallback_message="Ask us"), "q")
    assert answer.answer == "Ask us"
    assert not answer.has_context
    assert answer.confidence == 0.0
    assert answer.sources == []


def test_hits_below_threshold_use_default_fallback(embedding):
    answerer, _ = _answerer(embedding, HITS)
    answer = answerer.execute(RAGConfig(response_mode="detailed", match_threshold=0.95), "q")
    assert answer.answer == DEFAULT_FALLBACK_MESSAGE


def test_node_id_scopes_search(embedding):
    answerer, store = _answerer(embedding, [])
    answerer.execute(RAGConfig(response_mode="concise", match_count=2), "q", node_id="n9")
    assert store.queries == [{"top_k": 2, "metadata_filter": {"category": "rag-module-n9"}}]


def test_invalid_config_fails_before_search(embedding):
    answerer, store = _answerer(embedding, HITS)
    with pytest.raises(RAGConfigError) as info:
        answerer.execute(RAGConfig(response_mode=None, match_count=20), "q")
    assert info.value.errors == (
        "Response mode is required",
        "Match count must be a number between 1 and 10",
    )
    assert store.queries == []


def test_missing_llm_is_generation_error(embedding):
    answerer, _ = _answerer(embedding, HITS, llm=None)
    with pytest.raises(GenerationBackendError):
        answerer.execute(RAGConfig(response_mode="concise"), "q")


def test_llm_failure_is_wrapped(embedding):
    class Exploding(FakeLLM):
        def complete(self, prompt, system=None, temperature=0.2, max_tokens=512):
            raise TimeoutError("read timeout")

    answerer, _ = _answerer(embedding, HITS, Exploding())
    with pytest.raises(GenerationBackendError, match="read timeout"):
        answerer.execute(RAGConfig(response_mode="detailed"), "q")
