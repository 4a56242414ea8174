"""Per-message orchestration: RAG lookup → retrieval → intent → module."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.intents import Intent
from ...domain.models import RAGAnswer, RAGContextSummary
from ...domain.workflow import locate_rag_module
from ..dto.chat_dto import ChatRequest, ChatResult
from ..ports.intent_classifier_port import IntentClassifierPort
from ..ports.telemetry_port import NullTelemetry, TelemetryPort
from .answer_with_context import AnswerWithContext
from .dispatch_module import ModuleDispatcher

logger = logging.getLogger(__name__)


@dataclass
class OrchestrateMessage:
    """
    Stages run in strict order, no backtracking:

    1. locate a RAG module (edge first, then the configured-module fallback)
    2. optional retrieval; failures are logged and treated as "no context"
    3. intent classification + default reply
    4. module dispatch for non-general intents; its message wins
    5. result assembly, always with the RAG context summary
    """

    classifier: IntentClassifierPort
    dispatcher: ModuleDispatcher
    answerer: AnswerWithContext | None = None
    telemetry: TelemetryPort = field(default_factory=NullTelemetry)

    def execute(self, req: ChatRequest) -> ChatResult:
        # 1) Locate RAG module
        rag_node, strategy = locate_rag_module(req.assistant_node_id, req.graph)
        self.telemetry.incr("orchestrator.rag_lookup", {"strategy": strategy.value})

        # 2) Optional retrieval
        rag_answer: RAGAnswer | None = None
        if rag_node is not None and rag_node.rag_config is None:
            logger.error("RAG module %s has no config, skipping retrieval", rag_node.id)
        elif rag_node is not None and self.answerer is not None:
            try:
                rag_answer = self.answerer.execute(rag_node.rag_config, req.message, rag_node.id)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "RAG retrieval failed for node %s, continuing without context", rag_node.id
                )
                self.telemetry.incr("orchestrator.rag_failures", {"node": rag_node.id})
                rag_answer = None

        rag_context = (
            RAGContextSummary.from_answer(rag_answer) if rag_answer else RAGContextSummary()
        )

        # 3) Intent classification + generation
        classification = self.classifier.classify(req.message, req.context, rag_answer)
        logger.info("Classified intent: %s", classification.intent.value)

        response = classification.response
        method = classification.method
        data: dict = dict(classification.extracted or {})

        # 4) Module dispatch
        if classification.intent is not Intent.GENERAL_QUERY:
            try:
                outcome = self.dispatcher.dispatch(classification, req.message)
            except Exception:  # noqa: BLE001
                logger.exception("Module executor failed for %s", classification.intent.value)
                outcome = None
            if outcome is not None:
                response, method, data = outcome.message, outcome.method, outcome.data

        # 5) Assemble
        return ChatResult(
            response=response,
            intent=classification.intent.value,
            method=method,
            data=data,
            rag_context=rag_context,
        )
