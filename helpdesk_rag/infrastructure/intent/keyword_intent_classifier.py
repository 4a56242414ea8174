from __future__ import annotations

import logging
from dataclasses import dataclass

from ...application.ports.intent_classifier_port import IntentClassifierPort
from ...domain.intents import Intent, IntentClassification
from ...domain.models import RAGAnswer
from ...domain.orders import extract_order_id
from ...domain.workflow import ExecutionContext

logger = logging.getLogger(__name__)

# Reihenfolge = Priorität
KEYWORD_RULES: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.CANCELLATION, ("cancel",)),
    (Intent.REFUND_QUERY, ("refund", "money back", "return my", "return this", "return the")),
    (
        Intent.ORDER_QUERY,
        ("track", "where is my order", "order status", "status of my order", "delivery status"),
    ),
    (
        Intent.SERVICE_ENQUIRY,
        (
            "complaint",
            "not working",
            "broken",
            "damaged",
            "technical",
            "warranty claim",
            "enquiry",
            "inquiry",
            "speak to",
            "quotation",
        ),
    ),
    (
        Intent.FAQ,
        ("policy", "payment method", "how long", "do you", "can i", "how do i", "how can i"),
    ),
)

GREETING = (
    "Hi! I can help you track, cancel or return an order, or answer questions about our store."
)


@dataclass
class KeywordIntentClassifier(IntentClassifierPort):
    """Deterministic classifier without an LLM.

    An order id alone (``ORD-12345``) counts as a tracking request.
    """

    default_response: str = GREETING

    def classify(
        self,
        message: str,
        context: ExecutionContext,
        rag_answer: RAGAnswer | None = None,
    ) -> IntentClassification:
        text = (message or "").lower()
        order_id = extract_order_id(message)

        intent = next(
            (i for i, keywords in KEYWORD_RULES if any(k in text for k in keywords)), None
        )
        if intent is None:
            intent = Intent.ORDER_QUERY if order_id else Intent.GENERAL_QUERY

        extracted: dict[str, str] = {"query": message}
        if order_id:
            extracted["order_id"] = order_id
        if intent is Intent.SERVICE_ENQUIRY:
            extracted["description"] = message

        if rag_answer is not None and rag_answer.has_context:
            response = rag_answer.answer
        else:
            response = self.default_response
        logger.debug("Keyword classifier: %s -> %s", message, intent.value)
        return IntentClassification(
            intent=intent, response=response, extracted=extracted, method="GENAI_TO_FRONTEND"
        )
