from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from ...application.ports.intent_classifier_port import IntentClassifierPort
from ...application.ports.llm_port import ChatMessage, LLMPort
from ...domain.intents import Intent, IntentClassification
from ...domain.models import RAGAnswer
from ...domain.orders import extract_order_id
from ...domain.workflow import ExecutionContext

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a customer support assistant for an online store.
Classify the customer's latest message and reply to it.

Intents:
- general_query: greetings, small talk, anything not covered below
- order_query: tracking an order or asking for its status
- cancellation: cancelling an order
- refund_query: refunds or returning a delivered order
- service_enquiry: complaints, technical problems, warranty claims, business enquiries
- faq_query: general store questions (shipping, payment, return policy, contact)

Respond with a JSON object only:
{"intent": "<intent>", "response": "<reply to the customer>",
 "extracted": {"orderId": "<ORD-... or empty>", "reason": "",
               "enquiryType": "", "description": ""}}"""


def _parse(raw: str) -> dict[str, Any]:
    text = raw.strip()
    # manche Modelle liefern ```json ... ``` trotz JSON-Mode
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end == -1:
        raise ValueError("no JSON object in model output")
    data = json.loads(text[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError("model output is not a JSON object")
    return data


@dataclass
class LLMIntentClassifier(IntentClassifierPort):
    """Intent classification and reply generation in one JSON-mode call.

    Conversation history is replayed as chat turns; a RAG answer with context
    is appended to the system prompt as the knowledge base answer.
    Backend errors propagate (``GenerationBackendError``); unparseable output
    degrades to ``general_query`` with the raw text as reply.
    """

    llm: LLMPort
    temperature: float = 0.2
    max_tokens: int = 512

    def _messages(
        self, message: str, context: ExecutionContext, rag_answer: RAGAnswer | None
    ) -> list[ChatMessage]:
        system = SYSTEM_PROMPT
        if rag_answer is not None and rag_answer.has_context:
            system += (
                "\n\nKnowledge base answer (confidence "
                f"{rag_answer.confidence:.2f}); use it when it answers the question:\n"
                f"{rag_answer.answer}"
            )
        msgs = [ChatMessage(role="system", content=system)]
        msgs.extend(
            ChatMessage(role=role, content=content)
            for role, content in context.conversation_history
        )
        msgs.append(ChatMessage(role="user", content=message))
        return msgs

    def classify(
        self,
        message: str,
        context: ExecutionContext,
        rag_answer: RAGAnswer | None = None,
    ) -> IntentClassification:
        resp = self.llm.chat(
            self._messages(message, context, rag_answer),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=True,
        )
        try:
            data = _parse(resp.text)
        except ValueError as ex:
            logger.warning("Unparseable classifier output (%s), treating as general query", ex)
            return IntentClassification(intent=Intent.GENERAL_QUERY, response=resp.text.strip())

        extracted = {k: v for k, v in dict(data.get("extracted") or {}).items() if v}
        order_id = extract_order_id(str(extracted.get("orderId", ""))) or extract_order_id(message)
        if order_id:
            extracted["order_id"] = order_id
        extracted.pop("orderId", None)

        return IntentClassification(
            intent=Intent.parse(data.get("intent")),
            response=str(data.get("response") or ""),
            extracted=extracted,
        )
