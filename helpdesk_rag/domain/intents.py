from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Intent(str, Enum):
    GENERAL_QUERY = "general_query"
    ORDER_QUERY = "order_query"
    CANCELLATION = "cancellation"
    REFUND_QUERY = "refund_query"
    SERVICE_ENQUIRY = "service_enquiry"
    FAQ = "faq_query"

    @classmethod
    def parse(cls, value: Any) -> Intent:
        """Lenient parse; unknown tags degrade to ``GENERAL_QUERY``."""
        if isinstance(value, Intent):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.GENERAL_QUERY


@dataclass(frozen=True)
class IntentClassification:
    """Outcome of the assistant step: intent tag, extracted fields, default reply."""

    intent: Intent
    response: str
    extracted: Mapping[str, Any] = field(default_factory=dict)
    method: str = "GENAI_TO_FRONTEND"
