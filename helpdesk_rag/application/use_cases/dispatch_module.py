"""Intent → deterministic module executor."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from ...domain.intents import Intent, IntentClassification
from ...domain.modules.cancellation import CancellationPolicy, evaluate_cancellation
from ...domain.modules.faq import match_faq
from ...domain.modules.refund import RefundPolicy, evaluate_refund
from ...domain.modules.service_enquiry import route_enquiry
from ...domain.modules.tracking import track_order
from ...domain.orders import extract_order_id
from ..ports.clock_port import ClockPort
from ..ports.order_repository_port import OrderRepositoryPort

logger = logging.getLogger(__name__)

MODULE_METHOD = "MODULE_TO_FRONTEND"


@dataclass(frozen=True)
class ModuleOutcome:
    module: str
    message: str
    data: dict[str, Any]
    method: str = MODULE_METHOD


def _field(extracted: Mapping[str, Any], *names: str) -> str | None:
    for name in names:
        value = extracted.get(name)
        if value:
            return str(value)
    return None


@dataclass
class ModuleDispatcher:
    orders: OrderRepositoryPort
    clock: ClockPort
    cancellation_policy: CancellationPolicy = field(default_factory=CancellationPolicy)
    refund_policy: RefundPolicy = field(default_factory=RefundPolicy)

    def __post_init__(self) -> None:
        self._handlers: dict[Intent, Callable[[Mapping[str, Any], str], ModuleOutcome]] = {
            Intent.ORDER_QUERY: self._tracking,
            Intent.CANCELLATION: self._cancellation,
            Intent.REFUND_QUERY: self._refund,
            Intent.SERVICE_ENQUIRY: self._service_enquiry,
            Intent.FAQ: self._faq,
        }

    def supports(self, intent: Intent) -> bool:
        return intent in self._handlers

    def dispatch(self, classification: IntentClassification, message: str) -> ModuleOutcome | None:
        """Run the executor for the classified intent; ``None`` when there is none."""
        handler = self._handlers.get(classification.intent)
        if handler is None:
            return None
        logger.info("Dispatching %s", classification.intent.value)
        return handler(classification.extracted or {}, message)

    # ---------- handlers ----------

    def _order_id(self, extracted: Mapping[str, Any], message: str) -> str | None:
        raw = _field(extracted, "order_id", "orderId")
        return extract_order_id(raw) or extract_order_id(message)

    def _lookup(self, order_id: str | None):
        return self.orders.get(order_id) if order_id else None

    def _tracking(self, extracted: Mapping[str, Any], message: str) -> ModuleOutcome:
        order_id = self._order_id(extracted, message)
        result = track_order(order_id, self._lookup(order_id))
        return ModuleOutcome("tracking", result.message, {"tracking_info": asdict(result)})

    def _cancellation(self, extracted: Mapping[str, Any], message: str) -> ModuleOutcome:
        order_id = self._order_id(extracted, message)
        result = evaluate_cancellation(
            order_id,
            _field(extracted, "reason"),
            self._lookup(order_id),
            self.clock.now(),
            self.cancellation_policy,
        )
        return ModuleOutcome(
            "cancellation", result.message, {"cancellation_result": asdict(result)}
        )

    def _refund(self, extracted: Mapping[str, Any], message: str) -> ModuleOutcome:
        order_id = self._order_id(extracted, message)
        result = evaluate_refund(
            order_id,
            _field(extracted, "reason"),
            self._lookup(order_id),
            self.clock.now(),
            self.refund_policy,
        )
        return ModuleOutcome("refund", result.message, {"refund_result": asdict(result)})

    def _service_enquiry(self, extracted: Mapping[str, Any], message: str) -> ModuleOutcome:
        result = route_enquiry(
            _field(extracted, "enquiry_type", "enquiryType") or "general",
            _field(extracted, "description") or message,
            self.clock.now(),
        )
        return ModuleOutcome(
            "service-enquiry", result.message, {"enquiry_result": asdict(result)}
        )

    def _faq(self, extracted: Mapping[str, Any], message: str) -> ModuleOutcome:
        result = match_faq(_field(extracted, "query") or message)
        return ModuleOutcome("faq", result.answer, {"faq_answer": asdict(result)})
