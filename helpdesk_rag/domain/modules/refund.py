"""Refund eligibility rules (pure)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..orders import OrderRecord, OrderStatus, days_between
from ..services.references import format_amount, mint_reference

NOT_DELIVERED = "Order has not been delivered yet."
NOT_ELIGIBLE = "Order does not meet refund criteria."


@dataclass(frozen=True)
class RefundPolicy:
    return_window_days: int = 30
    refund_method: str = "Original Payment Method"
    processing_time: str = "5-7 business days"
    return_address: str = (
        "Karnataka Enterprises, Warehouse 4B, Industrial Area, Bangalore - 560001"
    )

    @property
    def window_expired_reason(self) -> str:
        return f"Return window of {self.return_window_days} days has expired."


@dataclass(frozen=True)
class RefundResult:
    order_id: str | None
    eligible: bool
    reason: str
    message: str
    refund_amount: float | None = None
    refund_method: str | None = None
    processing_time: str | None = None
    refund_id: str | None = None
    return_required: bool = False
    return_address: str | None = None


def _ineligible(order_id: str | None, reason: str, message: str | None = None) -> RefundResult:
    return RefundResult(
        order_id=order_id,
        eligible=False,
        reason=reason,
        message=message or f"Sorry, order {order_id} is not eligible for refund. {reason}",
    )


def evaluate_refund(
    order_id: str | None,
    reason: str | None,
    order: OrderRecord | None,
    now: datetime,
    policy: RefundPolicy | None = None,
) -> RefundResult:
    p = policy or RefundPolicy()
    if not order_id:
        return _ineligible(
            None,
            "Order ID missing",
            "Please share the order ID (for example ORD-12345) you want a refund for.",
        )
    if order is None:
        return _ineligible(
            order_id, "Order not found", f"Sorry, I couldn't find an order with ID {order_id}."
        )

    delivered = order.status is OrderStatus.DELIVERED and order.delivery_date is not None
    if not delivered or days_between(order.delivery_date, now) < 0:
        return _ineligible(order_id, NOT_DELIVERED)

    if days_between(order.delivery_date, now) > p.return_window_days:
        return _ineligible(order_id, p.window_expired_reason)

    if not order.refund_eligible:
        return _ineligible(order_id, NOT_ELIGIBLE)

    refund_id = mint_reference("REF", now)
    return RefundResult(
        order_id=order_id,
        eligible=True,
        reason=reason or "Customer request",
        refund_amount=order.price,
        refund_method=p.refund_method,
        processing_time=p.processing_time,
        refund_id=refund_id,
        return_required=True,
        return_address=p.return_address,
        message=(
            f"Refund request {refund_id} has been initiated for order {order_id}. Amount of "
            f"{format_amount(order.price)} will be refunded within {p.processing_time}."
        ),
    )
