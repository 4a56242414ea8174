"""Order cancellation rules (pure)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..orders import OrderRecord, OrderStatus, days_between
from ..services.references import format_amount, mint_reference

_DENIAL_REASONS = {
    OrderStatus.IN_TRANSIT: "Order is already shipped and in transit",
    OrderStatus.DELIVERED: "Order has already been delivered",
    OrderStatus.OUT_FOR_DELIVERY: "Order is out for delivery",
    OrderStatus.SHIPPED: "Order has already been shipped",
    OrderStatus.CANCELLED: "Order has already been cancelled",
}


@dataclass(frozen=True)
class CancellationPolicy:
    max_order_age_days: int = 7
    cancellable: frozenset[OrderStatus] = field(
        default_factory=lambda: frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})
    )
    refund_method: str = "Original Payment Method"
    processing_time: str = "3-5 business days"


@dataclass(frozen=True)
class CancellationResult:
    order_id: str | None
    can_cancel: bool
    reason: str
    message: str
    refund_amount: float | None = None
    refund_method: str | None = None
    processing_time: str | None = None
    cancellation_id: str | None = None


def _deny(order_id: str | None, reason: str, message: str | None = None) -> CancellationResult:
    return CancellationResult(
        order_id=order_id,
        can_cancel=False,
        reason=reason,
        message=message or f"Sorry, order {order_id} cannot be cancelled. {reason}.",
    )


def evaluate_cancellation(
    order_id: str | None,
    reason: str | None,
    order: OrderRecord | None,
    now: datetime,
    policy: CancellationPolicy | None = None,
) -> CancellationResult:
    """Decide whether ``order`` may still be cancelled at ``now``.

    Checks run in order: known status denials, order age, cancellable status.
    """
    p = policy or CancellationPolicy()
    if not order_id:
        return _deny(
            None,
            "Order ID missing",
            "Please share the order ID (for example ORD-12345) you want to cancel.",
        )
    if order is None:
        return _deny(
            order_id, "Order not found", f"Sorry, I couldn't find an order with ID {order_id}."
        )

    denial = _DENIAL_REASONS.get(order.status)
    if denial is not None:
        return _deny(
            order_id,
            denial,
            f"Sorry, order {order_id} cannot be cancelled as it is already "
            f"{order.status.label.lower()}.",
        )

    age = days_between(order.order_date, now)
    if age > p.max_order_age_days:
        return _deny(order_id, f"Order was placed more than {p.max_order_age_days} days ago")

    if order.status not in p.cancellable:
        return _deny(order_id, "Order cannot be cancelled at this stage")

    return CancellationResult(
        order_id=order_id,
        can_cancel=True,
        reason=reason or "Customer request",
        refund_amount=order.price,
        refund_method=p.refund_method,
        processing_time=p.processing_time,
        cancellation_id=mint_reference("CAN", now),
        message=(
            f"Order {order_id} has been successfully cancelled. Refund of "
            f"{format_amount(order.price)} will be processed within {p.processing_time}."
        ),
    )
