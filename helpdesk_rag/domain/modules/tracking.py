"""Order tracking lookup (pure)."""

from __future__ import annotations

from dataclasses import dataclass

from ..orders import Milestone, OrderRecord


@dataclass(frozen=True)
class TrackingResult:
    order_id: str | None
    found: bool
    message: str
    status: str | None = None
    current_location: str | None = None
    estimated_delivery: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    customer_name: str | None = None
    product_name: str | None = None
    milestones: tuple[Milestone, ...] = ()


def track_order(order_id: str | None, order: OrderRecord | None) -> TrackingResult:
    """Build the tracking view for ``order``; a missing order is a normal result."""
    if not order_id:
        return TrackingResult(
            order_id=None,
            found=False,
            message="Please share your order ID (for example ORD-12345) so I can track it.",
        )
    if order is None:
        return TrackingResult(
            order_id=order_id,
            found=False,
            message=f"Sorry, I couldn't find an order with ID {order_id}.",
        )

    result = TrackingResult(
        order_id=order.order_id,
        found=True,
        message="",
        status=order.status.label,
        current_location=order.current_location,
        estimated_delivery=order.estimated_delivery,
        tracking_number=order.tracking_number,
        carrier=order.carrier,
        customer_name=order.customer_name,
        product_name=order.product_name,
        milestones=order.milestones,
    )
    return TrackingResult(**{**result.__dict__, "message": format_tracking(result)})


def format_tracking(info: TrackingResult, recent: int = 3) -> str:
    updates = "\n".join(
        f"• {m.date} {m.time} - {m.status} ({m.location})" for m in info.milestones[-recent:]
    )
    return (
        f"**Order Tracking - {info.order_id}**\n\n"
        f"**Customer:** {info.customer_name}\n"
        f"**Product:** {info.product_name}\n\n"
        f"**Current Status:** {info.status}\n"
        f"**Location:** {info.current_location}\n"
        f"**Estimated Delivery:** {info.estimated_delivery}\n\n"
        f"**Tracking Details:**\n"
        f"• Tracking Number: {info.tracking_number}\n"
        f"• Carrier: {info.carrier}\n\n"
        f"**Recent Updates:**\n{updates}"
    )
