"""Order reference data consumed by the module executors (read-only)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

_ORDER_ID = re.compile(r"ORD-\d+", re.IGNORECASE)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class Milestone:
    date: str
    time: str
    status: str
    location: str


@dataclass(frozen=True)
class OrderRecord:
    order_id: str
    status: OrderStatus
    price: float
    order_date: datetime
    customer_name: str
    product_name: str
    tracking_number: str
    carrier: str
    milestones: tuple[Milestone, ...] = ()
    delivery_date: datetime | None = None
    current_location: str = ""
    estimated_delivery: str = ""
    refund_eligible: bool = True


def extract_order_id(text: str | None) -> str | None:
    """Find an ``ORD-<digits>`` reference in free text, upper-cased."""
    if not text:
        return None
    match = _ORDER_ID.search(text)
    return match.group(0).upper() if match else None


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days elapsed (floor), negative if ``earlier`` lies in the future."""
    return (later - earlier).days
