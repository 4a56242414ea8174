"""Order reference data held in memory.

Demo orders are seeded relative to "now" so the age and return-window rules
behave the same on every day; a JSON file can replace the seed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from ...application.ports.order_repository_port import OrderRepositoryPort
from ...domain.errors import ValidationError
from ...domain.orders import Milestone, OrderRecord, OrderStatus

logger = logging.getLogger(__name__)


def _stamp(ts: datetime) -> tuple[str, str]:
    return ts.strftime("%b %d, %Y"), ts.strftime("%I:%M %p")


def _milestone(ts: datetime, status: str, location: str) -> Milestone:
    date, time = _stamp(ts)
    return Milestone(date=date, time=time, status=status, location=location)


def seed_orders(now: datetime) -> list[OrderRecord]:
    d = lambda days: now - timedelta(days=days)  # noqa: E731
    eta = lambda days: (now + timedelta(days=days)).strftime("%b %d, %Y")  # noqa: E731
    return [
        OrderRecord(
            order_id="ORD-12345",
            status=OrderStatus.IN_TRANSIT,
            price=2499,
            order_date=d(2),
            customer_name="Rahul Sharma",
            product_name="Wireless Headphones",
            tracking_number="TRK-98765-IN",
            carrier="BlueDart Express",
            current_location="Mumbai Distribution Center",
            estimated_delivery=eta(2),
            milestones=(
                _milestone(d(2), "Order Placed", "Bangalore"),
                _milestone(d(2) + timedelta(hours=5), "Picked Up", "Bangalore Warehouse"),
                _milestone(d(1), "In Transit", "Bangalore Hub"),
                _milestone(d(0), "Arrived at Hub", "Mumbai Distribution Center"),
            ),
        ),
        OrderRecord(
            order_id="ORD-67890",
            status=OrderStatus.DELIVERED,
            price=1299,
            order_date=d(14),
            delivery_date=d(10),
            customer_name="Priya Nair",
            product_name="Cotton Bedsheet Set",
            tracking_number="TRK-45678-IN",
            carrier="DTDC Courier",
            current_location="Delivered to Customer",
            estimated_delivery=_stamp(d(10))[0],
            milestones=(
                _milestone(d(14), "Order Placed", "Delhi"),
                _milestone(d(13), "Picked Up", "Delhi Warehouse"),
                _milestone(d(12), "In Transit", "Delhi Hub"),
                _milestone(d(10), "Out for Delivery", "Gurgaon"),
                _milestone(d(10) + timedelta(hours=6), "Delivered", "Customer Address"),
            ),
        ),
        OrderRecord(
            order_id="ORD-11111",
            status=OrderStatus.PROCESSING,
            price=3999,
            order_date=d(1),
            customer_name="Arjun Rao",
            product_name="Mixer Grinder",
            tracking_number="TRK-11111-IN",
            carrier="Delhivery",
            current_location="Warehouse - Preparing for Shipment",
            estimated_delivery=eta(4),
            milestones=(
                _milestone(d(1), "Order Placed", "Chennai"),
                _milestone(d(1) + timedelta(hours=4), "Payment Confirmed", "Chennai"),
                _milestone(d(0), "Processing", "Chennai Warehouse"),
            ),
        ),
        OrderRecord(
            order_id="ORD-22222",
            status=OrderStatus.PENDING,
            price=899,
            order_date=d(1),
            customer_name="Meera Iyer",
            product_name="Steel Water Bottle",
            tracking_number="TRK-22222-IN",
            carrier="India Post",
            current_location="Awaiting Payment",
            estimated_delivery=eta(6),
            milestones=(_milestone(d(1), "Order Placed", "Hyderabad"),),
        ),
        OrderRecord(
            order_id="ORD-33333",
            status=OrderStatus.CONFIRMED,
            price=5499,
            order_date=d(3),
            customer_name="Vikram Singh",
            product_name="Office Chair",
            tracking_number="TRK-33333-IN",
            carrier="Delhivery",
            current_location="Bangalore Warehouse",
            estimated_delivery=eta(3),
            milestones=(
                _milestone(d(3), "Order Placed", "Bangalore"),
                _milestone(d(2), "Order Confirmed", "Bangalore Warehouse"),
            ),
        ),
        OrderRecord(
            order_id="ORD-44444",
            status=OrderStatus.DELIVERED,
            price=2999,
            order_date=d(24),
            delivery_date=d(20),
            customer_name="Ananya Das",
            product_name="Table Lamp",
            tracking_number="TRK-44444-IN",
            carrier="BlueDart Express",
            current_location="Delivered to Customer",
            estimated_delivery=_stamp(d(20))[0],
            milestones=(
                _milestone(d(24), "Order Placed", "Kolkata"),
                _milestone(d(20), "Delivered", "Customer Address"),
            ),
        ),
        OrderRecord(
            order_id="ORD-55555",
            status=OrderStatus.DELIVERED,
            price=899,
            order_date=d(45),
            delivery_date=d(40),
            customer_name="Karthik Menon",
            product_name="Phone Case",
            tracking_number="TRK-55555-IN",
            carrier="India Post",
            current_location="Delivered to Customer",
            estimated_delivery=_stamp(d(40))[0],
            refund_eligible=False,
            milestones=(
                _milestone(d(45), "Order Placed", "Kochi"),
                _milestone(d(40), "Delivered", "Customer Address"),
            ),
        ),
    ]


def _timestamp(value: str) -> datetime:
    """ISO date or datetime; values without an offset are read as UTC."""
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


def order_from_mapping(data: Mapping[str, Any]) -> OrderRecord:
    """Parse one JSON order (ISO timestamps, status as enum value)."""
    try:
        delivery = data.get("delivery_date")
        return OrderRecord(
            order_id=str(data["order_id"]).upper(),
            status=OrderStatus(data["status"]),
            price=float(data["price"]),
            order_date=_timestamp(data["order_date"]),
            delivery_date=_timestamp(delivery) if delivery else None,
            customer_name=str(data.get("customer_name", "")),
            product_name=str(data.get("product_name", "")),
            tracking_number=str(data.get("tracking_number", "")),
            carrier=str(data.get("carrier", "")),
            current_location=str(data.get("current_location", "")),
            estimated_delivery=str(data.get("estimated_delivery", "")),
            refund_eligible=bool(data.get("refund_eligible", True)),
            milestones=tuple(Milestone(**m) for m in data.get("milestones", ())),
        )
    except (KeyError, TypeError, ValueError) as ex:
        raise ValidationError(f"Invalid order record: {ex}") from ex


@dataclass
class InMemoryOrderRepository(OrderRepositoryPort):
    orders: dict[str, OrderRecord] = field(default_factory=dict)

    @classmethod
    def of(cls, records: Iterable[OrderRecord]) -> InMemoryOrderRepository:
        return cls(orders={r.order_id: r for r in records})

    @classmethod
    def seeded(cls, now: datetime) -> InMemoryOrderRepository:
        return cls.of(seed_orders(now))

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryOrderRepository:
        p = Path(path)
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as ex:
            raise ValidationError(f"Cannot read orders file '{p}': {ex}") from ex
        records = [order_from_mapping(item) for item in raw]
        logger.info("Loaded %d orders from %s", len(records), p)
        return cls.of(records)

    def get(self, order_id: str) -> OrderRecord | None:
        return self.orders.get(order_id.upper())
