from typing import Protocol

from ...domain.orders import OrderRecord


class OrderRepositoryPort(Protocol):
    """Read-only order reference data."""

    def get(self, order_id: str) -> OrderRecord | None:
        """Order by normalized id (``ORD-12345``), ``None`` if unknown."""
        ...
