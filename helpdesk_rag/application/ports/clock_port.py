from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of "now" for id minting and the order-age / return-window rules."""

    @abstractmethod
    def now(self) -> datetime:
        """Return current UTC datetime (timezone-aware)."""
        ...
