"""Telemetry port for counters and histograms."""

from typing import Any, Protocol


class TelemetryPort(Protocol):
    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        """Increment a counter metric."""
        ...

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record a value on a histogram."""
        ...


class NullTelemetry:
    """Drops everything. Default when no exporter is configured."""

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        return None

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        return None
