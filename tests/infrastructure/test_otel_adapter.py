import sys

from conftest import RecordingTelemetry

from helpdesk_rag.application.ports.telemetry_port import NullTelemetry, TelemetryPort
from helpdesk_rag.infrastructure.telemetry.otel_adapter import OpenTelemetryAdapter, OtelConfig


class FakeInstrument:
    def __init__(self):
        self.points = []

    def add(self, value, attributes=None):
        self.points.append((value, attributes))

    def record(self, value, attributes=None):
        self.points.append((value, attributes))


class FakeMeter:
    def __init__(self):
        self.created = []

    def create_counter(self, name, description=""):
        self.created.append(name)
        return FakeInstrument()

    def create_histogram(self, name, description=""):
        self.created.append(name)
        return FakeInstrument()


def test_missing_sdk_disables_metrics(monkeypatch, caplog):
    monkeypatch.setitem(sys.modules, "opentelemetry.sdk.metrics", None)
    adapter = OpenTelemetryAdapter(OtelConfig())
    assert not adapter.enabled
    adapter.incr("x")
    adapter.observe("y", 1.0)
    assert "metrics disabled" in caplog.text


def test_instruments_are_cached_by_name(monkeypatch):
    monkeypatch.setitem(sys.modules, "opentelemetry.sdk.metrics", None)
    adapter = OpenTelemetryAdapter(OtelConfig())
    meter = FakeMeter()
    adapter._meter = meter
    adapter.incr("orchestrator.rag_lookup", {"strategy": "edge"})
    adapter.incr("orchestrator.rag_lookup")
    adapter.observe("rag.answer.confidence", 0.8)
    assert meter.created == ["orchestrator.rag_lookup", "rag.answer.confidence"]
    counter = adapter._counters["orchestrator.rag_lookup"]
    assert counter.points == [(1, {"strategy": "edge"}), (1, {})]


def test_null_and_recording_telemetry_satisfy_port():
    sink: TelemetryPort = NullTelemetry()
    assert sink.incr("x") is None
    rec = RecordingTelemetry()
    rec.incr("x", {"a": 1})
    assert rec.counters == [("x", {"a": 1})]
