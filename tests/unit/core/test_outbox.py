"""Unit tests for outbox recording and draining."""

from dataclasses import dataclass
from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.core.outbox import drain_pending_events, handler_key, record_events
from shared.domain.events import DomainEvent, DomainEventMixin
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


@dataclass(frozen=True)
class WidgetShipped(DomainEvent):
    widget: str = ""


class _Aggregate(DomainEventMixin):
    pass


class _Recorder:
    def __init__(self, fail=False):
        self.fail = fail
        self.events = []

    def handle(self, event):
        if self.fail:
            raise RuntimeError("handler failed")
        self.events.append(event)


class _Mailer(_Recorder):
    pass


class _FlakyAudit:
    """Fails on the first call only."""

    def __init__(self):
        self.calls = 0

    def handle(self, event):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("audit store unavailable")


def _record(widget="w-1"):
    aggregate = _Aggregate()
    aggregate.add_domain_event(WidgetShipped(aggregate_id=uuid4(), widget=widget))
    return aggregate, record_events(aggregate, "widgets")


class TestRecordEvents:
    def test_persists_pending_rows_and_clears_aggregate(self):
        aggregate, rows = _record()

        assert len(rows) == 1
        assert rows[0].status == EventStatus.PENDING
        assert rows[0].event_type == "WidgetShipped"
        assert rows[0].payload["widget"] == "w-1"
        assert aggregate.domain_events == []

    def test_no_events_records_nothing(self):
        assert record_events(_Aggregate(), "widgets") == []
        assert OutboxEvent.objects.count() == 0


class TestDrainPendingEvents:
    def test_publishes_and_marks_published(self):
        _record("a")
        _record("b")
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(WidgetShipped, recorder)

        result = drain_pending_events(bus)

        assert result.published == 2
        assert result.failed == 0
        assert [e.widget for e in recorder.events] == ["a", "b"]
        assert not OutboxEvent.objects.exclude(status=EventStatus.PUBLISHED).exists()

    def test_handler_failure_marks_failed(self):
        _record()
        bus = InMemoryEventBus()
        bus.subscribe(WidgetShipped, _Recorder(fail=True))

        result = drain_pending_events(bus)

        event = OutboxEvent.objects.get()
        assert result.failed == 1
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 1
        assert "handler failed" in event.error_message

    def test_failed_events_are_retried(self):
        _record()
        failing = InMemoryEventBus()
        failing.subscribe(WidgetShipped, _Recorder(fail=True))
        drain_pending_events(failing)

        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(WidgetShipped, recorder)
        result = drain_pending_events(bus)

        assert result.published == 1
        assert len(recorder.events) == 1

    def test_exhausted_events_are_skipped(self):
        _record()
        OutboxEvent.objects.update(status=EventStatus.FAILED, retry_count=5)
        bus = InMemoryEventBus()
        recorder = _Recorder()
        bus.subscribe(WidgetShipped, recorder)

        result = drain_pending_events(bus, max_retries=5)

        assert result.published == 0
        assert recorder.events == []

    def test_retry_skips_handlers_that_already_succeeded(self):
        _record()
        bus = InMemoryEventBus()
        mailer = _Mailer()
        audit = _FlakyAudit()
        bus.subscribe(WidgetShipped, mailer)
        bus.subscribe(WidgetShipped, audit)

        first = drain_pending_events(bus)
        event = OutboxEvent.objects.get()
        assert first.failed == 1
        assert event.delivered_handlers == [handler_key(mailer)]
        assert "audit store unavailable" in event.error_message

        second = drain_pending_events(bus)

        event.refresh_from_db()
        assert second.published == 1
        assert len(mailer.events) == 1
        assert audit.calls == 2
        assert event.status == EventStatus.PUBLISHED
        assert event.delivered_handlers == [handler_key(mailer), handler_key(audit)]

    def test_handler_key_is_the_class_path(self):
        assert handler_key(_Mailer()) == f"{__name__}._Mailer"
