"""Celery tasks for the core module."""

from celery import shared_task

from modules.core.outbox import drain_pending_events
from shared.infrastructure.bus import event_bus


@shared_task(name="core.drain_outbox")
def drain_outbox():
    """Publish pending outbox events on the in-process event bus."""
    result = drain_pending_events(event_bus)
    return {"published": result.published, "failed": result.failed}
