"""Transactional outbox helpers.

``record_events`` is called by repositories inside the transaction that
persists an aggregate.  ``drain_pending_events`` is run by the Celery task
``core.drain_outbox``: it rebuilds each stored event and runs the handlers
subscribed on the in-process event bus (e-mail notifications, logging),
remembering per event which handlers already succeeded.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Q

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent, rebuild_event

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Write side
# ---------------------------------------------------------------------------


def record_events(entity: Any, topic: str) -> List[OutboxEvent]:
    """Store the pending domain events of *entity* and clear them.

    Must run inside the transaction that saves *entity*.  A drain is
    scheduled for when that transaction commits.
    """
    events = entity.domain_events if hasattr(entity, "domain_events") else []
    rows = [
        OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=serialize_event_payload(event),
            topic=topic,
        )
        for event in events
    ]
    if hasattr(entity, "clear_domain_events"):
        entity.clear_domain_events()
    if rows:
        transaction.on_commit(schedule_drain)
    return rows


def schedule_drain() -> None:
    """Queue ``core.drain_outbox``.

    A broker outage must not affect the request that produced the events:
    they stay ``PENDING`` and the periodic beat job picks them up.
    """
    from modules.core.tasks import drain_outbox

    try:
        drain_outbox.delay()
    except Exception:
        logger.exception("outbox.schedule_failed")


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrainResult:
    published: int = 0
    failed: int = 0


def handler_key(handler: IEventHandler) -> str:
    """Stable name recorded in ``OutboxEvent.delivered_handlers``."""
    handler_class = type(handler)
    return f"{handler_class.__module__}.{handler_class.__qualname__}"


def drain_pending_events(
    bus: IEventBus,
    batch_size: Optional[int] = None,
    max_retries: Optional[int] = None,
) -> DrainResult:
    """Publish pending and retryable failed outbox events, oldest first.

    Each event is handled in its own transaction with its row locked, so
    the handlers that succeeded are recorded even when a later one fails.
    A retry only runs the handlers that have not processed the event yet.
    """
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
    max_retries = settings.OUTBOX_MAX_RETRIES if max_retries is None else max_retries
    retryable = Q(status=EventStatus.PENDING) | Q(
        status=EventStatus.FAILED, retry_count__lt=max_retries
    )

    event_ids = list(
        OutboxEvent.objects.filter(retryable)
        .order_by("created_at")
        .values_list("id", flat=True)[:batch_size]
    )
    published = failed = 0
    for event_id in event_ids:
        with transaction.atomic():
            outbox_event = (
                OutboxEvent.objects.select_for_update(skip_locked=True)
                .filter(retryable, id=event_id)
                .first()
            )
            if outbox_event is None:
                # Taken by another worker.
                continue
            if _publish(bus, outbox_event):
                published += 1
            else:
                failed += 1

    if event_ids:
        logger.info("outbox.drained", published=published, failed=failed)
    return DrainResult(published=published, failed=failed)


def _publish(bus: IEventBus, outbox_event: OutboxEvent) -> bool:
    log = logger.bind(
        outbox_event_id=str(outbox_event.id),
        event_type=outbox_event.event_type,
        aggregate_id=outbox_event.aggregate_id,
    )
    try:
        event = rebuild_event(outbox_event.event_type, outbox_event.payload)
    except Exception as exc:
        log.exception("outbox.publish_failed")
        outbox_event.mark_as_failed(f"{exc.__class__.__name__}: {exc}")
        return False

    delivered = set(outbox_event.delivered_handlers)
    handled = 0
    for handler in bus.handlers_for(type(event)):
        key = handler_key(handler)
        if key in delivered:
            continue
        try:
            with transaction.atomic():
                handler.handle(event)
        except Exception as exc:
            log.exception("outbox.publish_failed", handler=key)
            outbox_event.mark_as_failed(f"{key}: {exc.__class__.__name__}: {exc}")
            return False
        outbox_event.mark_handler_delivered(key)
        handled += 1

    outbox_event.mark_as_published()
    log.info("outbox.published", handler_count=handled, skipped=len(delivered))
    return True
