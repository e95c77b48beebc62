"""Domain events primitives for the modular monolith.

Every concrete event class registers itself by name so that events
persisted in the outbox can be rebuilt before being published.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Type
from uuid import UUID, uuid4

_EVENT_TYPES: Dict[str, Type["DomainEvent"]] = {}


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable)."""

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _EVENT_TYPES[cls.__name__] = cls

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)


def event_class_for(name: str) -> Type[DomainEvent]:
    """Return the registered event class called *name*.

    Raises ``LookupError`` for unknown names.
    """
    try:
        return _EVENT_TYPES[name]
    except KeyError:
        raise LookupError(f"Unknown domain event '{name}'.") from None


def rebuild_event(name: str, payload: Dict[str, Any]) -> DomainEvent:
    """Rebuild an event from its JSON-normalised payload."""
    event_cls = event_class_for(name)
    kwargs: Dict[str, Any] = {}
    for f in fields(event_cls):
        if not f.init or f.name not in payload:
            continue
        value = payload[f.name]
        if f.name in ("aggregate_id", "event_id") and value is not None:
            value = UUID(str(value))
        elif f.name == "occurred_on" and isinstance(value, str):
            value = datetime.fromisoformat(value)
        kwargs[f.name] = value
    return event_cls(**kwargs)


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
