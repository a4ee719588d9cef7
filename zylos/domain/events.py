"""
Domain Events

Immutable records of state transitions (sale created, stock removed, ...)
and the publishers that deliver them.

Services receive an EventPublisher explicitly; which one is used is decided
by the EVENT_PUBLISHER setting (see zylos.api.deps).

Author: TM3
Date: 2025-10-17
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from zylos.domain.clock import utcnow
from zylos.domain.enums import StockLevel

logger = logging.getLogger(__name__)


class DomainEvent(BaseModel):
    """
    Base event

    Fields:
        id: UUID4 string
        event_type: Event name (SaleCreated, StockAdded, ...)
        aggregate_id: ID of the aggregate the event is about
        aggregate_type: Sale / Product
        tenant_id: Owning tenant (optional)
        occurred_on: UTC time of construction
        data: Event payload
        version: Payload schema version
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str
    aggregate_id: str
    aggregate_type: str
    tenant_id: Optional[str] = None
    occurred_on: datetime = Field(default_factory=utcnow)
    data: Dict[str, Any] = Field(default_factory=dict)
    version: int = 1

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


# ============================================================================
# Sale events
# ============================================================================

def _sale_event(event_type: str, sale, data: Dict[str, Any]) -> DomainEvent:
    return DomainEvent(
        event_type=event_type,
        aggregate_id=sale.id,
        aggregate_type="Sale",
        tenant_id=sale.tenant_id,
        data={"sale_id": sale.id, **data},
    )


def sale_created(sale) -> DomainEvent:
    return _sale_event("SaleCreated", sale, {
        "customer_id": sale.customer_id,
        "total_amount": float(sale.total.amount),
        "items": [item.to_dict() for item in sale.items],
        "status": sale.status.value,
        "payment_status": sale.payment_status.value,
    })


def sale_completed(sale) -> DomainEvent:
    return _sale_event("SaleCompleted", sale, {
        "customer_id": sale.customer_id,
        "total_amount": float(sale.total.amount),
    })


def sale_cancelled(sale, reason: Optional[str] = None) -> DomainEvent:
    return _sale_event("SaleCancelled", sale, {
        "customer_id": sale.customer_id,
        "reason": reason,
    })


def payment_received(sale, amount, method: Optional[str] = None) -> DomainEvent:
    return _sale_event("PaymentReceived", sale, {
        "customer_id": sale.customer_id,
        "amount": float(amount.amount),
        "payment_method": method,
        "payment_status": sale.payment_status.value,
    })


# ============================================================================
# Inventory events
# ============================================================================

def _stock_event(event_type: str, tenant_id: Optional[str], movement, new_stock_level: int,
                 product_name: Optional[str]) -> DomainEvent:
    return DomainEvent(
        event_type=event_type,
        aggregate_id=movement.product_id,
        aggregate_type="Product",
        tenant_id=tenant_id,
        data={
            "product_id": movement.product_id,
            "product_name": product_name,
            "quantity": movement.quantity,
            "new_stock_level": new_stock_level,
            "reason": movement.reason,
            "reference_id": movement.reference_id,
        },
    )


def stock_added(tenant_id, movement, new_stock_level: int, product_name: Optional[str] = None) -> DomainEvent:
    return _stock_event("StockAdded", tenant_id, movement, new_stock_level, product_name)


def stock_removed(tenant_id, movement, new_stock_level: int, product_name: Optional[str] = None) -> DomainEvent:
    return _stock_event("StockRemoved", tenant_id, movement, new_stock_level, product_name)


def inventory_alert(tenant_id, inventory, reorder_point: int = 0) -> DomainEvent:
    level = StockLevel.OUT if not inventory.is_in_stock() else StockLevel.LOW
    return DomainEvent(
        event_type="InventoryAlert",
        aggregate_id=inventory.product_id,
        aggregate_type="Product",
        tenant_id=tenant_id,
        data={
            "product_id": inventory.product_id,
            "product_name": inventory.product_name,
            "current_stock": inventory.current_stock,
            "threshold_level": level.value,
            "threshold": inventory.low_stock_threshold,
            "reorder_point": reorder_point,
        },
    )


# ============================================================================
# Publishers
# ============================================================================

Subscriber = Callable[[DomainEvent], None]


class EventPublisher(ABC):
    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        pass

    def publish_all(self, events: List[DomainEvent]) -> None:
        for event in events:
            self.publish(event)


class NullEventPublisher(EventPublisher):
    """Discards every event (EVENT_PUBLISHER=none)"""

    def publish(self, event: DomainEvent) -> None:
        logger.debug(f"Discarding event {event.event_type} ({event.id})")


class InMemoryEventPublisher(EventPublisher):
    """
    In-process event log with per-type subscribers

    With max_events the log keeps only the newest events; older ones are
    dropped as new ones arrive. Subscribers still see every event.

    A failing subscriber is logged and skipped: it never stops the other
    subscribers or the publishing service.
    """

    def __init__(self, max_events: Optional[int] = None):
        if max_events is not None and max_events < 1:
            raise ValueError(f"max_events must be positive: {max_events}")
        self._events: Deque[DomainEvent] = deque(maxlen=max_events)
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Subscriber) -> None:
        with self._lock:
            self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)
            handlers = list(self._subscribers.get(event.event_type, []))

        logger.info(f"Event {event.event_type} for {event.aggregate_type} {event.aggregate_id}")

        for handler in handlers:
            handler_name = getattr(handler, "__qualname__", str(handler))
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Subscriber {handler_name} failed for {event.event_type} ({event.id}): {e}",
                    exc_info=True,
                )

    @property
    def events(self) -> List[DomainEvent]:
        with self._lock:
            return list(self._events)

    def events_of_type(self, event_type: str) -> List[DomainEvent]:
        return [event for event in self.events if event.event_type == event_type]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
