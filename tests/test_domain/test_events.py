"""
Unit tests for domain events and publishers

Author: TM3
Date: 2025-10-17
"""
from unittest.mock import patch

import pytest

from zylos.api.deps import get_event_publisher
from zylos.domain import events
from zylos.domain.enums import MovementType
from zylos.domain.inventory import InventoryMovement, ProductInventory


class TestEventFactories:

    def test_sale_created(self, sample_sale):
        event = events.sale_created(sample_sale)
        assert event.event_type == "SaleCreated"
        assert event.aggregate_type == "Sale"
        assert event.aggregate_id == "sale-1"
        assert event.data["total_amount"] == 29.0
        assert len(event.data["items"]) == 2

    def test_stock_removed(self, tenant_id):
        movement = InventoryMovement(product_id="p-1", type=MovementType.OUT, quantity=2, reason="sale")
        event = events.stock_removed(tenant_id, movement, new_stock_level=8, product_name="Café")
        assert event.event_type == "StockRemoved"
        assert event.data["new_stock_level"] == 8
        assert event.data["reason"] == "sale"

    def test_inventory_alert_level(self, tenant_id):
        out = events.inventory_alert(tenant_id, ProductInventory(product_id="p-1", current_stock=0))
        low = events.inventory_alert(tenant_id, ProductInventory(product_id="p-1", current_stock=3))
        assert out.data["threshold_level"] == "out"
        assert low.data["threshold_level"] == "low"

    def test_events_get_unique_ids(self, sample_sale):
        assert events.sale_created(sample_sale).id != events.sale_created(sample_sale).id


class TestInMemoryEventPublisher:

    def test_records_and_dispatches_by_type(self, publisher, sample_sale):
        received = []
        publisher.subscribe("SaleCompleted", received.append)

        publisher.publish(events.sale_created(sample_sale))
        publisher.publish(events.sale_completed(sample_sale))

        assert [e.event_type for e in publisher.events] == ["SaleCreated", "SaleCompleted"]
        assert len(received) == 1
        assert len(publisher.events_of_type("SaleCreated")) == 1

    def test_failing_subscriber_is_isolated(self, publisher, sample_sale):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        publisher.subscribe("SaleCreated", broken)
        publisher.subscribe("SaleCreated", received.append)

        publisher.publish(events.sale_created(sample_sale))

        assert len(received) == 1
        assert len(publisher.events) == 1

    def test_clear(self, publisher, sample_sale):
        publisher.publish(events.sale_created(sample_sale))
        publisher.clear()
        assert publisher.events == []

    def test_null_publisher_discards(self, sample_sale):
        events.NullEventPublisher().publish_all([events.sale_created(sample_sale)])


class TestEventLogSize:

    def test_log_keeps_only_newest_events(self, sample_sale):
        publisher = events.InMemoryEventPublisher(max_events=3)
        received = []
        publisher.subscribe("SaleCreated", received.append)

        published = [events.sale_created(sample_sale) for _ in range(5)]
        publisher.publish_all(published)

        assert [event.id for event in publisher.events] == [event.id for event in published[-3:]]
        assert len(received) == 5

    def test_log_size_must_be_positive(self):
        with pytest.raises(ValueError):
            events.InMemoryEventPublisher(max_events=0)

    def test_configured_publisher_is_bounded(self, sample_sale):
        get_event_publisher.cache_clear()
        try:
            with patch('zylos.api.deps.settings.EVENT_PUBLISHER', 'memory'), \
                    patch('zylos.api.deps.settings.EVENT_LOG_SIZE', 2):
                publisher = get_event_publisher()
                for _ in range(4):
                    publisher.publish(events.sale_created(sample_sale))

            assert len(publisher.events) == 2
        finally:
            get_event_publisher.cache_clear()

    def test_unknown_publisher_name(self):
        get_event_publisher.cache_clear()
        try:
            with patch('zylos.api.deps.settings.EVENT_PUBLISHER', 'kafka'):
                with pytest.raises(ValueError):
                    get_event_publisher()
        finally:
            get_event_publisher.cache_clear()
