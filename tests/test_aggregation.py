"""Tests for collection: aggregation, payments, transport and the cart."""

import pytest

from auth import AuthContext
from errors import Status
from schemas import RoutePoint, SensorPoint, TransportData


class TestCreateAggregation:
    def test_totals_and_payments(self, store, chain):
        """Weight and value add up; each batch is sold with a pending payment."""
        a = chain.harvested("Turmeric", weight=120)
        b = chain.harvested("Turmeric", weight=80)

        agg = chain.aggregated([a.id, b.id], price_per_kg=150)

        assert agg.id.startswith("AGG-")
        assert agg.farmer_batches == [a.id, b.id]
        assert agg.total_weight == 200
        assert agg.total_value == 200 * 150
        assert agg.status == "collecting"
        assert agg.collector_id == "collector-1"
        for batch_id, weight in ((a.id, 120), (b.id, 80)):
            sold = store.get("farmerBatches", batch_id)
            assert sold.status == "sold"
            assert sold.payment_status == "pending"
            assert sold.payment_amount == weight * 150

    def test_skips_unharvested_unknown_and_repeated(self, store, chain):
        harvested = chain.harvested(weight=50)
        growing = chain.planted()

        agg = chain.aggregated([harvested.id, growing.id, "FAR-NOPE", harvested.id], price_per_kg=10)

        assert agg.farmer_batches == [harvested.id]
        assert agg.total_weight == 50
        assert store.get("farmerBatches", growing.id).status == "planting"
        assert store.get("farmerBatches", growing.id).payment_amount is None

    def test_sold_batch_cannot_be_sold_twice(self, store, chain):
        batch = chain.harvested(weight=40)
        chain.aggregated([batch.id])

        second = chain.aggregated([batch.id])

        assert second.farmer_batches == []
        assert second.total_weight == 0
        assert len(store.state.aggregation_batches) == 2

    @pytest.mark.parametrize("auth", [None, AuthContext(role="farmer"), AuthContext(role="facility")])
    def test_requires_collector(self, store, chain, auth):
        batch = chain.harvested()

        result = store.create_aggregation(auth, [batch.id], 100)

        assert result.status is Status.FORBIDDEN
        assert store.state.aggregation_batches == []
        assert store.get("farmerBatches", batch.id).status == "harvested"

    def test_seeded_scenario(self, seeded_store, collector):
        """Demo Turmeric and Cardamom go in, the ongoing Black Pepper stays out."""
        result = seeded_store.create_aggregation(
            collector, ["FAR-20250910-001", "FAR-20250910-002", "FAR-20250910-003"], 200,
        )

        agg = result.value
        assert agg.farmer_batches == ["FAR-20250910-001", "FAR-20250910-002"]
        assert agg.total_weight == 205
        assert agg.total_value == 41000
        assert seeded_store.get("farmerBatches", "FAR-20250910-001").payment_amount == 24000
        assert seeded_store.get("farmerBatches", "FAR-20250910-002").payment_amount == 17000
        assert seeded_store.get("farmerBatches", "FAR-20250910-003").status == "ongoing"


class TestTransport:
    def test_start_then_deliver(self, store, chain, collector):
        agg = chain.aggregated([chain.harvested().id])

        started = store.update_transport(collector, agg.id, TransportData(start_time="2025-06-02T08:00:00.000Z"))
        assert started.value.status == "in-transit"

        point = RoutePoint(latitude=12.3, longitude=76.7, timestamp="2025-06-02T09:00:00.000Z")
        reading = SensorPoint(temperature=24.5, humidity=60, timestamp="2025-06-02T09:00:00.000Z")
        moving = store.update_transport(collector, agg.id, TransportData(route=[point], sensor_data=[reading]))
        assert moving.value.status == "in-transit"
        assert moving.value.transport_data.start_time == "2025-06-02T08:00:00.000Z"

        delivered = store.update_transport(
            collector, agg.id, TransportData(end_time="2025-06-02T11:00:00.000Z", delivery_notes="dry"),
        )
        data = delivered.value.transport_data
        assert delivered.value.status == "delivered"
        assert data.start_time == "2025-06-02T08:00:00.000Z"
        assert data.route == [point]
        assert data.sensor_data == [reading]
        assert data.delivery_notes == "dry"

    def test_later_updates_stay_delivered(self, store, chain, collector):
        agg = chain.aggregated([chain.harvested().id])
        store.update_transport(collector, agg.id, TransportData(end_time="2025-06-02T11:00:00.000Z"))

        result = store.update_transport(collector, agg.id, TransportData(delivery_photo="photo.jpg"))

        assert result.value.status == "delivered"

    def test_lists_are_replaced_not_appended(self, store, chain, collector):
        agg = chain.aggregated([chain.harvested().id])
        first = RoutePoint(latitude=1, longitude=1, timestamp="2025-06-02T09:00:00.000Z")
        second = RoutePoint(latitude=2, longitude=2, timestamp="2025-06-02T10:00:00.000Z")
        store.update_transport(collector, agg.id, TransportData(route=[first]))

        result = store.update_transport(collector, agg.id, TransportData(route=[second]))

        assert result.value.transport_data.route == [second]

    def test_unknown_aggregation(self, store, collector):
        assert store.update_transport(collector, "AGG-NOPE", TransportData()).status is Status.NOT_FOUND


class TestCart:
    def test_add_remove_clear(self, store, collector):
        assert store.add_to_aggregation_cart(collector, "FAR-1").value == ["FAR-1"]
        assert store.add_to_aggregation_cart(collector, "FAR-2").value == ["FAR-1", "FAR-2"]
        assert store.add_to_aggregation_cart(collector, "FAR-1").value == ["FAR-1", "FAR-2"]
        assert store.remove_from_aggregation_cart(collector, "FAR-1").value == ["FAR-2"]
        assert store.clear_aggregation_cart(collector).value == []
        assert store.state.aggregation_cart == []
