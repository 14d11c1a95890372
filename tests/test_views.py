"""Tests for role-scoped visibility and candidate lists."""

from auth import AuthContext


def test_farmer_sees_own_batches(store, chain, farmer, other_farmer):
    mine = chain.planted(farmer=farmer)
    chain.planted(farmer=other_farmer)

    view = store.view(farmer)

    assert [b.id for b in view.farmer_batches] == [mine.id]


def test_no_session_sees_everything(store, chain, farmer, other_farmer):
    chain.planted(farmer=farmer)
    chain.planted(farmer=other_farmer)

    assert len(store.view(None).farmer_batches) == 2


def test_collector_sees_all_batches_but_own_aggregations(store, chain, farmer, other_farmer):
    a = chain.harvested(farmer=farmer)
    b = chain.harvested(farmer=other_farmer)
    chain.aggregated([a.id])
    store.create_aggregation(AuthContext(role="collector", actor_id="collector-2"), [b.id], 50)

    view = store.view(chain.collector)

    assert len(view.farmer_batches) == 2
    assert [agg.collector_id for agg in view.aggregation_batches] == ["collector-1"]


def test_facility_lab_and_manufacturer_scopes(store, chain, manufacturer):
    lot = chain.approved_lot()
    store.create_final_product(manufacturer, [lot.id], "Capsules", 10)

    assert [x.id for x in store.view(chain.facility).processing_lots] == [lot.id]
    assert store.view(AuthContext(role="facility", actor_id="facility-2")).processing_lots == []
    assert len(store.view(chain.lab).lab_samples) == 1
    assert store.view(AuthContext(role="laboratory", actor_id="lab-9")).lab_samples == []
    assert len(store.view(manufacturer).final_products) == 1
    assert store.view(AuthContext(role="manufacturer", actor_id="m-2")).final_products == []


def test_view_does_not_touch_state(store, chain, other_farmer):
    chain.planted()
    store.view(other_farmer)
    assert len(store.state.farmer_batches) == 1


def test_candidate_lists(store, chain, collector, facility):
    from schemas import TransportData

    growing = chain.planted()
    ready = chain.harvested()
    assert [b.id for b in store.harvested_batches(collector)] == [ready.id]
    assert growing.id not in [b.id for b in store.harvested_batches(collector)]

    agg = chain.aggregated([ready.id])
    assert store.receivable_aggregations(facility) == []
    store.update_transport(collector, agg.id, TransportData(start_time="2025-06-02T08:00:00.000Z"))
    assert [a.id for a in store.receivable_aggregations(facility)] == [agg.id]

    lot = chain.received(store.get("aggregationBatches", agg.id))
    assert store.receivable_aggregations(facility) == [store.get("aggregationBatches", agg.id)]
    assert [x.id for x in store.lots_in_stock(facility)] == [lot.id]

    sample = chain.sampled(lot)
    assert [s.id for s in store.pending_samples(chain.lab)] == [sample.id]
    chain.tested(sample)
    assert store.pending_samples(chain.lab) == []
    assert [x.id for x in store.approved_lots(chain.manufacturer)] == [lot.id]
