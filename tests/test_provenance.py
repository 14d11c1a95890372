"""Tests for provenance: the frozen chain on products and its reconstruction."""

from provenance import build_provenance
from schemas import ProvenanceActor
from utils import parse_iso


class TestProvenanceChain:
    def test_shared_farmer_listed_once(self, store, chain, farmer, other_farmer, manufacturer):
        """Two lots reaching back to the same farmer collapse into one entry with both batches."""
        first = chain.harvested("Turmeric", weight=60)
        second = chain.harvested("Turmeric", weight=40)
        neighbour = chain.harvested("Turmeric", weight=30, farmer=other_farmer)

        lot_a = chain.received(chain.aggregated([first.id]))
        lot_b = chain.received(chain.aggregated([second.id, neighbour.id]))
        chain.tested(chain.sampled(lot_a))
        chain.tested(chain.sampled(lot_b))

        product = store.create_final_product(manufacturer, [lot_a.id, lot_b.id], "Turmeric Churna", 250).value
        prov = product.provenance_chain

        assert [(f.id, f.batches) for f in prov.farmers] == [
            ("farmer-1", [first.id, second.id]),
            ("farmer-2", [neighbour.id]),
        ]
        assert len(prov.collectors) == 1
        assert prov.collectors[0].aggregations == lot_a.aggregation_batch_ids + lot_b.aggregation_batch_ids
        assert [(f.id, f.lots) for f in prov.facilities] == [("facility-1", [lot_a.id, lot_b.id])]
        assert len(prov.labs) == 1
        assert prov.labs[0].name == "Bangalore Test Labs"
        assert len(prov.labs[0].tests) == 2
        assert prov.manufacturer == ProvenanceActor(id="manufacturer-1", name="Ayur Formulations")

    def test_timeline_is_chronological(self, store, chain, manufacturer):
        lot = chain.approved_lot()
        product = store.create_final_product(manufacturer, [lot.id], "Capsules", 10).value

        timeline = product.provenance_chain.timeline
        dates = [parse_iso(entry.date) for entry in timeline]
        assert dates == sorted(dates)
        events = [entry.event for entry in timeline]
        for name in ("planted", "harvested", "aggregated", "received", "sample-sent", "tested", "product-created"):
            assert name in events
        assert events.index("planted") < events.index("harvested")

    def test_frozen_chain_matches_reconstruction(self, store, chain, manufacturer):
        lot = chain.approved_lot()
        product = store.create_final_product(manufacturer, [lot.id], "Capsules", 10).value

        assert store.reconstruct(product.id) == product.provenance_chain

    def test_unknown_references_are_skipped(self, store):
        prov = build_provenance(store.state, ["PL-NOPE"], ProvenanceActor(id="m", name="M"))

        assert prov.farmers == prov.collectors == prov.facilities == prov.labs == []
        assert prov.timeline == []

    def test_missing_product(self, store):
        assert store.reconstruct("FB-NOPE") is None
        assert store.provenance("FB-NOPE") is None


def test_expanded_provenance_resolves_entities(store, chain, manufacturer):
    lot = chain.approved_lot()
    product = store.create_final_product(manufacturer, [lot.id], "Capsules", 10).value

    expanded = store.provenance(product.id)

    assert expanded["product"]["id"] == product.id
    assert expanded["product"]["provenanceChain"]["manufacturer"]["id"] == "manufacturer-1"
    batches = expanded["farmers"][0]["batches"]
    assert batches[0]["status"] == "sold"
    assert batches[0]["harvestData"]["weight"] == 100
    assert expanded["facilities"][0]["lots"][0]["id"] == lot.id
    assert expanded["labs"][0]["tests"][0]["status"] == "completed"
