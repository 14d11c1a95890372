"""Pytest configuration and fixtures for HerbChain tests.

Every test gets a store backed by its own SQLite file, plus one session per
role and a small builder for walking batches down the chain.
"""

import pytest

from auth import AuthContext
from database import make_engine
from schemas import GeoLocation, HarvestData, NewBatch, TestResults
from storage import CollectionStorage
from store import DomainStore


# ── Database / store ─────────────────────────────────────────────

@pytest.fixture
def engine(tmp_path):
    """Create a throwaway SQLite engine."""
    eng = make_engine(f"sqlite:///{tmp_path / 'herbchain.db'}")
    yield eng
    eng.dispose()


@pytest.fixture
def storage(engine) -> CollectionStorage:
    s = CollectionStorage(engine)
    s.ensure_schema()
    return s


@pytest.fixture
def store(storage) -> DomainStore:
    """Empty store: no demo data."""
    s = DomainStore(storage)
    s.load(seed_demo=False)
    return s


@pytest.fixture
def seeded_store(storage) -> DomainStore:
    s = DomainStore(storage)
    s.load(seed_demo=True)
    return s


# ── Sessions ─────────────────────────────────────────────────────

@pytest.fixture
def farmer() -> AuthContext:
    return AuthContext(role="farmer", actor_id="farmer-1", display_name="Rajesh Kumar")


@pytest.fixture
def other_farmer() -> AuthContext:
    return AuthContext(role="farmer", actor_id="farmer-2", display_name="Priya Sharma")


@pytest.fixture
def collector() -> AuthContext:
    return AuthContext(role="collector", actor_id="collector-1", display_name="Mysore Collection Centre")


@pytest.fixture
def facility() -> AuthContext:
    return AuthContext(role="facility", actor_id="facility-1", display_name="Karnataka Herbal Processing")


@pytest.fixture
def lab() -> AuthContext:
    return AuthContext(role="laboratory", actor_id="lab-1", display_name="Bangalore Test Labs")


@pytest.fixture
def manufacturer() -> AuthContext:
    return AuthContext(role="manufacturer", actor_id="manufacturer-1", display_name="Ayur Formulations")


# ── Chain builder ────────────────────────────────────────────────

def results(passed: bool = True, test_date: str = "2025-07-01T10:00:00.000Z") -> TestResults:
    return TestResults(
        moisture=9.5,
        dna_authentication=passed,
        overall_result="pass" if passed else "fail",
        tested_by="Bangalore Test Labs",
        test_date=test_date,
    )


class Chain:
    """Drives entities through the store, asserting each step succeeds."""

    def __init__(self, store, farmer, collector, facility, lab, manufacturer):
        self.store = store
        self.farmer = farmer
        self.collector = collector
        self.facility = facility
        self.lab = lab
        self.manufacturer = manufacturer

    def planted(self, species="Turmeric", farmer=None):
        result = self.store.create_batch(farmer or self.farmer, NewBatch(
            species=species,
            seed_quantity=50,
            planting_date="2025-01-15",
            location=GeoLocation(latitude=12.2958, longitude=76.6394, address="Mysore, Karnataka"),
        ))
        assert result.ok, result.detail
        return result.value

    def harvested(self, species="Turmeric", weight=100, quality="premium", farmer=None):
        batch = self.planted(species, farmer)
        result = self.store.record_harvest(farmer or self.farmer, batch.id, HarvestData(
            weight=weight, moisture=11, quality=quality, harvest_date="2025-06-01",
        ))
        assert result.ok, result.detail
        return result.value

    def aggregated(self, batch_ids, price_per_kg=100):
        result = self.store.create_aggregation(self.collector, batch_ids, price_per_kg)
        assert result.ok, result.detail
        return result.value

    def received(self, aggregation, weight=None):
        result = self.store.receive_batch_at_facility(
            self.facility, aggregation.id, weight or aggregation.total_weight,
        )
        assert result.ok, result.detail
        return result.value

    def sampled(self, lot, weight=1):
        result = self.store.send_sample_to_lab(self.facility, lot.id, "lab-1", weight, lab_name="Bangalore Test Labs")
        assert result.ok, result.detail
        return result.value

    def tested(self, sample, passed=True):
        result = self.store.submit_test_results(self.lab, sample.id, results(passed))
        assert result.ok, result.detail
        return result.value

    def approved_lot(self, species="Turmeric", weight=100, farmer=None):
        batch = self.harvested(species, weight, farmer=farmer)
        lot = self.received(self.aggregated([batch.id]))
        self.tested(self.sampled(lot))
        return self.store.get("processingLots", lot.id)


@pytest.fixture
def chain(store, farmer, collector, facility, lab, manufacturer) -> Chain:
    return Chain(store, farmer, collector, facility, lab, manufacturer)
