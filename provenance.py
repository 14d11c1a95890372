"""Provenance reconstruction: the backward walk from processing lots to farmers.

product -> processing lots -> aggregation batches -> farmer batches
                           -> lab sample

Each actor appears once per chain, with every id that reached the product
through them, in first-discovery order.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from schemas import (
    DataState,
    ProvenanceActor,
    ProvenanceCollector,
    ProvenanceData,
    ProvenanceFacility,
    ProvenanceFarmer,
    ProvenanceLab,
    TimelineEntry,
)
from utils import parse_iso

DEFAULT_LAB_NAME = "Lab"

_UNDATED = datetime.max.replace(tzinfo=timezone.utc)


class _Group:
    """Ordered actor -> ids accumulator."""

    def __init__(self):
        self.names: Dict[str, str] = {}
        self.ids: Dict[str, List[str]] = {}

    def add(self, actor_id: str, name: str, item_id: str) -> None:
        if actor_id not in self.ids:
            self.names[actor_id] = name
            self.ids[actor_id] = []
        if item_id not in self.ids[actor_id]:
            self.ids[actor_id].append(item_id)

    def entries(self):
        return [(actor_id, self.names[actor_id], ids) for actor_id, ids in self.ids.items()]


def _index(items) -> Dict[str, Any]:
    return {item.id: item for item in items}


def _when(entry: TimelineEntry) -> datetime:
    try:
        return parse_iso(entry.date)
    except ValueError:
        return _UNDATED


def build_provenance(
    state: DataState,
    lot_ids: Iterable[str],
    manufacturer: ProvenanceActor,
    created_at: Optional[str] = None,
) -> ProvenanceData:
    batches = _index(state.farmer_batches)
    aggregations = _index(state.aggregation_batches)
    lots = _index(state.processing_lots)
    samples = _index(state.lab_samples)

    farmers, collectors, facilities, labs = _Group(), _Group(), _Group(), _Group()
    timeline: List[TimelineEntry] = []
    seen = set()

    def event(key: str, name: str, date: Optional[str], actor: str, **details) -> None:
        if not date or key in seen:
            return
        seen.add(key)
        timeline.append(TimelineEntry(event=name, date=date, actor=actor, details=details))

    for lot_id in dict.fromkeys(lot_ids):
        lot = lots.get(lot_id)
        if lot is None:
            continue

        for agg_id in lot.aggregation_batch_ids:
            agg = aggregations.get(agg_id)
            if agg is None:
                continue
            for batch_id in agg.farmer_batches:
                batch = batches.get(batch_id)
                if batch is None:
                    continue
                farmers.add(batch.farmer_id, batch.farmer_name, batch.id)
                event(f"plant:{batch.id}", "planted", batch.planting_date, batch.farmer_name,
                      batchId=batch.id, species=batch.species, seedQuantity=batch.seed_quantity)
                for care in batch.care_events:
                    event(f"care:{care.id}", f"care:{care.type}", care.date, batch.farmer_name,
                          batchId=batch.id, notes=care.notes)
                if batch.harvest_data is not None:
                    h = batch.harvest_data
                    event(f"harvest:{batch.id}", "harvested", h.harvest_date, batch.farmer_name,
                          batchId=batch.id, weight=h.weight, quality=h.quality)

            collectors.add(agg.collector_id, agg.collector_name, agg.id)
            event(f"agg:{agg.id}", "aggregated", agg.created_at, agg.collector_name,
                  aggregationId=agg.id, totalWeight=agg.total_weight, farmerBatches=list(agg.farmer_batches))
            if agg.transport_data is not None:
                t = agg.transport_data
                event(f"depart:{agg.id}", "transport-started", t.start_time, agg.collector_name,
                      aggregationId=agg.id)
                event(f"arrive:{agg.id}", "delivered", t.end_time, agg.collector_name,
                      aggregationId=agg.id, routePoints=len(t.route))

        facilities.add(lot.facility_id, lot.facility_name, lot.id)
        event(f"lot:{lot.id}", "received", lot.created_at, lot.facility_name,
              lotId=lot.id, receivedWeight=lot.received_weight)
        for step in lot.processing_steps:
            event(f"step:{step.id}", f"processing:{step.step}", step.timestamp, lot.facility_name,
                  lotId=lot.id, duration=step.duration)

        sample = samples.get(lot.lab_sample_id) if lot.lab_sample_id else None
        if sample is not None:
            lab_name = sample.lab_name or DEFAULT_LAB_NAME
            labs.add(sample.lab_id, lab_name, sample.id)
            event(f"sample:{sample.id}", "sample-sent", sample.created_at, lot.facility_name,
                  sampleId=sample.id, labId=sample.lab_id, sampleWeight=sample.sample_weight)
            if sample.test_results is not None:
                r = sample.test_results
                event(f"test:{sample.id}", "tested", r.test_date, r.tested_by or lab_name,
                      sampleId=sample.id, overallResult=r.overall_result)

    event("product", "product-created", created_at, manufacturer.name, manufacturerId=manufacturer.id)
    timeline.sort(key=_when)

    return ProvenanceData(
        farmers=[ProvenanceFarmer(id=i, name=n, batches=ids) for i, n, ids in farmers.entries()],
        collectors=[ProvenanceCollector(id=i, name=n, aggregations=ids) for i, n, ids in collectors.entries()],
        facilities=[ProvenanceFacility(id=i, name=n, lots=ids) for i, n, ids in facilities.entries()],
        labs=[ProvenanceLab(id=i, name=n, tests=ids) for i, n, ids in labs.entries()],
        manufacturer=manufacturer,
        timeline=timeline,
    )


def reconstruct(state: DataState, product_id: str) -> Optional[ProvenanceData]:
    """Recompute a product's chain from the current collections."""
    product = next((p for p in state.final_products if p.id == product_id), None)
    if product is None:
        return None
    return build_provenance(
        state,
        product.processing_lot_ids,
        ProvenanceActor(id=product.manufacturer_id, name=product.manufacturer_name),
        created_at=product.created_at,
    )


def expand_provenance(state: DataState, product_id: str) -> Optional[Dict[str, Any]]:
    """Frozen chain of a product with its ids resolved to current entities."""
    product = next((p for p in state.final_products if p.id == product_id), None)
    if product is None:
        return None
    chain = product.provenance_chain

    def resolve(items, ids):
        wanted = set(ids)
        return [item.to_json() for item in items if item.id in wanted]

    return {
        "product": product.to_json(),
        "farmers": [{**f.to_json(), "batches": resolve(state.farmer_batches, f.batches)} for f in chain.farmers],
        "collectors": [{**c.to_json(), "aggregations": resolve(state.aggregation_batches, c.aggregations)}
                       for c in chain.collectors],
        "facilities": [{**f.to_json(), "lots": resolve(state.processing_lots, f.lots)} for f in chain.facilities],
        "labs": [{**lab.to_json(), "tests": resolve(state.lab_samples, lab.tests)} for lab in chain.labs],
    }
