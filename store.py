"""Domain store: the supply-chain collections, their mutations and queries.

The store is owned by the application shell and handed to callers; every
mutation takes the caller's session explicitly. A mutation builds replacement
collections, writes them durably in one transaction and only then swaps the
in-memory state, so a failed write leaves memory untouched.
"""
import logging
import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence

from auth import DEMO_ACTOR_IDS, AuthContext
from errors import OpResult
from provenance import DEFAULT_LAB_NAME, build_provenance, expand_provenance, reconstruct
from schemas import (
    COLLECTIONS,
    AggregationBatch,
    CareEvent,
    Certificate,
    DataState,
    FarmerBatch,
    FarmerProfile,
    FinalProduct,
    Formulation,
    HarvestData,
    LabSample,
    NewBatch,
    NewCareEvent,
    NewProcessingStep,
    ProcessingLot,
    ProcessingStep,
    ProvenanceActor,
    ProvenanceData,
    TestResults,
    TransportData,
)
from seed import DEMO_BATCHES, DEMO_FARMERS
from storage import CollectionStorage
from utils import CERTIFICATE_VALIDITY, generate_id, now_iso, to_iso, utc_now
import views

logger = logging.getLogger(__name__)

STRICT_TRANSITIONS = os.getenv("HERBCHAIN_STRICT_TRANSITIONS", "0") == "1"

FIELD_KEYS = {field: key for key, field in COLLECTIONS.items()}


def _actor(auth: Optional[AuthContext], role: str) -> str:
    return (auth.actor_id if auth else None) or DEMO_ACTOR_IDS[role]


def _name(auth: Optional[AuthContext]) -> str:
    return auth.display_name if auth else ""


def _find(items: Iterable[Any], item_id: Optional[str]):
    return next((item for item in items if item.id == item_id), None)


def _replace(items: Sequence[Any], *updated: Any) -> List[Any]:
    by_id = {u.id: u for u in updated}
    return [by_id.get(item.id, item) for item in items]


def _missing(kind: str, item_id: str) -> OpResult:
    logger.warning("%s %s not found", kind, item_id)
    return OpResult.not_found(f"{kind} {item_id} not found")


def _invalid(detail: str) -> OpResult:
    logger.warning("rejected: %s", detail)
    return OpResult.invalid(detail)


def _harvest_weight(batch: FarmerBatch) -> float:
    return batch.harvest_data.weight if batch.harvest_data else 0


class DomainStore:
    def __init__(self, storage: CollectionStorage, strict_transitions: bool = STRICT_TRANSITIONS):
        self.storage = storage
        self.strict_transitions = strict_transitions
        self.state = DataState()
        self._lock = threading.RLock()

    # ---------- Persistence ----------
    def load(self, seed_demo: bool = True) -> DataState:
        with self._lock:
            self.state = DataState.model_validate(self.storage.load_all())
            if seed_demo:
                seeded: Dict[str, Any] = {}
                if not self.state.farmers:
                    seeded["farmers"] = list(DEMO_FARMERS)
                if not self.state.farmer_batches:
                    seeded["farmer_batches"] = list(DEMO_BATCHES)
                if seeded:
                    self._commit(**seeded)
                    logger.info("seeded demo data: %s", ", ".join(FIELD_KEYS[f] for f in seeded))
        logger.info(
            "loaded %d batches, %d aggregations, %d lots, %d samples, %d products",
            len(self.state.farmer_batches), len(self.state.aggregation_batches),
            len(self.state.processing_lots), len(self.state.lab_samples), len(self.state.final_products),
        )
        return self.state

    def _commit(self, **changes: List[Any]) -> None:
        new_state = self.state.model_copy(update=changes)
        self.storage.save_many({
            FIELD_KEYS[field]: [item if isinstance(item, str) else item.to_json() for item in items]
            for field, items in changes.items()
        })
        self.state = new_state

    def _gate(self, auth: Optional[AuthContext], role: str, action: str) -> Optional[OpResult]:
        if auth is None or auth.role != role:
            logger.warning("%s refused for role %s", action, auth.role if auth else None)
            return OpResult.forbidden(f"{action} requires a {role} session")
        return None

    # ---------- Farmer ----------
    def create_batch(self, auth: Optional[AuthContext], data: NewBatch) -> OpResult[FarmerBatch]:
        denied = self._gate(auth, "farmer", "createBatch")
        if denied:
            return denied
        with self._lock:
            ts = now_iso()
            batch = FarmerBatch(
                id=generate_id("FAR", (b.id for b in self.state.farmer_batches)),
                farmer_id=_actor(auth, "farmer"),
                farmer_name=_name(auth),
                species=data.species,
                seed_quantity=data.seed_quantity,
                planting_date=data.planting_date,
                location=data.location,
                photos=list(data.photos),
                status="planting",
                care_events=[],
                created_at=ts,
                updated_at=ts,
            )
            self._commit(farmer_batches=[*self.state.farmer_batches, batch])
        logger.info("batch %s planted by %s (%s)", batch.id, batch.farmer_id, batch.species)
        return OpResult.success(batch)

    def add_care_event(self, auth: Optional[AuthContext], batch_id: str, data: NewCareEvent) -> OpResult[CareEvent]:
        with self._lock:
            batch = _find(self.state.farmer_batches, batch_id)
            if batch is None:
                return _missing("batch", batch_id)
            if self.strict_transitions and batch.status in ("harvested", "sold"):
                return _invalid(f"batch {batch_id} is {batch.status}, care can no longer be logged")
            ts = now_iso()
            event = CareEvent(
                id=generate_id("CARE", (e.id for b in self.state.farmer_batches for e in b.care_events)),
                batch_id=batch_id,
                type=data.type,
                notes=data.notes,
                voice_note=data.voice_note,
                photos=list(data.photos),
                date=data.date,
                created_at=ts,
            )
            updated = batch.model_copy(update={
                "care_events": [*batch.care_events, event],
                "status": "ongoing",
                "updated_at": ts,
            })
            self._commit(farmer_batches=_replace(self.state.farmer_batches, updated))
        logger.info("care event %s (%s) on batch %s", event.id, event.type, batch_id)
        return OpResult.success(event)

    def record_harvest(self, auth: Optional[AuthContext], batch_id: str, harvest: HarvestData) -> OpResult[FarmerBatch]:
        with self._lock:
            batch = _find(self.state.farmer_batches, batch_id)
            if batch is None:
                return _missing("batch", batch_id)
            if self.strict_transitions and batch.status != "ongoing":
                return _invalid(f"batch {batch_id} is {batch.status}, only ongoing batches can be harvested")
            updated = batch.model_copy(update={
                "harvest_data": harvest,
                "status": "harvested",
                "updated_at": now_iso(),
            })
            self._commit(farmer_batches=_replace(self.state.farmer_batches, updated))
        logger.info("batch %s harvested: %s kg %s", batch_id, harvest.weight, harvest.quality)
        return OpResult.success(updated)

    # ---------- Collector ----------
    def create_aggregation(
        self,
        auth: Optional[AuthContext],
        farmer_batch_ids: Iterable[str],
        price_per_kg: float,
        destination: Optional[str] = None,
        facility_id: Optional[str] = None,
    ) -> OpResult[AggregationBatch]:
        denied = self._gate(auth, "collector", "createAggregation")
        if denied:
            return denied
        with self._lock:
            requested = list(dict.fromkeys(farmer_batch_ids))
            by_id = {b.id: b for b in self.state.farmer_batches}
            included = [by_id[i] for i in requested if i in by_id and by_id[i].status == "harvested"]
            kept = {b.id for b in included}
            dropped = [i for i in requested if i not in kept]
            if dropped:
                logger.warning("aggregation skips batches not harvested or unknown: %s", ", ".join(dropped))

            total_weight = sum(_harvest_weight(b) for b in included)
            ts = now_iso()
            aggregation = AggregationBatch(
                id=generate_id("AGG", (a.id for a in self.state.aggregation_batches)),
                collector_id=_actor(auth, "collector"),
                collector_name=_name(auth),
                farmer_batches=[b.id for b in included],
                total_weight=total_weight,
                total_value=total_weight * price_per_kg,
                price_per_kg=price_per_kg,
                status="collecting",
                destination=destination,
                facility_id=facility_id,
                created_at=ts,
                updated_at=ts,
            )
            sold = [
                b.model_copy(update={
                    "status": "sold",
                    "payment_amount": _harvest_weight(b) * price_per_kg,
                    "payment_status": "pending",
                    "updated_at": ts,
                })
                for b in included
            ]
            self._commit(
                farmer_batches=_replace(self.state.farmer_batches, *sold),
                aggregation_batches=[*self.state.aggregation_batches, aggregation],
            )
        logger.info("aggregation %s: %d batches, %s kg, value %s",
                    aggregation.id, len(included), total_weight, aggregation.total_value)
        return OpResult.success(aggregation)

    def update_transport(
        self, auth: Optional[AuthContext], aggregation_id: str, partial: TransportData
    ) -> OpResult[AggregationBatch]:
        """Shallow merge: given fields replace stored ones, lists included."""
        with self._lock:
            agg = _find(self.state.aggregation_batches, aggregation_id)
            if agg is None:
                return _missing("aggregation", aggregation_id)
            current = agg.transport_data.model_dump(exclude_none=True) if agg.transport_data else {}
            merged = TransportData.model_validate({**current, **partial.model_dump(exclude_unset=True)})
            updated = agg.model_copy(update={
                "transport_data": merged,
                "status": "delivered" if merged.end_time else "in-transit",
                "updated_at": now_iso(),
            })
            self._commit(aggregation_batches=_replace(self.state.aggregation_batches, updated))
        logger.info("aggregation %s %s (%d route points)", aggregation_id, updated.status, len(merged.route))
        return OpResult.success(updated)

    def add_to_aggregation_cart(self, auth: Optional[AuthContext], batch_id: str) -> OpResult[List[str]]:
        with self._lock:
            if batch_id not in self.state.aggregation_cart:
                self._commit(aggregation_cart=[*self.state.aggregation_cart, batch_id])
            return OpResult.success(list(self.state.aggregation_cart))

    def remove_from_aggregation_cart(self, auth: Optional[AuthContext], batch_id: str) -> OpResult[List[str]]:
        with self._lock:
            self._commit(aggregation_cart=[i for i in self.state.aggregation_cart if i != batch_id])
            return OpResult.success(list(self.state.aggregation_cart))

    def clear_aggregation_cart(self, auth: Optional[AuthContext]) -> OpResult[List[str]]:
        with self._lock:
            self._commit(aggregation_cart=[])
            return OpResult.success([])

    # ---------- Facility ----------
    def receive_batch_at_facility(
        self,
        auth: Optional[AuthContext],
        aggregation_id: str,
        received_weight: float,
        quality_notes: str = "",
        photos: Iterable[str] = (),
    ) -> OpResult[ProcessingLot]:
        denied = self._gate(auth, "facility", "receiveBatchAtFacility")
        if denied:
            return denied
        with self._lock:
            agg = _find(self.state.aggregation_batches, aggregation_id)
            if agg is None:
                return _missing("aggregation", aggregation_id)
            if received_weight <= 0 or received_weight > agg.total_weight:
                return _invalid(
                    f"received weight {received_weight} outside (0, {agg.total_weight}] for {aggregation_id}"
                )
            species = {b.species for b in self.state.farmer_batches if b.id in agg.farmer_batches}
            facility_id = _actor(auth, "facility")
            ts = now_iso()
            lot = ProcessingLot(
                id=generate_id("PL", (lot.id for lot in self.state.processing_lots)),
                facility_id=facility_id,
                facility_name=_name(auth),
                aggregation_batch_ids=[agg.id],
                species=species.pop() if len(species) == 1 else "Mixed",
                total_weight=agg.total_weight,
                received_weight=received_weight,
                available_weight=received_weight,
                status="received",
                processing_steps=[],
                quality_notes=quality_notes or None,
                photos=list(photos),
                created_at=ts,
                updated_at=ts,
            )
            changes: Dict[str, Any] = {"processing_lots": [*self.state.processing_lots, lot]}
            if not agg.facility_id:
                received = agg.model_copy(update={"facility_id": facility_id, "updated_at": ts})
                changes["aggregation_batches"] = _replace(self.state.aggregation_batches, received)
            self._commit(**changes)
        logger.info("lot %s received at %s from %s: %s kg", lot.id, facility_id, aggregation_id, received_weight)
        return OpResult.success(lot)

    def add_processing_step(
        self, auth: Optional[AuthContext], lot_id: str, data: NewProcessingStep
    ) -> OpResult[ProcessingStep]:
        with self._lock:
            lot = _find(self.state.processing_lots, lot_id)
            if lot is None:
                return _missing("lot", lot_id)
            if self.strict_transitions and lot.status not in ("received", "processing"):
                return _invalid(f"lot {lot_id} is {lot.status}, processing is closed")
            ts = now_iso()
            step = ProcessingStep(
                id=generate_id("STEP", (s.id for pl in self.state.processing_lots for s in pl.processing_steps)),
                lot_id=lot_id,
                step=data.step,
                temperature=data.temperature,
                humidity=data.humidity,
                duration=data.duration,
                photos=list(data.photos),
                notes=data.notes,
                timestamp=ts,
            )
            updated = lot.model_copy(update={
                "processing_steps": [*lot.processing_steps, step],
                "status": "processing",
                "updated_at": ts,
            })
            self._commit(processing_lots=_replace(self.state.processing_lots, updated))
        logger.info("lot %s step %s", lot_id, step.step)
        return OpResult.success(step)

    def _draw_sample(
        self,
        lot: ProcessingLot,
        sample_weight: float,
        sample_id: Optional[str],
        **fields: Any,
    ) -> OpResult[LabSample]:
        if sample_weight <= 0 or sample_weight > lot.available_weight:
            return _invalid(f"sample weight {sample_weight} outside (0, {lot.available_weight}] for lot {lot.id}")
        if sample_id and _find(self.state.lab_samples, sample_id) is not None:
            return _invalid(f"sample {sample_id} already exists")
        ts = now_iso()
        sample = LabSample(
            id=sample_id or generate_id("LAB", (s.id for s in self.state.lab_samples)),
            processing_lot_id=lot.id,
            sample_weight=sample_weight,
            created_at=ts,
            updated_at=ts,
            **fields,
        )
        updated_lot = lot.model_copy(update={
            "lab_sample_id": sample.id,
            "status": "lab-testing",
            "available_weight": lot.available_weight - sample_weight,
            "updated_at": ts,
        })
        self._commit(
            lab_samples=[*self.state.lab_samples, sample],
            processing_lots=_replace(self.state.processing_lots, updated_lot),
        )
        logger.info("sample %s (%s kg) drawn from lot %s for %s", sample.id, sample_weight, lot.id, sample.lab_id)
        return OpResult.success(sample)

    def send_sample_to_lab(
        self,
        auth: Optional[AuthContext],
        lot_id: str,
        lab_id: str,
        sample_weight: float,
        lab_name: Optional[str] = None,
        tests: Iterable[str] = (),
        notes: str = "",
        photos: Iterable[str] = (),
        sample_id: Optional[str] = None,
        sample_photo: Optional[str] = None,
    ) -> OpResult[LabSample]:
        with self._lock:
            lot = _find(self.state.processing_lots, lot_id)
            if lot is None:
                return _missing("lot", lot_id)
            return self._draw_sample(
                lot, sample_weight, sample_id,
                facility_id=_actor(auth, "facility"),
                lab_id=lab_id,
                lab_name=lab_name,
                sample_photo=sample_photo,
                tests=list(tests),
                notes=notes,
                photos=list(photos),
                status="pending",
            )

    def link_sample_to_lab(
        self,
        auth: Optional[AuthContext],
        sample_id: str,
        facility_id: str,
        processing_lot_id: str,
        sample_weight: float,
        notes: str = "",
        photos: Iterable[str] = (),
    ) -> OpResult[LabSample]:
        """A lab takes in a sample, either one already sent or one it records on arrival."""
        denied = self._gate(auth, "laboratory", "linkSampleToLab")
        if denied:
            return denied
        with self._lock:
            lab_id = _actor(auth, "laboratory")
            sample = _find(self.state.lab_samples, sample_id)
            if sample is not None:
                if sample.status == "completed":
                    return _invalid(f"sample {sample_id} already has results")
                updated = sample.model_copy(update={
                    "lab_id": lab_id,
                    "lab_name": _name(auth) or sample.lab_name,
                    "status": "testing",
                    "notes": notes or sample.notes,
                    "photos": [*sample.photos, *photos],
                    "updated_at": now_iso(),
                })
                self._commit(lab_samples=_replace(self.state.lab_samples, updated))
                logger.info("sample %s linked to lab %s", sample_id, lab_id)
                return OpResult.success(updated)

            lot = _find(self.state.processing_lots, processing_lot_id)
            if lot is None:
                return _missing("lot", processing_lot_id)
            return self._draw_sample(
                lot, sample_weight, sample_id,
                facility_id=facility_id or lot.facility_id,
                lab_id=lab_id,
                lab_name=_name(auth) or None,
                notes=notes,
                photos=list(photos),
                status="testing",
            )

    # ---------- Laboratory ----------
    def submit_test_results(
        self, auth: Optional[AuthContext], sample_id: str, results: TestResults
    ) -> OpResult[LabSample]:
        """Completes a sample, grades its lot and, on a pass, issues a certificate."""
        with self._lock:
            sample = _find(self.state.lab_samples, sample_id)
            if sample is None:
                return _missing("sample", sample_id)
            passed = results.overall_result == "pass"
            issued = utc_now()
            ts = to_iso(issued)
            changes: Dict[str, Any] = {}

            certificate = None
            if passed:
                certificate = Certificate(
                    id=generate_id("CERT", (c.id for c in self.state.certificates)),
                    sample_id=sample_id,
                    processing_lot_id=sample.processing_lot_id,
                    qr_code=generate_id("QR", (c.qr_code for c in self.state.certificates)),
                    issued_by=_name(auth) or DEFAULT_LAB_NAME,
                    issued_date=ts,
                    valid_until=to_iso(issued + CERTIFICATE_VALIDITY),
                    status="active",
                )
                changes["certificates"] = [*self.state.certificates, certificate]

            completed = sample.model_copy(update={
                "test_results": results,
                "status": "completed",
                "certificate_id": certificate.id if certificate else sample.certificate_id,
                "updated_at": ts,
            })
            changes["lab_samples"] = _replace(self.state.lab_samples, completed)

            lot = _find(self.state.processing_lots, sample.processing_lot_id)
            if lot is not None:
                graded = lot.model_copy(update={
                    "test_results": results,
                    "status": "approved" if passed else "rejected",
                    "grade": "premium" if passed else "low",
                    "updated_at": ts,
                })
                changes["processing_lots"] = _replace(self.state.processing_lots, graded)
            else:
                logger.warning("sample %s points at missing lot %s", sample_id, sample.processing_lot_id)

            self._commit(**changes)
        logger.info("sample %s %s%s", sample_id, results.overall_result,
                    f", certificate {certificate.id}" if certificate else "")
        return OpResult.success(completed)

    # ---------- Manufacturer ----------
    def _approved_lots(self, lot_ids: Iterable[str]):
        lots = []
        for lot_id in dict.fromkeys(lot_ids):
            lot = _find(self.state.processing_lots, lot_id)
            if lot is None:
                return None, _missing("lot", lot_id)
            if lot.status != "approved":
                return None, _invalid(f"lot {lot_id} is {lot.status}, only approved lots can be used")
            lots.append(lot)
        if not lots:
            return None, _invalid("a product needs at least one processing lot")
        return lots, None

    def _product(self, auth: Optional[AuthContext], product_id: str, lot_ids: List[str], ts: str, **fields: Any):
        manufacturer = ProvenanceActor(id=_actor(auth, "manufacturer"), name=_name(auth))
        return FinalProduct(
            id=product_id,
            manufacturer_id=manufacturer.id,
            manufacturer_name=manufacturer.name,
            processing_lot_ids=lot_ids,
            provenance_chain=build_provenance(self.state, lot_ids, manufacturer, created_at=ts),
            status="active",
            created_at=ts,
            updated_at=ts,
            **fields,
        )

    def create_final_product(
        self,
        auth: Optional[AuthContext],
        lot_ids: Iterable[str],
        product_name: str,
        batch_size: int,
        excipients: Optional[List[str]] = None,
    ) -> OpResult[FinalProduct]:
        denied = self._gate(auth, "manufacturer", "createFinalProduct")
        if denied:
            return denied
        with self._lock:
            lots, error = self._approved_lots(lot_ids)
            if error:
                return error
            products = self.state.final_products
            product = self._product(
                auth,
                generate_id("FB", (p.id for p in products)),
                [lot.id for lot in lots],
                now_iso(),
                product_name=product_name,
                batch_size=batch_size,
                excipients=excipients,
                qr_code=generate_id("QR-FINAL", (p.qr_code for p in products)),
            )
            self._commit(final_products=[*products, product])
        logger.info("product %s (%s) from lots %s", product.id, product_name, ", ".join(product.processing_lot_ids))
        return OpResult.success(product)

    def create_final_product_from_formulation(
        self, auth: Optional[AuthContext], formulation: Formulation
    ) -> OpResult[FinalProduct]:
        """Like create_final_product, but consumes each ingredient's weight from its lot."""
        denied = self._gate(auth, "manufacturer", "createFinalProductFromFormulation")
        if denied:
            return denied
        with self._lock:
            weights: Dict[str, float] = {}
            for ing in formulation.ingredients:
                weights[ing.processing_lot_id] = weights.get(ing.processing_lot_id, 0) + ing.weight_kg
            lots, error = self._approved_lots(weights)
            if error:
                return error
            for lot in lots:
                if weights[lot.id] > lot.available_weight:
                    return _invalid(f"lot {lot.id} has {lot.available_weight} kg, {weights[lot.id]} kg requested")

            ts = now_iso()
            product_id = generate_id("FP-MFG", (p.id for p in self.state.final_products))
            product = self._product(
                auth,
                product_id,
                [lot.id for lot in lots],
                ts,
                product_name=formulation.product_name,
                batch_size=formulation.batch_size,
                excipients=formulation.excipients,
                total_weight=sum(weights.values()),
                total_cost=sum(ing.weight_kg * ing.price_per_kg for ing in formulation.ingredients),
                notes=formulation.notes or None,
                photos=list(formulation.photos),
                qr_code=f"QR-{product_id}-{int(utc_now().timestamp() * 1000)}",
            )
            consumed = [
                lot.model_copy(update={"available_weight": lot.available_weight - weights[lot.id], "updated_at": ts})
                for lot in lots
            ]
            self._commit(
                final_products=[*self.state.final_products, product],
                processing_lots=_replace(self.state.processing_lots, *consumed),
            )
        logger.info("formulation %s consumed %s", product.id,
                    ", ".join(f"{k}={v}kg" for k, v in weights.items()))
        return OpResult.success(product)

    def generate_qr_code(self, auth: Optional[AuthContext], product_id: str) -> OpResult[FinalProduct]:
        with self._lock:
            product = _find(self.state.final_products, product_id)
            if product is None:
                return _missing("product", product_id)
            if product.status != "active":
                return _invalid(f"product {product_id} is {product.status}")
            now = utc_now()
            updated = product.model_copy(update={
                "qr_code": f"QR-{product_id}-{int(now.timestamp() * 1000)}",
                "updated_at": to_iso(now),
            })
            self._commit(final_products=_replace(self.state.final_products, updated))
        return OpResult.success(updated)

    def recall_product(self, auth: Optional[AuthContext], product_id: str) -> OpResult[FinalProduct]:
        with self._lock:
            product = _find(self.state.final_products, product_id)
            if product is None:
                return _missing("product", product_id)
            if product.status == "recalled":
                return OpResult.success(product)
            updated = product.model_copy(update={"status": "recalled", "updated_at": now_iso()})
            self._commit(final_products=_replace(self.state.final_products, updated))
        logger.warning("product %s recalled", product_id)
        return OpResult.success(updated)

    # ---------- Directory ----------
    def add_farmer_profile(self, auth: Optional[AuthContext], profile: FarmerProfile) -> OpResult[FarmerProfile]:
        with self._lock:
            self._commit(farmers=[*self.state.farmers, profile])
        logger.info("farmer profile %s added", profile.id)
        return OpResult.success(profile)

    # ---------- Queries ----------
    def get(self, collection: str, item_id: str):
        """Lookup by id in a collection named by its storage key or attribute."""
        field = COLLECTIONS.get(collection, collection)
        return _find(getattr(self.state, field), item_id)

    def view(self, auth: Optional[AuthContext]) -> DataState:
        return views.role_scoped_view(self.state, auth)

    def harvested_batches(self, auth: Optional[AuthContext]) -> List[FarmerBatch]:
        return views.harvested_batches(self.view(auth))

    def approved_lots(self, auth: Optional[AuthContext]) -> List[ProcessingLot]:
        return views.approved_lots(self.view(auth))

    def pending_samples(self, auth: Optional[AuthContext]) -> List[LabSample]:
        return views.pending_samples(self.view(auth))

    def receivable_aggregations(self, auth: Optional[AuthContext]) -> List[AggregationBatch]:
        return views.receivable_aggregations(self.view(auth))

    def lots_in_stock(self, auth: Optional[AuthContext]) -> List[ProcessingLot]:
        return views.lots_in_stock(self.view(auth))

    def reconstruct(self, product_id: str) -> Optional[ProvenanceData]:
        return reconstruct(self.state, product_id)

    def provenance(self, product_id: str) -> Optional[Dict[str, Any]]:
        return expand_provenance(self.state, product_id)
