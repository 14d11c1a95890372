"""What each role sees. Visibility only: every query runs over already-loaded data."""
from typing import List, Optional

from auth import AuthContext
from schemas import AggregationBatch, DataState, FarmerBatch, LabSample, ProcessingLot


def role_scoped_view(state: DataState, auth: Optional[AuthContext]) -> DataState:
    if auth is None:
        return state
    owner = auth.owner_id()

    if auth.role == "farmer":
        return state.model_copy(update={
            "farmer_batches": [b for b in state.farmer_batches if b.farmer_id == owner],
        })
    if auth.role == "collector":
        # all farmer batches stay visible so harvested ones can be picked
        return state.model_copy(update={
            "aggregation_batches": [a for a in state.aggregation_batches if a.collector_id == owner],
        })
    if auth.role == "facility":
        return state.model_copy(update={
            "processing_lots": [lot for lot in state.processing_lots if lot.facility_id == owner],
        })
    if auth.role == "laboratory":
        return state.model_copy(update={
            "lab_samples": [s for s in state.lab_samples if s.lab_id == owner],
        })
    if auth.role == "manufacturer":
        return state.model_copy(update={
            "final_products": [p for p in state.final_products if p.manufacturer_id == owner],
        })
    return state


def harvested_batches(view: DataState) -> List[FarmerBatch]:
    return [b for b in view.farmer_batches if b.status == "harvested"]


def approved_lots(view: DataState) -> List[ProcessingLot]:
    return [lot for lot in view.processing_lots if lot.status == "approved"]


def pending_samples(view: DataState) -> List[LabSample]:
    return [s for s in view.lab_samples if s.status == "pending"]


def receivable_aggregations(view: DataState) -> List[AggregationBatch]:
    """In transit, or delivered but not yet taken in by a facility."""
    return [
        a for a in view.aggregation_batches
        if a.status == "in-transit" or (a.status == "delivered" and not a.facility_id)
    ]


def lots_in_stock(view: DataState) -> List[ProcessingLot]:
    return [lot for lot in view.processing_lots if lot.available_weight > 0]
