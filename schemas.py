from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Any, Dict, List, Literal

BatchStatus = Literal["planting", "ongoing", "harvested", "sold"]
CareType = Literal["watering", "fertilizing", "weeding", "other"]
Quality = Literal["premium", "standard", "low"]
AggregationStatus = Literal["collecting", "in-transit", "delivered"]
LotStatus = Literal["received", "processing", "completed", "lab-testing", "approved", "rejected"]
StepKind = Literal["cleaning", "drying", "grinding", "packaging"]
SampleStatus = Literal["pending", "testing", "completed"]
Role = Literal["farmer", "collector", "facility", "laboratory", "manufacturer"]


class Record(BaseModel):
    """Persisted entity: camelCase on the wire, snake_case in Python, replaced never edited."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Payload(BaseModel):
    """Request body accepted from UI callers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Farmer ----------
class GeoLocation(Record):
    latitude: float
    longitude: float
    address: str = ""


class CareEvent(Record):
    id: str
    batch_id: str
    type: CareType
    notes: str = ""
    voice_note: Optional[str] = None
    photos: List[str] = []
    date: str
    created_at: str


class HarvestData(Record):
    weight: float = Field(..., ge=0)
    moisture: float = 0
    quality: Quality
    photos: List[str] = []
    harvest_date: str


class FarmerBatch(Record):
    id: str
    farmer_id: str
    farmer_name: str = ""
    species: str
    seed_quantity: float
    planting_date: str
    location: GeoLocation
    photos: List[str] = []
    status: BatchStatus
    care_events: List[CareEvent] = []
    harvest_data: Optional[HarvestData] = None
    payment_amount: Optional[float] = None
    payment_status: Optional[Literal["pending", "paid"]] = None
    created_at: str
    updated_at: str


class FarmerProfile(Record):
    id: str
    full_name: str
    mobile: str = ""
    email: str = ""
    location: str = ""
    nmpb_license: str = ""
    gacp_certificate: str = ""
    cultivation_license: str = ""
    preferred_language: str = ""


# ---------- Collector ----------
class RoutePoint(Record):
    latitude: float
    longitude: float
    timestamp: str


class SensorPoint(Record):
    temperature: float
    humidity: float
    timestamp: str


class TransportData(Record):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    route: List[RoutePoint] = []
    sensor_data: List[SensorPoint] = []
    delivery_photo: Optional[str] = None
    delivery_notes: Optional[str] = None


class AggregationBatch(Record):
    id: str
    collector_id: str
    collector_name: str = ""
    farmer_batches: List[str]
    total_weight: float
    total_value: float
    price_per_kg: float
    status: AggregationStatus
    destination: Optional[str] = None
    facility_id: Optional[str] = None
    transport_data: Optional[TransportData] = None
    created_at: str
    updated_at: str


# ---------- Facility / Laboratory ----------
class ProcessingStep(Record):
    id: str
    lot_id: str
    step: StepKind
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    duration: float
    photos: List[str] = []
    notes: str = ""
    timestamp: str


class AnalyteValue(Record):
    name: str
    value: float
    limit: float
    passed: bool = Field(..., alias="pass")


class AnalytePanel(Record):
    detected: bool = False
    values: List[AnalyteValue] = []


class TestResults(Record):
    moisture: float
    pesticides: AnalytePanel = AnalytePanel()
    heavy_metals: AnalytePanel = AnalytePanel()
    dna_authentication: bool
    overall_result: Literal["pass", "fail"]
    report_pdf: Optional[str] = None
    report_photos: List[str] = []
    tested_by: str = ""
    test_date: str


class ProcessingLot(Record):
    id: str
    facility_id: str
    facility_name: str = ""
    aggregation_batch_ids: List[str]
    species: str
    total_weight: float
    received_weight: float
    available_weight: float
    status: LotStatus
    processing_steps: List[ProcessingStep] = []
    quality_notes: Optional[str] = None
    photos: List[str] = []
    lab_sample_id: Optional[str] = None
    test_results: Optional[TestResults] = None
    grade: Optional[Quality] = None
    created_at: str
    updated_at: str


class LabSample(Record):
    id: str
    processing_lot_id: str
    facility_id: str
    lab_id: str
    lab_name: Optional[str] = None
    sample_weight: float
    sample_photo: Optional[str] = None
    tests: List[str] = []
    notes: str = ""
    photos: List[str] = []
    status: SampleStatus
    test_results: Optional[TestResults] = None
    certificate_id: Optional[str] = None
    created_at: str
    updated_at: str


class Certificate(Record):
    id: str
    sample_id: str
    processing_lot_id: str
    qr_code: str
    issued_by: str
    issued_date: str
    valid_until: str
    status: Literal["active", "revoked"] = "active"


# ---------- Manufacturer ----------
class ProvenanceFarmer(Record):
    id: str
    name: str
    batches: List[str] = []


class ProvenanceCollector(Record):
    id: str
    name: str
    aggregations: List[str] = []


class ProvenanceFacility(Record):
    id: str
    name: str
    lots: List[str] = []


class ProvenanceLab(Record):
    id: str
    name: str
    tests: List[str] = []


class ProvenanceActor(Record):
    id: str
    name: str


class TimelineEntry(Record):
    event: str
    date: str
    actor: str
    details: Dict[str, Any] = {}


class ProvenanceData(Record):
    farmers: List[ProvenanceFarmer] = []
    collectors: List[ProvenanceCollector] = []
    facilities: List[ProvenanceFacility] = []
    labs: List[ProvenanceLab] = []
    manufacturer: ProvenanceActor
    timeline: List[TimelineEntry] = []


class FinalProduct(Record):
    id: str
    manufacturer_id: str
    manufacturer_name: str = ""
    processing_lot_ids: List[str]
    product_name: str
    batch_size: int
    excipients: Optional[List[str]] = None
    total_weight: Optional[float] = None
    total_cost: Optional[float] = None
    notes: Optional[str] = None
    photos: List[str] = []
    qr_code: str
    provenance_chain: ProvenanceData
    status: Literal["active", "recalled"] = "active"
    created_at: str
    updated_at: str


# ---------- Whole state ----------
class DataState(Record):
    farmer_batches: List[FarmerBatch] = []
    aggregation_batches: List[AggregationBatch] = []
    processing_lots: List[ProcessingLot] = []
    lab_samples: List[LabSample] = []
    certificates: List[Certificate] = []
    final_products: List[FinalProduct] = []
    farmers: List[FarmerProfile] = []
    aggregation_cart: List[str] = []


# storage key -> DataState attribute
COLLECTIONS: Dict[str, str] = {to_camel(name): name for name in DataState.model_fields}


# ---------- Request bodies ----------
class NewBatch(Payload):
    species: str = Field(..., min_length=1)
    seed_quantity: float = Field(..., gt=0)
    planting_date: str
    location: GeoLocation
    photos: List[str] = []


class NewCareEvent(Payload):
    type: CareType
    notes: str = ""
    voice_note: Optional[str] = None
    photos: List[str] = []
    date: str


class NewProcessingStep(Payload):
    step: StepKind
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    duration: float = Field(..., ge=0)
    photos: List[str] = []
    notes: str = ""


class CreateAggregation(Payload):
    farmer_batch_ids: List[str] = Field(..., min_length=1)
    price_per_kg: float = Field(..., gt=0)
    destination: Optional[str] = None
    facility_id: Optional[str] = None


class ReceiveBatch(Payload):
    aggregation_id: str
    received_weight: float = Field(..., gt=0)
    quality_notes: str = ""
    photos: List[str] = []


class SendSample(Payload):
    lot_id: str
    lab_id: str
    sample_weight: float = Field(..., gt=0)
    lab_name: Optional[str] = None
    sample_id: Optional[str] = None
    sample_photo: Optional[str] = None
    tests: List[str] = []
    notes: str = ""
    photos: List[str] = []


class LinkSample(Payload):
    sample_id: str = Field(..., min_length=1)
    facility_id: str
    processing_lot_id: str = ""
    sample_weight: float = Field(..., gt=0)
    notes: str = ""
    photos: List[str] = []


class CreateProduct(Payload):
    processing_lot_ids: List[str] = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    batch_size: int = Field(..., gt=0)
    excipients: Optional[List[str]] = None


class FormulationIngredient(Payload):
    processing_lot_id: str
    weight_kg: float = Field(..., gt=0)
    price_per_kg: float = Field(500, ge=0)


class Formulation(Payload):
    product_name: str = Field(..., min_length=1)
    batch_size: int = Field(..., gt=0)
    ingredients: List[FormulationIngredient] = Field(..., min_length=1)
    excipients: Optional[List[str]] = None
    notes: str = ""
    photos: List[str] = []


class CartItem(Payload):
    batch_id: str
