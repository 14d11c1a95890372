import os
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import AuthContext, parse_auth
from database import engine
from errors import OpResult, PersistenceError, Status
from schemas import (
    CartItem,
    CreateAggregation,
    CreateProduct,
    FarmerProfile,
    Formulation,
    HarvestData,
    LinkSample,
    NewBatch,
    NewCareEvent,
    NewProcessingStep,
    ReceiveBatch,
    SendSample,
    TestResults,
    TransportData,
)
from storage import CollectionStorage
from store import DomainStore
from utils import certificate_qr_payload, product_qr_payload, render_qr_png

# ---------- Config ----------
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
SEED_DEMO = os.getenv("HERBCHAIN_SEED_DEMO", "1") == "1"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="HerbChain Trace", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Store ----------
_store: Optional[DomainStore] = None


def get_store() -> DomainStore:
    global _store
    if _store is None:
        storage = CollectionStorage(engine)
        storage.ensure_schema()
        _store = DomainStore(storage)
        _store.load(seed_demo=SEED_DEMO)
    return _store


def get_auth(
    x_role: Optional[str] = Header(None),
    x_actor_id: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
) -> Optional[AuthContext]:
    return parse_auth(x_role, x_actor_id, x_actor_name)


@app.on_event("startup")
def on_startup():
    get_store()


@app.exception_handler(PersistenceError)
async def persistence_failed(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ---------- Helpers ----------
_HTTP_STATUS = {Status.NOT_FOUND: 404, Status.FORBIDDEN: 403, Status.INVALID: 409}


def _unwrap(result: OpResult) -> Any:
    if not result.ok:
        raise HTTPException(status_code=_HTTP_STATUS[result.status], detail=result.detail)
    value = result.value
    return value if isinstance(value, list) else value.to_json()


def _listing(items) -> List[dict]:
    return [item.to_json() for item in items]


# ---------- Farmer ----------
@app.post("/api/batches", status_code=201)
def create_batch(body: NewBatch, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.create_batch(auth, body))


@app.post("/api/batches/{batch_id}/care-events", status_code=201)
def add_care_event(batch_id: str, body: NewCareEvent, auth=Depends(get_auth),
                   store: DomainStore = Depends(get_store)):
    return _unwrap(store.add_care_event(auth, batch_id, body))


@app.post("/api/batches/{batch_id}/harvest")
def record_harvest(batch_id: str, body: HarvestData, auth=Depends(get_auth),
                   store: DomainStore = Depends(get_store)):
    return _unwrap(store.record_harvest(auth, batch_id, body))


@app.get("/api/batches/harvested")
def harvested_batches(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _listing(store.harvested_batches(auth))


@app.post("/api/farmers", status_code=201)
def add_farmer_profile(body: FarmerProfile, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.add_farmer_profile(auth, body))


# ---------- Collector ----------
@app.post("/api/aggregations", status_code=201)
def create_aggregation(body: CreateAggregation, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.create_aggregation(
        auth, body.farmer_batch_ids, body.price_per_kg,
        destination=body.destination, facility_id=body.facility_id,
    ))


@app.patch("/api/aggregations/{aggregation_id}/transport")
def update_transport(aggregation_id: str, body: TransportData, auth=Depends(get_auth),
                     store: DomainStore = Depends(get_store)):
    return _unwrap(store.update_transport(auth, aggregation_id, body))


@app.get("/api/aggregations/receivable")
def receivable_aggregations(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _listing(store.receivable_aggregations(auth))


@app.get("/api/cart")
def get_cart(store: DomainStore = Depends(get_store)):
    return list(store.state.aggregation_cart)


@app.post("/api/cart")
def add_to_cart(body: CartItem, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.add_to_aggregation_cart(auth, body.batch_id))


@app.delete("/api/cart/{batch_id}")
def remove_from_cart(batch_id: str, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.remove_from_aggregation_cart(auth, batch_id))


@app.delete("/api/cart")
def clear_cart(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.clear_aggregation_cart(auth))


# ---------- Facility ----------
@app.post("/api/lots", status_code=201)
def receive_batch(body: ReceiveBatch, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.receive_batch_at_facility(
        auth, body.aggregation_id, body.received_weight,
        quality_notes=body.quality_notes, photos=body.photos,
    ))


@app.post("/api/lots/{lot_id}/steps", status_code=201)
def add_processing_step(lot_id: str, body: NewProcessingStep, auth=Depends(get_auth),
                        store: DomainStore = Depends(get_store)):
    return _unwrap(store.add_processing_step(auth, lot_id, body))


@app.get("/api/lots/approved")
def approved_lots(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _listing(store.approved_lots(auth))


@app.get("/api/lots/in-stock")
def lots_in_stock(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _listing(store.lots_in_stock(auth))


@app.post("/api/samples", status_code=201)
def send_sample(body: SendSample, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.send_sample_to_lab(
        auth, body.lot_id, body.lab_id, body.sample_weight,
        lab_name=body.lab_name, tests=body.tests, notes=body.notes, photos=body.photos,
        sample_id=body.sample_id, sample_photo=body.sample_photo,
    ))


# ---------- Laboratory ----------
@app.post("/api/samples/link")
def link_sample(body: LinkSample, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.link_sample_to_lab(
        auth, body.sample_id, body.facility_id, body.processing_lot_id, body.sample_weight,
        notes=body.notes, photos=body.photos,
    ))


@app.get("/api/samples/pending")
def pending_samples(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _listing(store.pending_samples(auth))


@app.post("/api/samples/{sample_id}/results")
def submit_test_results(sample_id: str, body: TestResults, auth=Depends(get_auth),
                        store: DomainStore = Depends(get_store)):
    return _unwrap(store.submit_test_results(auth, sample_id, body))


@app.get("/api/certificates/{certificate_id}")
def get_certificate(certificate_id: str, store: DomainStore = Depends(get_store)):
    cert = store.get("certificates", certificate_id)
    if not cert:
        raise HTTPException(status_code=404, detail="certificate not found")
    return cert.to_json()


@app.get("/api/certificates/{certificate_id}/qrcode")
def certificate_qrcode(certificate_id: str, store: DomainStore = Depends(get_store)):
    cert = store.get("certificates", certificate_id)
    if not cert:
        raise HTTPException(status_code=404, detail="certificate not found")
    return Response(content=render_qr_png(certificate_qr_payload(cert, BASE_URL)), media_type="image/png")


# ---------- Manufacturer ----------
@app.post("/api/products", status_code=201)
def create_product(body: CreateProduct, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.create_final_product(
        auth, body.processing_lot_ids, body.product_name, body.batch_size, excipients=body.excipients,
    ))


@app.post("/api/products/formulation", status_code=201)
def create_product_from_formulation(body: Formulation, auth=Depends(get_auth),
                                    store: DomainStore = Depends(get_store)):
    return _unwrap(store.create_final_product_from_formulation(auth, body))


@app.post("/api/products/{product_id}/qr")
def generate_qr_code(product_id: str, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.generate_qr_code(auth, product_id))


@app.post("/api/products/{product_id}/recall")
def recall_product(product_id: str, auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return _unwrap(store.recall_product(auth, product_id))


@app.get("/api/products/{product_id}/provenance")
def product_provenance(product_id: str, store: DomainStore = Depends(get_store)):
    expanded = store.provenance(product_id)
    if expanded is None:
        raise HTTPException(status_code=404, detail="product not found")
    return expanded


@app.get("/api/products/{product_id}/qrcode")
def product_qrcode(product_id: str, store: DomainStore = Depends(get_store)):
    product = store.get("finalProducts", product_id)
    if not product:
        raise HTTPException(status_code=404, detail="product not found")
    return Response(content=render_qr_png(product_qr_payload(product, BASE_URL)), media_type="image/png")


# ---------- Whole state ----------
@app.get("/api/data")
def get_data(auth=Depends(get_auth), store: DomainStore = Depends(get_store)):
    return store.view(auth).to_json()


@app.post("/api/seed")
def seed(store: DomainStore = Depends(get_store)):
    before = (len(store.state.farmers), len(store.state.farmer_batches))
    store.load(seed_demo=True)
    after = (len(store.state.farmers), len(store.state.farmer_batches))
    return {"status": "seeded" if after != before else "exists",
            "farmers": after[0], "farmerBatches": after[1]}
