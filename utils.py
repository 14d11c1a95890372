import io
import json
import random
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import qrcode

CERTIFICATE_VALIDITY = timedelta(days=365)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(utc_now())


def parse_iso(value: str) -> datetime:
    """Accepts full timestamps and bare YYYY-MM-DD dates; naive values are taken as UTC."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def generate_id(prefix: str, taken: Iterable[str] = (), today: Optional[date] = None) -> str:
    """PREFIX-YYYYMMDD-NNN with a random suffix not already present in `taken`.

    The suffix widens by a digit once every value of the current width is used.
    """
    stem = f"{prefix}-{(today or utc_now().date()).strftime('%Y%m%d')}-"
    taken = set(taken)
    width = 3
    while sum(1 for t in taken if t.startswith(stem) and len(t) == len(stem) + width) >= 10 ** width:
        width += 1
    while True:
        candidate = f"{stem}{random.randrange(10 ** width):0{width}d}"
        if candidate not in taken:
            return candidate


def render_qr_png(data: str) -> bytes:
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def product_qr_payload(product, base_url: str) -> str:
    body: Dict[str, Any] = {
        "productId": product.id,
        "productName": product.product_name,
        "batchSize": product.batch_size,
        "manufacturer": product.manufacturer_name,
        "processingLots": product.processing_lot_ids,
        "status": product.status,
        "qrId": product.qr_code,
        "verifyUrl": f"{base_url}/api/products/{product.id}/provenance",
    }
    return json.dumps(body, sort_keys=True)


def certificate_qr_payload(certificate, base_url: str) -> str:
    body = {
        "certificateId": certificate.id,
        "sampleId": certificate.sample_id,
        "processingLotId": certificate.processing_lot_id,
        "issuedBy": certificate.issued_by,
        "validUntil": certificate.valid_until,
        "qrId": certificate.qr_code,
        "verifyUrl": f"{base_url}/api/certificates/{certificate.id}",
    }
    return json.dumps(body, sort_keys=True)
