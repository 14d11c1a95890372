"""
Walk one herb batch through the whole chain against a running API.
Run:
    uvicorn app:app --reload
    python scripts/simulate_supply_chain.py
"""
import os
import random
import time
from datetime import datetime, timedelta, timezone

import requests

API = os.getenv("API_URL", "http://localhost:8000")


def as_role(role, actor_id, name):
    return {"X-Role": role, "X-Actor-Id": actor_id, "X-Actor-Name": name}


def stamp(moment):
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def call(method, path, headers=None, **kwargs):
    r = requests.request(method, f"{API}{path}", headers=headers, timeout=10, **kwargs)
    print(method, path, r.status_code)
    r.raise_for_status()
    return r.json()


def main():
    print("Seed:", call("POST", "/api/seed"))

    farmer = as_role("farmer", "farmer-1", "Rajesh Kumar")
    batch = call("POST", "/api/batches", farmer, json={
        "species": "Ashwagandha",
        "seedQuantity": 40,
        "plantingDate": "2025-01-10",
        "location": {"latitude": 12.2958, "longitude": 76.6394, "address": "Mysore, Karnataka"},
    })
    call("POST", f"/api/batches/{batch['id']}/care-events", farmer, json={
        "type": "watering", "notes": "Drip irrigation", "date": "2025-02-01",
    })
    call("POST", f"/api/batches/{batch['id']}/harvest", farmer, json={
        "weight": round(random.uniform(80, 140), 1),
        "moisture": 11,
        "quality": "premium",
        "harvestDate": "2025-06-20",
    })

    collector = as_role("collector", "collector-1", "Mysore Collection Centre")
    agg = call("POST", "/api/aggregations", collector, json={
        "farmerBatchIds": [batch["id"], "FAR-20250910-001"],
        "pricePerKg": 120,
        "destination": "facility-1",
    })
    start = datetime.now(timezone.utc)
    call("PATCH", f"/api/aggregations/{agg['id']}/transport", collector, json={"startTime": stamp(start)})
    for i in range(3):
        at = stamp(start + timedelta(minutes=30 * (i + 1)))
        call("PATCH", f"/api/aggregations/{agg['id']}/transport", collector, json={
            "route": [{"latitude": 12.30 + 0.05 * i, "longitude": 76.64 + 0.05 * i, "timestamp": at}],
            "sensorData": [{
                "temperature": round(random.uniform(18, 26), 1),
                "humidity": round(random.uniform(50, 70), 1),
                "timestamp": at,
            }],
        })
        time.sleep(0.2)
    call("PATCH", f"/api/aggregations/{agg['id']}/transport", collector, json={
        "endTime": stamp(start + timedelta(hours=2)), "deliveryNotes": "Delivered dry",
    })

    facility = as_role("facility", "facility-1", "Karnataka Herbal Processing")
    lot = call("POST", "/api/lots", facility, json={
        "aggregationId": agg["id"], "receivedWeight": agg["totalWeight"],
    })
    for step in ("cleaning", "drying", "grinding"):
        call("POST", f"/api/lots/{lot['id']}/steps", facility, json={"step": step, "duration": 4})
    sample = call("POST", "/api/samples", facility, json={
        "lotId": lot["id"], "labId": "lab-1", "labName": "Bangalore Test Labs", "sampleWeight": 0.5,
        "tests": ["moisture", "pesticides", "heavyMetals", "dna"],
    })

    lab = as_role("laboratory", "lab-1", "Bangalore Test Labs")
    call("POST", "/api/samples/link", lab, json={
        "sampleId": sample["id"], "facilityId": "facility-1", "sampleWeight": 0.5,
    })
    call("POST", f"/api/samples/{sample['id']}/results", lab, json={
        "moisture": 9.5,
        "dnaAuthentication": True,
        "overallResult": "pass",
        "testedBy": "Bangalore Test Labs",
        "testDate": stamp(datetime.now(timezone.utc)),
    })

    maker = as_role("manufacturer", "manufacturer-1", "Ayur Formulations")
    product = call("POST", "/api/products", maker, json={
        "processingLotIds": [lot["id"]], "productName": "Ashwagandha Churna", "batchSize": 500,
    })
    chain = call("GET", f"/api/products/{product['id']}/provenance")
    print("Provenance farmers:", [f["name"] for f in chain["farmers"]])
    for entry in product["provenanceChain"]["timeline"]:
        print(" ", entry["date"], entry["event"], entry["actor"])


if __name__ == "__main__":
    main()
