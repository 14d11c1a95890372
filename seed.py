"""First-run demo data: three farmers and three batches with fixed ids."""
from schemas import CareEvent, FarmerBatch, FarmerProfile, GeoLocation, HarvestData

DEMO_FARMERS = [
    FarmerProfile(
        id="farmer-1",
        full_name="Rajesh Kumar",
        mobile="+91 9876543210",
        email="rajesh.kumar@example.com",
        location="Mysore, Karnataka",
        nmpb_license="NMPB/KAR/2023/001",
        gacp_certificate="GACP/2023/RK001",
        cultivation_license="CL/KAR/2023/001",
        preferred_language="Kannada",
    ),
    FarmerProfile(
        id="farmer-2",
        full_name="Priya Sharma",
        mobile="+91 9876543211",
        email="priya.sharma@example.com",
        location="Coorg, Karnataka",
        nmpb_license="NMPB/KAR/2023/002",
        gacp_certificate="GACP/2023/PS002",
        cultivation_license="CL/KAR/2023/002",
        preferred_language="English",
    ),
    FarmerProfile(
        id="farmer-3",
        full_name="Suresh Reddy",
        mobile="+91 9876543212",
        email="suresh.reddy@example.com",
        location="Bangalore Rural, Karnataka",
        nmpb_license="NMPB/KAR/2023/003",
        gacp_certificate="GACP/2023/SR003",
        cultivation_license="CL/KAR/2023/003",
        preferred_language="Telugu",
    ),
]

DEMO_BATCHES = [
    FarmerBatch(
        id="FAR-20250910-001",
        farmer_id="farmer-1",
        farmer_name="Rajesh Kumar",
        species="Turmeric",
        seed_quantity=50,
        planting_date="2024-06-15",
        location=GeoLocation(latitude=12.2958, longitude=76.6394, address="Mysore, Karnataka"),
        photos=["https://picsum.photos/400/300?random=1"],
        status="harvested",
        care_events=[
            CareEvent(
                id="CARE-001",
                batch_id="FAR-20250910-001",
                type="watering",
                notes="Regular watering completed",
                date="2024-07-01",
                created_at="2024-07-01T10:00:00Z",
            ),
        ],
        harvest_data=HarvestData(
            weight=120,
            moisture=12,
            photos=["https://picsum.photos/400/300?random=2"],
            harvest_date="2024-09-01",
            quality="premium",
        ),
        created_at="2024-06-15T08:00:00Z",
        updated_at="2024-09-01T16:00:00Z",
    ),
    FarmerBatch(
        id="FAR-20250910-002",
        farmer_id="farmer-2",
        farmer_name="Priya Sharma",
        species="Cardamom",
        seed_quantity=30,
        planting_date="2024-05-20",
        location=GeoLocation(latitude=12.3375, longitude=75.7139, address="Coorg, Karnataka"),
        photos=["https://picsum.photos/400/300?random=3"],
        status="harvested",
        harvest_data=HarvestData(
            weight=85,
            moisture=10,
            photos=["https://picsum.photos/400/300?random=4"],
            harvest_date="2024-08-25",
            quality="standard",
        ),
        created_at="2024-05-20T09:00:00Z",
        updated_at="2024-08-25T14:00:00Z",
    ),
    FarmerBatch(
        id="FAR-20250910-003",
        farmer_id="farmer-3",
        farmer_name="Suresh Reddy",
        species="Black Pepper",
        seed_quantity=25,
        planting_date="2024-04-10",
        location=GeoLocation(latitude=13.0827, longitude=80.2707, address="Bangalore Rural, Karnataka"),
        photos=["https://picsum.photos/400/300?random=5"],
        status="ongoing",
        care_events=[
            CareEvent(
                id="CARE-002",
                batch_id="FAR-20250910-003",
                type="fertilizing",
                notes="Applied organic fertilizer",
                date="2024-06-15",
                created_at="2024-06-15T11:00:00Z",
            ),
        ],
        created_at="2024-04-10T07:00:00Z",
        updated_at="2024-06-15T11:00:00Z",
    ),
]
