from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime, time
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from clinic_booking.core.redis_client import CacheManager, get_redis_client
from clinic_booking.core.security import get_password_hash
from clinic_booking.core.sessions import SessionStore
from clinic_booking.database import get_db
from clinic_booking.main import app
from clinic_booking.models import (
    branches,
    doctor_specialties,
    identifier_sequences,
    metadata,
    patients,
    specialties,
    staff,
    time_slots,
)
from clinic_booking.schemas.appointments import BookingRequest, BookingResult
from clinic_booking.schemas.auth import PatientActor, StaffActor
from clinic_booking.services.booking_service import BookingService

SLOT_DATE = date(2024, 5, 1)
PATIENT_PASSWORD = "correct-horse-1"

# Booking "now" used wherever the appointment number must be predictable
FIXED_NOW = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


class FakeRedis:
    """In-memory replacement for the Redis commands the application issues."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self):
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = str(value)
        self.ttls.pop(key, None)
        return True

    def setex(self, key, ttl, value):
        self.data[key] = str(value)
        self.ttls[key] = int(ttl)
        return True

    def expire(self, key, ttl):
        if key not in self.data:
            return False
        self.ttls[key] = int(ttl)
        return True

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, "0")) + 1)
        return int(self.data[key])

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def exists(self, key):
        return int(key in self.data)

    def close(self):
        pass


def _slot(slot_id, doctor_id, slot_date, slot_time, available=True) -> dict:
    return {
        "id": slot_id,
        "doctor_id": doctor_id,
        "slot_date": slot_date,
        "slot_time": slot_time,
        "duration_minutes": 30,
        "is_available": available,
    }


async def _seed(conn) -> None:
    password_hash = get_password_hash(PATIENT_PASSWORD)

    await conn.execute(
        insert(branches),
        [
            {"id": 1, "name": "General", "location": "12 Harbour Road"},
            {"id": 2, "name": "Westside", "location": "3 Mill Lane"},
        ],
    )
    await conn.execute(
        insert(staff),
        [
            {
                "id": 5,
                "employee_id": "DOC005",
                "name": "Dr. Amara Okafor",
                "role": "doctor",
                "branch_id": 1,
                "consultation_fee": Decimal("150.00"),
                "is_active": True,
            },
            {
                "id": 6,
                "employee_id": "DOC006",
                "name": "Dr. Lucas Brandt",
                "role": "doctor",
                "branch_id": 2,
                "consultation_fee": Decimal("90.00"),
                "is_active": True,
            },
            {
                "id": 7,
                "employee_id": "REC007",
                "name": "Priya Nair",
                "role": "receptionist",
                "branch_id": 1,
                "consultation_fee": Decimal("0"),
                "is_active": True,
            },
            {
                "id": 8,
                "employee_id": "DOC008",
                "name": "Dr. Retired",
                "role": "doctor",
                "branch_id": 1,
                "consultation_fee": Decimal("120.00"),
                "is_active": False,
            },
        ],
    )
    await conn.execute(
        insert(specialties),
        [{"id": 1, "name": "Cardiology"}, {"id": 2, "name": "General Practice"}],
    )
    await conn.execute(
        insert(doctor_specialties),
        [
            {"doctor_id": 5, "specialty_id": 1},
            {"doctor_id": 5, "specialty_id": 2},
            {"doctor_id": 6, "specialty_id": 2},
        ],
    )
    await conn.execute(
        insert(time_slots),
        [
            _slot(42, 5, SLOT_DATE, time(10, 0)),
            _slot(43, 5, SLOT_DATE, time(9, 0)),
            _slot(44, 5, SLOT_DATE, time(11, 0), available=False),
            _slot(45, 5, date(2024, 5, 2), time(9, 0)),
            _slot(50, 6, SLOT_DATE, time(10, 0)),
            _slot(60, 8, SLOT_DATE, time(10, 0)),
        ],
    )
    await conn.execute(
        insert(patients),
        [
            {
                "id": 1,
                "patient_number": "PAT000001",
                "name": "Jane Doe",
                "email": "jane@example.com",
                "phone": "+15550100",
                "password_hash": password_hash,
                "is_active": True,
            },
            {
                "id": 2,
                "patient_number": "PAT000002",
                "name": "Inactive Patient",
                "email": "inactive@example.com",
                "phone": None,
                "password_hash": password_hash,
                "is_active": False,
            },
        ],
    )
    await conn.execute(
        insert(identifier_sequences).values(name="patient", period="", last_value=2)
    )


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite database with schema and seed data, one per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'clinic.db'}",
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await _seed(conn)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def session_store(fake_redis: FakeRedis) -> SessionStore:
    return SessionStore(CacheManager(fake_redis))


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    fake_redis: FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client; every request gets its own session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: fake_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient_headers(session_store: SessionStore) -> dict[str, str]:
    """Session for Jane Doe (patient 1)."""
    return bearer(session_store.create(PatientActor(patient_id=1)))


@pytest.fixture
def doctor_headers(session_store: SessionStore) -> dict[str, str]:
    """Session for doctor 5 at the General branch."""
    return bearer(session_store.create(StaffActor(staff_id=5, role="doctor", branch_id=1)))


@pytest.fixture
def other_doctor_headers(session_store: SessionStore) -> dict[str, str]:
    """Session for doctor 6 at the Westside branch."""
    return bearer(session_store.create(StaffActor(staff_id=6, role="doctor", branch_id=2)))


@pytest.fixture
def receptionist_headers(session_store: SessionStore) -> dict[str, str]:
    return bearer(session_store.create(StaffActor(staff_id=7, role="receptionist", branch_id=1)))


@pytest.fixture
def book(session_factory: async_sessionmaker[AsyncSession]):
    """Book a slot through the booking service on its own session, at ``FIXED_NOW``."""

    async def _book(
        slot_id: int = 42,
        doctor_id: int = 5,
        patient_id: int = 1,
        appointment_type: str = "consultation",
    ) -> BookingResult:
        async with session_factory() as session:
            return await BookingService(session, clock=fixed_clock).book(
                patient_id,
                BookingRequest(
                    doctor_id=doctor_id,
                    slot_id=slot_id,
                    appointment_type=appointment_type,
                ),
            )

    return _book
