"""Tests for login, registration and session handling."""

import pytest
from httpx import AsyncClient

from clinic_booking.config import settings
from clinic_booking.core.redis_client import CacheManager
from clinic_booking.core.sessions import SessionStore
from clinic_booking.services import patient_service
from clinic_booking.schemas.auth import PatientActor, StaffActor

PASSWORD = "correct-horse-1"


@pytest.mark.asyncio
async def test_patient_login(client: AsyncClient, fake_redis) -> None:
    """A successful login sets the session cookie and returns the profile."""
    response = await client.post(
        "/login", json={"email": "jane@example.com", "password": PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["patient"]["patient_number"] == "PAT000001"
    assert "password_hash" not in data["patient"]

    token = data["session_token"]
    assert response.cookies.get(settings.session_cookie_name) == token
    assert f"session:{token}" in fake_redis.data
    assert fake_redis.ttls[f"session:{token}"] == 24 * 60 * 60

    profile = await client.get("/session-data")
    assert profile.status_code == 200
    assert profile.json()["email"] == "jane@example.com"


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient) -> None:
    response = await client.post(
        "/login", json={"email": "Jane@Example.com", "password": PASSWORD}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [
        ("jane@example.com", "wrong-password"),
        ("nobody@example.com", PASSWORD),
        ("inactive@example.com", PASSWORD),
    ],
)
async def test_login_failures_look_the_same(
    client: AsyncClient,
    fake_redis,
    email: str,
    password: str,
) -> None:
    """Wrong password, unknown email and inactive account are indistinguishable."""
    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}
    assert not [key for key in fake_redis.data if key.startswith("session:")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [
        ("jane@example.com", "wrong-password"),
        ("nobody@example.com", PASSWORD),
        ("inactive@example.com", PASSWORD),
    ],
)
async def test_login_failures_cost_one_hash_check(
    client: AsyncClient,
    monkeypatch: pytest.MonkeyPatch,
    email: str,
    password: str,
) -> None:
    """Unknown emails are checked against a dummy hash like everyone else."""
    checks = []
    real_verify = patient_service.verify_password
    real_dummy = patient_service.dummy_verify_password

    def counting_verify(plain, hashed):
        checks.append("verify")
        return real_verify(plain, hashed)

    def counting_dummy():
        checks.append("dummy")
        real_dummy()

    monkeypatch.setattr(patient_service, "verify_password", counting_verify)
    monkeypatch.setattr(patient_service, "dummy_verify_password", counting_dummy)

    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 401
    assert len(checks) == 1
    if email == "nobody@example.com":
        assert checks == ["dummy"]


@pytest.mark.asyncio
async def test_login_invalid_body(client: AsyncClient) -> None:
    response = await client.post("/login", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request data"}


@pytest.mark.asyncio
async def test_login_rate_limit(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Repeated attempts from one client are throttled."""
    monkeypatch.setattr(settings, "rate_limit_per_minute", 2)
    payload = {"email": "jane@example.com", "password": "wrong-password"}

    assert (await client.post("/login", json=payload)).status_code == 401
    assert (await client.post("/login", json=payload)).status_code == 401

    response = await client.post("/login", json=payload)
    assert response.status_code == 429
    assert response.json() == {"error": "Too many login attempts"}


@pytest.mark.asyncio
async def test_staff_login(client: AsyncClient) -> None:
    response = await client.post("/staff-login", json={"employee_id": "DOC005"})
    assert response.status_code == 200
    data = response.json()
    assert data["staff"]["role"] == "doctor"
    assert data["staff"]["branch_name"] == "General"

    profile = await client.get("/staff-session-data")
    assert profile.status_code == 200
    assert profile.json()["employee_id"] == "DOC005"


@pytest.mark.asyncio
async def test_staff_login_rejects_unknown_and_inactive(client: AsyncClient) -> None:
    for employee_id in ("NOPE01", "DOC008"):
        response = await client.post("/staff-login", json={"employee_id": employee_id})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_register(client: AsyncClient) -> None:
    """Registration assigns the next patient number and logs the patient in."""
    response = await client.post(
        "/register",
        json={
            "name": "Sam Lee",
            "email": "Sam@Example.com",
            "phone": "+15550199",
            "password": "a-long-password",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["patient"]["patient_number"] == "PAT000003"
    assert data["patient"]["email"] == "sam@example.com"

    login = await client.post(
        "/login", json={"email": "sam@example.com", "password": "a-long-password"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient) -> None:
    response = await client.post(
        "/register",
        json={"name": "Jane Again", "email": "jane@example.com", "password": "a-long-password"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient) -> None:
    response = await client.post(
        "/register",
        json={"name": "Sam Lee", "email": "sam@example.com", "password": "short"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, fake_redis) -> None:
    """Logging out destroys the session server-side."""
    login = await client.post("/login", json={"email": "jane@example.com", "password": PASSWORD})
    token = login.json()["session_token"]

    response = await client.get("/logout")
    assert response.status_code == 200
    assert f"session:{token}" not in fake_redis.data

    after = await client.get(
        "/session-data", headers={"Authorization": f"Bearer {token}"}
    )
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_session_scopes_are_separate(
    client: AsyncClient,
    patient_headers: dict,
    doctor_headers: dict,
) -> None:
    """Patient sessions do not open staff endpoints and vice versa."""
    response = await client.get("/staff-session-data", headers=patient_headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: Staff login required"}

    response = await client.get("/session-data", headers=doctor_headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized: Please log in"}


@pytest.mark.asyncio
async def test_unknown_token_is_unauthorized(client: AsyncClient) -> None:
    response = await client.get("/session-data", headers={"Authorization": "Bearer bogus"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_session_is_unauthorized(
    client: AsyncClient,
    fake_redis,
    patient_headers: dict,
) -> None:
    """Expiry is the key disappearing from Redis."""
    for key in [k for k in fake_redis.data if k.startswith("session:")]:
        fake_redis.delete(key)

    response = await client.get("/session-data", headers=patient_headers)
    assert response.status_code == 401


def test_session_store_round_trip(fake_redis) -> None:
    store = SessionStore(CacheManager(fake_redis), ttl_seconds=60, sliding=False)

    token = store.create(StaffActor(staff_id=5, role="doctor", branch_id=1))
    actor = store.resolve(token)

    assert isinstance(actor, StaffActor)
    assert actor.staff_id == 5
    assert actor.is_doctor is True
    assert store.resolve(None) is None
    assert store.resolve("missing") is None


def test_fixed_session_ttl_is_not_extended(fake_redis) -> None:
    store = SessionStore(CacheManager(fake_redis), ttl_seconds=60, sliding=False)
    token = store.create(PatientActor(patient_id=1))
    fake_redis.ttls[f"session:{token}"] = 10

    store.resolve(token)

    assert fake_redis.ttls[f"session:{token}"] == 10


def test_sliding_session_ttl_is_extended(fake_redis) -> None:
    store = SessionStore(CacheManager(fake_redis), ttl_seconds=60, sliding=True)
    token = store.create(PatientActor(patient_id=1))
    fake_redis.ttls[f"session:{token}"] = 10

    store.resolve(token)

    assert fake_redis.ttls[f"session:{token}"] == 60


def test_tampered_session_payload_is_ignored(fake_redis) -> None:
    store = SessionStore(CacheManager(fake_redis))
    fake_redis.set("session:forged", '{"kind": "admin", "staff_id": 1}')

    assert store.resolve("forged") is None


@pytest.mark.asyncio
async def test_login_when_session_store_is_down(
    client: AsyncClient,
    fake_redis,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Credentials are fine but no session can be stored."""

    def broken_setex(key, ttl, value):
        raise ConnectionError("redis down")

    monkeypatch.setattr(fake_redis, "setex", broken_setex)

    response = await client.post("/login", json={"email": "jane@example.com", "password": PASSWORD})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
