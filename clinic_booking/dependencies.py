"""FastAPI dependencies."""

from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.exceptions import (
    AuthenticationException,
    ForbiddenException,
    RateLimitException,
)
from clinic_booking.core.redis_client import CacheManager, RateLimiter, get_redis_client
from clinic_booking.core.sessions import SessionStore
from clinic_booking.database import get_db
from clinic_booking.schemas.auth import PatientActor, StaffActor

PATIENT_LOGIN_REQUIRED = "Unauthorized: Please log in"
STAFF_LOGIN_REQUIRED = "Unauthorized: Staff login required"


def get_cache_manager(
    redis_client: Annotated[Any, Depends(get_redis_client)],
) -> CacheManager:
    """Get a cache manager over the shared Redis client."""
    return CacheManager(redis_client)


def get_session_store(
    cache_manager: Annotated[CacheManager, Depends(get_cache_manager)],
) -> SessionStore:
    """Get the session store."""
    return SessionStore(cache_manager)


def get_session_token(request: Request) -> str | None:
    """
    Read the session token from the cookie or a bearer header.

    Returns:
        The raw token, or None when the request carries none
    """
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()

    return None


def get_current_actor(
    token: Annotated[str | None, Depends(get_session_token)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> PatientActor | StaffActor | None:
    """Resolve the request's session to an actor, if any."""
    return store.resolve(token)


def require_patient(
    actor: Annotated[PatientActor | StaffActor | None, Depends(get_current_actor)],
) -> PatientActor:
    """
    Require a patient session.

    Raises:
        AuthenticationException: If there is no patient session
    """
    if not isinstance(actor, PatientActor):
        raise AuthenticationException(PATIENT_LOGIN_REQUIRED)
    return actor


def require_staff(
    actor: Annotated[PatientActor | StaffActor | None, Depends(get_current_actor)],
) -> StaffActor:
    """
    Require a staff session.

    Raises:
        AuthenticationException: If there is no staff session
    """
    if not isinstance(actor, StaffActor):
        raise AuthenticationException(STAFF_LOGIN_REQUIRED)
    return actor


def require_doctor(
    actor: Annotated[StaffActor, Depends(require_staff)],
) -> StaffActor:
    """
    Require a staff session belonging to a doctor.

    Raises:
        ForbiddenException: If the staff member is not a doctor
    """
    if not actor.is_doctor:
        raise ForbiddenException("Doctor access required")
    return actor


def login_rate_limit(
    request: Request,
    redis_client: Annotated[Any, Depends(get_redis_client)],
) -> None:
    """
    Throttle login attempts per client address.

    Raises:
        RateLimitException: If the client exceeded the per-minute limit
    """
    client = request.client.host if request.client else "unknown"
    limiter = RateLimiter(redis_client)
    if not limiter.check_rate_limit(f"rate_limit:login:{client}", settings.rate_limit_per_minute):
        raise RateLimitException("Too many login attempts")


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[CacheManager, Depends(get_cache_manager)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]
SessionToken = Annotated[str | None, Depends(get_session_token)]
CurrentPatient = Annotated[PatientActor, Depends(require_patient)]
CurrentStaff = Annotated[StaffActor, Depends(require_staff)]
CurrentDoctor = Annotated[StaffActor, Depends(require_doctor)]
LoginRateLimit = Depends(login_rate_limit)
