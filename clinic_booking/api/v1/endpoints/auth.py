"""Authentication and session endpoints."""

from fastapi import APIRouter, Response, status

from clinic_booking.config import settings
from clinic_booking.dependencies import (
    CurrentPatient,
    CurrentStaff,
    DatabaseSession,
    LoginRateLimit,
    Sessions,
    SessionToken,
)
from clinic_booking.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PatientActor,
    PatientProfile,
    RegisterRequest,
    StaffActor,
    StaffLoginRequest,
    StaffLoginResponse,
    StaffProfile,
)
from clinic_booking.services.patient_service import PatientService

router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[LoginRateLimit],
    summary="Patient login",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: DatabaseSession,
    sessions: Sessions,
) -> LoginResponse:
    """
    Log a patient in with email and password and start a patient session.

    Args:
        data: Email and password
        response: Outgoing response (receives the session cookie)
        db: Database session
        sessions: Session store

    Returns:
        Session token and patient profile
    """
    patient = await PatientService(db).authenticate(data.email, data.password)
    token = sessions.create(PatientActor(patient_id=patient.id))
    _set_session_cookie(response, token)
    return LoginResponse(session_token=token, patient=patient)


@router.post(
    "/staff-login",
    response_model=StaffLoginResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[LoginRateLimit],
    summary="Staff login",
)
async def staff_login(
    data: StaffLoginRequest,
    response: Response,
    db: DatabaseSession,
    sessions: Sessions,
) -> StaffLoginResponse:
    """
    Log a staff member in by employee ID and start a staff session.

    Args:
        data: Employee ID
        response: Outgoing response (receives the session cookie)
        db: Database session
        sessions: Session store

    Returns:
        Session token and staff profile
    """
    member = await PatientService(db).authenticate_staff(data.employee_id)
    token = sessions.create(
        StaffActor(staff_id=member.id, role=member.role, branch_id=member.branch_id)
    )
    _set_session_cookie(response, token)
    return StaffLoginResponse(session_token=token, staff=member)


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register patient",
)
async def register(
    data: RegisterRequest,
    response: Response,
    db: DatabaseSession,
    sessions: Sessions,
) -> LoginResponse:
    """
    Create a patient account and log the patient in.

    Args:
        data: Name, email, phone and password
        response: Outgoing response (receives the session cookie)
        db: Database session
        sessions: Session store

    Returns:
        Session token and the new patient's profile
    """
    patient = await PatientService(db).register(data)
    token = sessions.create(PatientActor(patient_id=patient.id))
    _set_session_cookie(response, token)
    return LoginResponse(session_token=token, patient=patient)


@router.get(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Logout",
)
async def logout(
    response: Response,
    token: SessionToken,
    sessions: Sessions,
) -> dict[str, bool]:
    """Destroy the caller's session, patient or staff."""
    sessions.destroy(token)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get(
    "/session-data",
    response_model=PatientProfile,
    status_code=status.HTTP_200_OK,
    summary="Current patient profile",
)
async def session_data(current_patient: CurrentPatient, db: DatabaseSession) -> PatientProfile:
    """Profile of the logged-in patient."""
    return await PatientService(db).get_profile(current_patient.patient_id)


@router.get(
    "/staff-session-data",
    response_model=StaffProfile,
    status_code=status.HTTP_200_OK,
    summary="Current staff profile",
)
async def staff_session_data(current_staff: CurrentStaff, db: DatabaseSession) -> StaffProfile:
    """Profile of the logged-in staff member."""
    return await PatientService(db).get_staff_profile(current_staff.staff_id)
