"""Authentication and session schemas."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field


class PatientActor(BaseModel):
    """Authenticated patient."""

    kind: Literal["patient"] = "patient"
    patient_id: int


class StaffActor(BaseModel):
    """Authenticated staff member."""

    kind: Literal["staff"] = "staff"
    staff_id: int
    role: str
    branch_id: int | None = None

    @property
    def is_doctor(self) -> bool:
        """Whether this staff member acts as a doctor."""
        return self.role == "doctor"


Actor = Annotated[PatientActor | StaffActor, Field(discriminator="kind")]


class LoginRequest(BaseModel):
    """Patient login request."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class StaffLoginRequest(BaseModel):
    """Staff login request."""

    employee_id: str = Field(..., min_length=1, max_length=50)


class RegisterRequest(BaseModel):
    """Patient registration request."""

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    password: str = Field(..., min_length=8, max_length=72)


class PatientProfile(BaseModel):
    """Patient profile returned to the patient."""

    id: int
    patient_number: str
    name: str
    email: str
    phone: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class StaffProfile(BaseModel):
    """Staff profile returned to the staff member."""

    id: int
    employee_id: str
    name: str
    role: str
    branch_id: int | None = None
    branch_name: str | None = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Patient login/registration response."""

    success: bool = True
    session_token: str
    patient: PatientProfile


class StaffLoginResponse(BaseModel):
    """Staff login response."""

    success: bool = True
    session_token: str
    staff: StaffProfile
