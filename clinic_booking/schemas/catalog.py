"""Branch and doctor listing schemas."""

from decimal import Decimal

from pydantic import BaseModel, field_serializer


class BranchResponse(BaseModel):
    """Branch listing entry."""

    id: int
    name: str
    location: str | None = None

    model_config = {"from_attributes": True}


class DoctorListResponse(BaseModel):
    """Doctor listing entry."""

    id: int
    employee_id: str
    name: str
    branch_id: int | None = None
    branch_name: str | None = None
    consultation_fee: Decimal | None = None
    specialties: list[str] = []

    model_config = {"from_attributes": True}

    @field_serializer("consultation_fee", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None
