"""Patient and staff account service."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.exceptions import (
    AuthenticationException,
    NotFoundException,
    PersistenceException,
    ValidationException,
)
from clinic_booking.core.security import (
    dummy_verify_password,
    get_password_hash,
    verify_password,
)
from clinic_booking.models.branches import branches
from clinic_booking.models.patients import patients
from clinic_booking.models.staff import staff
from clinic_booking.schemas.auth import PatientProfile, RegisterRequest, StaffProfile
from clinic_booking.services.identifier_service import IdentifierGenerator

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"


class PatientService:
    """Service for patient registration, login and profiles."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def register(self, data: RegisterRequest) -> PatientProfile:
        """
        Create a patient account with a generated patient number.

        Raises:
            ValidationException: If the email is already registered
            PersistenceException: If the insert fails for another reason
        """
        existing = await self.db.execute(
            select(patients.c.id).where(patients.c.email == data.email.lower())
        )
        if existing.first():
            raise ValidationException("Email already registered")

        try:
            patient_number = await IdentifierGenerator(self.db).next_patient_number()
            result = await self.db.execute(
                patients.insert()
                .values(
                    patient_number=patient_number,
                    name=data.name,
                    email=data.email.lower(),
                    phone=data.phone,
                    password_hash=get_password_hash(data.password),
                    created_at=datetime.now(UTC),
                )
                .returning(patients)
            )
            row = result.mappings().one()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # Lost a race with a concurrent registration of the same email
            raise ValidationException("Email already registered") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("patient_registration_failed", error=str(e))
            raise PersistenceException() from e

        logger.info("patient_registered", patient_id=row["id"], patient_number=patient_number)
        return PatientProfile.model_validate(dict(row))

    async def authenticate(self, email: str, password: str) -> PatientProfile:
        """
        Check patient credentials.

        Unknown email, inactive account and wrong password all fail with the
        same message.
        """
        result = await self.db.execute(select(patients).where(patients.c.email == email.lower()))
        row = result.mappings().first()

        # Exactly one hash check runs on every path
        if row is None:
            dummy_verify_password()
            password_ok = False
        else:
            password_ok = verify_password(password, row["password_hash"])

        if not password_ok or not row["is_active"]:
            logger.info("login_failed", scope="patient")
            raise AuthenticationException(INVALID_CREDENTIALS)

        return PatientProfile.model_validate(dict(row))

    async def authenticate_staff(self, employee_id: str) -> StaffProfile:
        """Look up an active staff member by employee ID."""
        profile = await self._staff_profile(staff.c.employee_id == employee_id)
        if profile is None:
            logger.info("login_failed", scope="staff")
            raise AuthenticationException(INVALID_CREDENTIALS)
        return profile

    async def get_profile(self, patient_id: int) -> PatientProfile:
        """Get an active patient's profile."""
        result = await self.db.execute(
            select(patients).where(
                and_(patients.c.id == patient_id, patients.c.is_active.is_(True))
            )
        )
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Patient not found")
        return PatientProfile.model_validate(dict(row))

    async def get_staff_profile(self, staff_id: int) -> StaffProfile:
        """Get an active staff member's profile."""
        profile = await self._staff_profile(staff.c.id == staff_id)
        if profile is None:
            raise NotFoundException("Staff member not found")
        return profile

    async def _staff_profile(self, condition) -> StaffProfile | None:
        stmt = (
            select(
                staff.c.id,
                staff.c.employee_id,
                staff.c.name,
                staff.c.role,
                staff.c.branch_id,
                branches.c.name.label("branch_name"),
            )
            .select_from(staff.outerjoin(branches, staff.c.branch_id == branches.c.id))
            .where(and_(condition, staff.c.is_active.is_(True)))
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return StaffProfile.model_validate(dict(row)) if row else None
