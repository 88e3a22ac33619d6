"""Branch and doctor catalog service."""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.redis_client import CacheManager
from clinic_booking.models.branches import branches
from clinic_booking.models.staff import DOCTOR_ROLE, doctor_specialties, specialties, staff


class CatalogService:
    """Service for the public branch and doctor listings."""

    # Cache TTL in seconds
    CATALOG_CACHE_TTL = 300  # 5 minutes for lists

    BRANCHES_CACHE_KEY = "catalog:branches"

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_doctor_list_cache_key(branch_id: int | None) -> str:
        """Generate cache key for a doctor list."""
        return f"catalog:doctors:{branch_id if branch_id is not None else 'all'}"

    async def list_branches(self, db: AsyncSession) -> list[dict]:
        """List all branches ordered by name."""
        if self.cache:
            cached = self.cache.get_json(self.BRANCHES_CACHE_KEY)
            if cached is not None:
                return cached

        result = await db.execute(select(branches).order_by(branches.c.name))
        branch_list = [dict(row) for row in result.mappings().all()]

        if self.cache:
            self.cache.set_json(self.BRANCHES_CACHE_KEY, branch_list, ttl=self.CATALOG_CACHE_TTL)

        return branch_list

    async def list_doctors(self, db: AsyncSession, branch_id: int | None = None) -> list[dict]:
        """
        List active doctors with their branch and specialties.

        Args:
            db: Database session
            branch_id: Only doctors of this branch

        Returns:
            Doctors ordered by name, each with a ``specialties`` list
        """
        cache_key = self._get_doctor_list_cache_key(branch_id)
        if self.cache:
            cached = self.cache.get_json(cache_key)
            if cached is not None:
                return cached

        conditions = [staff.c.role == DOCTOR_ROLE, staff.c.is_active.is_(True)]
        if branch_id is not None:
            conditions.append(staff.c.branch_id == branch_id)

        doctors_query = (
            select(
                staff.c.id,
                staff.c.employee_id,
                staff.c.name,
                staff.c.branch_id,
                staff.c.consultation_fee,
                branches.c.name.label("branch_name"),
            )
            .select_from(staff.outerjoin(branches, staff.c.branch_id == branches.c.id))
            .where(and_(*conditions))
            .order_by(staff.c.name)
        )
        result = await db.execute(doctors_query)
        doctor_list = [dict(row) for row in result.mappings().all()]

        if doctor_list:
            specialties_query = (
                select(doctor_specialties.c.doctor_id, specialties.c.name)
                .join(specialties, doctor_specialties.c.specialty_id == specialties.c.id)
                .where(doctor_specialties.c.doctor_id.in_([d["id"] for d in doctor_list]))
                .order_by(specialties.c.name)
            )
            specialty_rows = (await db.execute(specialties_query)).all()

            by_doctor: dict[int, list[str]] = {}
            for doctor_id, name in specialty_rows:
                by_doctor.setdefault(doctor_id, []).append(name)
            for doctor in doctor_list:
                doctor["specialties"] = by_doctor.get(doctor["id"], [])

        if self.cache:
            self.cache.set_json(cache_key, doctor_list, ttl=self.CATALOG_CACHE_TTL)

        return doctor_list
