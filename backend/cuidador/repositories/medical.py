"""Medical record repository, always scoped to one patient."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cuidador.models.medical import Medication, VitalSignKind, VitalSignReading


class MedicalRepository:
    """Read access to a patient's medications and vital signs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_medications(self, patient_id: int, active_only: bool = False) -> list[Medication]:
        stmt = select(Medication).where(Medication.patient_id == patient_id)
        if active_only:
            stmt = stmt.where(Medication.is_active.is_(True))
        result = await self.db.execute(stmt.order_by(Medication.name))
        return list(result.scalars().all())

    async def list_vital_signs(
        self, patient_id: int, kind: VitalSignKind, limit: int
    ) -> list[VitalSignReading]:
        result = await self.db.execute(
            select(VitalSignReading)
            .where(VitalSignReading.patient_id == patient_id, VitalSignReading.kind == kind)
            .order_by(VitalSignReading.measured_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
