from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.patient import Patient, PatientPublic


async def list_clinic_patients(session: AsyncSession, clinic_id: int) -> list[Patient]:
    result = await session.execute(
        select(Patient).where(Patient.clinic_id == clinic_id).order_by(Patient.created_at, Patient.id)
    )
    return list(result.scalars().all())


def patient_to_public(p: Patient) -> PatientPublic:
    return PatientPublic.model_validate(p)
