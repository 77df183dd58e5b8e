from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.enums import TreatmentStatus
from clinic_booking.models.treatment import Treatment, TreatmentPublic


async def list_treatments(session: AsyncSession, active_only: bool = True) -> list[Treatment]:
    q = select(Treatment).order_by(Treatment.name)
    if active_only:
        q = q.where(Treatment.status == TreatmentStatus.ACTIVE)
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_treatment_by_name(session: AsyncSession, name: str) -> Treatment | None:
    """Exact name match against the catalog."""
    result = await session.execute(select(Treatment).where(Treatment.name == name))
    return result.scalar_one_or_none()


def treatment_to_public(t: Treatment) -> TreatmentPublic:
    return TreatmentPublic(
        id=t.id,
        name=t.name,
        description=t.description,
        duration=t.duration,
        price=t.price,
        category=t.category,
        status=t.status,
    )
