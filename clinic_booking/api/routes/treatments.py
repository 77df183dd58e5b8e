from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_session
from clinic_booking.models.treatment import TreatmentPublic
from clinic_booking.services.treatment_service import list_treatments, treatment_to_public

router = APIRouter(prefix="/treatments", tags=["treatments"])


@router.get("", response_model=list[TreatmentPublic])
async def treatment_catalog(
    include_inactive: bool = Query(False),
    session: AsyncSession = Depends(get_session),
) -> list[TreatmentPublic]:
    treatments = await list_treatments(session, active_only=not include_inactive)
    return [treatment_to_public(t) for t in treatments]
