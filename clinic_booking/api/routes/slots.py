from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_session
from clinic_booking.api.schemas.booking import AvailableSlotsResponse, SlotInfo
from clinic_booking.services.clinic_service import get_clinic
from clinic_booking.services.slot_service import get_available_slots, weekday_name

router = APIRouter(prefix="/clinics", tags=["slots"])


@router.get("/{clinic_id}/slots", response_model=AvailableSlotsResponse)
async def available_slots(
    clinic_id: int,
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Return every offered slot for the date; taken slots come back with available=false.

    An unknown clinic, disabled online booking, or a closed day yields an empty list.
    """
    slots = await get_available_slots(session, clinic_id, date_param)
    clinic = await get_clinic(session, clinic_id)
    return AvailableSlotsResponse(
        clinic_id=clinic_id,
        date=date_param.isoformat(),
        weekday=weekday_name(date_param),
        slot_duration_minutes=clinic.time_slot_duration if clinic else None,
        slots=[SlotInfo(time=s.time, available=s.available) for s in slots],
    )
