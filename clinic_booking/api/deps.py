from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.config import settings
from clinic_booking.core.db import get_session
from clinic_booking.models.clinic import Clinic
from clinic_booking.services.clinic_service import get_clinic

__all__ = ["get_session", "get_clinic_or_404", "require_non_production"]


async def get_clinic_or_404(
    clinic_id: int,
    session: AsyncSession = Depends(get_session),
) -> Clinic:
    clinic = await get_clinic(session, clinic_id)
    if not clinic:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Clinic not found",
        )
    return clinic


def require_non_production() -> None:
    """Guard for development-only endpoints."""
    if settings.is_production:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )
