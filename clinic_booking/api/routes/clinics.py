from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_clinic_or_404, get_session, require_non_production
from clinic_booking.models.clinic import (
    Clinic,
    ClinicBookingSettingsUpdate,
    ClinicPublic,
    NearbyClinicPublic,
)
from clinic_booking.services.clinic_service import (
    clinic_to_public,
    get_clinics_by_governorate,
    get_nearby_clinics,
    list_clinics,
    nearby_to_public,
    seed_demo_clinics,
    update_clinic_booking_settings,
)

router = APIRouter(prefix="/clinics", tags=["clinics"])


@router.get("", response_model=list[ClinicPublic])
async def list_all_clinics(
    governorate: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> list[ClinicPublic]:
    clinics = await list_clinics(session, governorate=governorate, limit=limit)
    return [clinic_to_public(c) for c in clinics]


@router.get("/nearby", response_model=list[NearbyClinicPublic])
async def nearby_clinics(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(50, gt=0),
    limit: int = Query(10, ge=1, le=100),
    mode: str = Query("distance", pattern="^(distance|promoted)$"),
    session: AsyncSession = Depends(get_session),
) -> list[NearbyClinicPublic]:
    """Active clinics within radius_km of (lat, lng), each with distance_km."""
    rows = await get_nearby_clinics(session, lat, lng, radius_km=radius_km, limit=limit, mode=mode)
    return [nearby_to_public(c, d) for c, d in rows]


@router.get("/governorate/{governorate}", response_model=list[ClinicPublic])
async def clinics_in_governorate(
    governorate: str,
    session: AsyncSession = Depends(get_session),
) -> list[ClinicPublic]:
    clinics = await get_clinics_by_governorate(session, governorate)
    return [clinic_to_public(c) for c in clinics]


@router.post("/seed", dependencies=[Depends(require_non_production)])
async def seed_clinics(session: AsyncSession = Depends(get_session)) -> dict:
    """Development only: insert demo clinics and treatments into empty tables."""
    inserted = await seed_demo_clinics(session)
    return {"inserted": inserted}


@router.get("/{clinic_id}", response_model=ClinicPublic)
async def get_clinic_by_id(clinic: Clinic = Depends(get_clinic_or_404)) -> ClinicPublic:
    return clinic_to_public(clinic)


@router.patch("/{clinic_id}/booking-settings", response_model=ClinicPublic)
async def update_booking_settings(
    clinic_id: int,
    body: ClinicBookingSettingsUpdate,
    session: AsyncSession = Depends(get_session),
) -> ClinicPublic:
    clinic = await update_clinic_booking_settings(session, clinic_id, body)
    if not clinic:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Clinic not found",
        )
    return clinic_to_public(clinic)
