import logging
import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.clinic import (
    Clinic,
    ClinicBookingSettingsUpdate,
    ClinicPublic,
    NearbyClinicPublic,
)
from clinic_booking.models.enums import TreatmentStatus
from clinic_booking.models.treatment import Treatment

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _ranked(q):
    return q.order_by(
        Clinic.is_promoted.desc(),
        Clinic.priority_level.desc(),
        Clinic.rating.desc(),
        Clinic.id,
    )


async def get_clinic(session: AsyncSession, clinic_id: int) -> Clinic | None:
    return await session.get(Clinic, clinic_id)


async def list_clinics(
    session: AsyncSession, governorate: str | None = None, limit: int = 20
) -> list[Clinic]:
    q = select(Clinic).where(Clinic.is_active == True)  # noqa: E712
    if governorate:
        q = q.where(func.lower(Clinic.governorate) == governorate.lower())
    result = await session.execute(_ranked(q).limit(limit))
    return list(result.scalars().all())


async def get_clinics_by_governorate(session: AsyncSession, governorate: str) -> list[Clinic]:
    q = select(Clinic).where(
        Clinic.is_active == True,  # noqa: E712
        func.lower(Clinic.governorate) == governorate.lower(),
    )
    result = await session.execute(_ranked(q))
    return list(result.scalars().all())


async def get_nearby_clinics(
    session: AsyncSession,
    lat: float,
    lng: float,
    radius_km: float = 50,
    limit: int = 10,
    mode: str = "distance",
) -> list[tuple[Clinic, float]]:
    """Active clinics within radius_km of (lat, lng) with their distance.

    mode="distance" sorts nearest first; mode="promoted" puts promoted clinics first,
    nearest first within each group.
    """
    result = await session.execute(select(Clinic).where(Clinic.is_active == True))  # noqa: E712
    within: list[tuple[Clinic, float]] = []
    for clinic in result.scalars().all():
        d = haversine_km(lat, lng, clinic.latitude, clinic.longitude)
        if d <= radius_km:
            within.append((clinic, d))
    if mode == "promoted":
        within.sort(key=lambda cd: (not cd[0].is_promoted, cd[1]))
    else:
        within.sort(key=lambda cd: cd[1])
    return within[:limit]


async def update_clinic_booking_settings(
    session: AsyncSession, clinic_id: int, data: ClinicBookingSettingsUpdate
) -> Clinic | None:
    clinic = await session.get(Clinic, clinic_id)
    if clinic is None:
        return None
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in updates.items():
        setattr(clinic, key, value)
    session.add(clinic)
    await session.flush()
    await session.refresh(clinic)
    logger.info("Booking settings updated for clinic %s: %s", clinic_id, sorted(updates))
    return clinic


def clinic_to_public(c: Clinic) -> ClinicPublic:
    return ClinicPublic(
        id=c.id,
        name=c.name,
        name_ar=c.name_ar,
        address=c.address,
        governorate=c.governorate,
        city=c.city,
        phone=c.phone,
        email=c.email,
        latitude=c.latitude,
        longitude=c.longitude,
        doctor_id=c.doctor_id,
        doctor_name=c.doctor_name,
        specializations=c.specializations or [],
        rating=c.rating,
        is_promoted=c.is_promoted,
        online_booking_enabled=c.online_booking_enabled,
        booking_link=c.booking_link,
        working_hours=c.working_hours or {},
        time_slot_duration=c.time_slot_duration,
        break_times=c.break_times or [],
        accepted_treatments=c.accepted_treatments or [],
    )


def nearby_to_public(c: Clinic, distance_km: float) -> NearbyClinicPublic:
    return NearbyClinicPublic(**clinic_to_public(c).model_dump(), distance_km=round(distance_km, 2))


def _week(open_: str, close: str, closed_days: tuple[str, ...] = ("friday",)) -> dict[str, dict]:
    days = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    return {
        day: (
            {"open": "00:00", "close": "00:00", "is_open": False}
            if day in closed_days
            else {"open": open_, "close": close, "is_open": True}
        )
        for day in days
    }


DEMO_TREATMENTS = [
    {"name": "Teeth Cleaning", "description": "Full cleaning and scaling", "duration": 45, "price": 50000, "category": "preventive"},
    {"name": "Dental Filling", "description": "Composite filling", "duration": 60, "price": 75000, "category": "restorative"},
    {"name": "Root Canal", "description": "Endodontic treatment", "duration": 90, "price": 150000, "category": "endodontic"},
    {"name": "General Checkup", "description": "Examination and consultation", "duration": 30, "price": 25000, "category": "preventive"},
]

DEMO_CLINICS = [
    {
        "name": "Baghdad Dental Center",
        "name_ar": "مركز بغداد لطب الأسنان",
        "address": "Karrada, Baghdad",
        "governorate": "Baghdad",
        "city": "Baghdad",
        "phone": "+964 770 123 4567",
        "email": "info@baghdaddental.iq",
        "latitude": 33.3000,
        "longitude": 44.4200,
        "doctor_id": "doc1",
        "doctor_name": "Dr. Sara Ahmed",
        "specializations": ["Endodontics", "Teeth Cleaning", "Cosmetic Fillings"],
        "rating": 4.8,
        "is_promoted": True,
        "priority_level": 2,
        "online_booking_enabled": True,
        "working_hours": {**_week("09:00", "18:00"), "saturday": {"open": "10:00", "close": "14:00", "is_open": True}},
        "time_slot_duration": 30,
        "break_times": [{"start": "12:00", "end": "13:00"}],
        "accepted_treatments": ["Teeth Cleaning", "Dental Filling", "General Checkup"],
    },
    {
        "name": "Al-Mansour Dental Clinic",
        "name_ar": "عيادة المنصور لطب الأسنان",
        "address": "Al-Mansour, Baghdad",
        "governorate": "Baghdad",
        "city": "Baghdad",
        "phone": "+964 750 987 6543",
        "latitude": 33.3250,
        "longitude": 44.3450,
        "doctor_id": "doc2",
        "doctor_name": "Dr. Ahmed Mohammed",
        "specializations": ["Oral Surgery", "Implants"],
        "rating": 4.5,
        "online_booking_enabled": True,
        "working_hours": _week("10:00", "20:00"),
        "time_slot_duration": 45,
        "break_times": [{"start": "14:00", "end": "15:00"}],
        "accepted_treatments": ["Root Canal", "General Checkup"],
    },
    {
        "name": "Basra Smile Clinic",
        "name_ar": "عيادة ابتسامة البصرة",
        "address": "Al-Ashar, Basra",
        "governorate": "Basra",
        "city": "Basra",
        "phone": "+964 780 555 1212",
        "latitude": 30.5085,
        "longitude": 47.7804,
        "doctor_id": "doc3",
        "doctor_name": "Dr. Ali Hassan",
        "specializations": ["Orthodontics"],
        "rating": 4.2,
        "online_booking_enabled": False,
        "working_hours": _week("09:00", "17:00"),
        "time_slot_duration": 30,
        "accepted_treatments": ["General Checkup"],
    },
]


async def seed_demo_clinics(session: AsyncSession) -> int:
    """Insert demo clinics and the treatment catalog when the tables are empty.

    Returns the number of clinics inserted.
    """
    existing_treatments = await session.execute(select(func.count()).select_from(Treatment))
    if existing_treatments.scalar_one() == 0:
        for t in DEMO_TREATMENTS:
            session.add(Treatment(status=TreatmentStatus.ACTIVE, **t))
    existing_clinics = await session.execute(select(func.count()).select_from(Clinic))
    if existing_clinics.scalar_one() > 0:
        await session.flush()
        return 0
    for c in DEMO_CLINICS:
        session.add(Clinic(**c))
    await session.flush()
    logger.info("Seeded %d demo clinics", len(DEMO_CLINICS))
    return len(DEMO_CLINICS)
