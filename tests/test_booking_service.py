"""Online booking: re-validation, failure taxonomy, created records, and the insert race."""
import asyncio
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from clinic_booking.models import (
    Appointment,
    AppointmentSource,
    AppointmentStatus,
    Clinic,
    OnlineBookingCreate,
    Patient,
    PatientStatus,
    Treatment,
)
from clinic_booking.services import booking_service
from clinic_booking.services.booking_service import (
    ONLINE_BOOKING_NOTE,
    BookingFailure,
    SlotUnavailableReason,
    create_online_booking,
)
from clinic_booking.services.slot_service import TimeSlot, get_available_slots
from conftest import weekly_hours

MONDAY = date(2024, 1, 22)
FRIDAY = date(2024, 1, 26)


def _request(clinic_id: int, time: str = "10:00", d: date = MONDAY, **overrides) -> OnlineBookingCreate:
    fields = {
        "clinic_id": clinic_id,
        "patient_name": "Fatima Ali",
        "patient_phone": "+964 750 987 6543",
        "patient_email": "fatima@example.com",
        "date": d,
        "time": time,
        "treatment": "Teeth Cleaning",
    }
    fields.update(overrides)
    return OnlineBookingCreate(**fields)


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_successful_booking_creates_patient_and_appointment(session, clinic, treatments):
    outcome = await create_online_booking(session, _request(clinic.id))
    await session.commit()

    assert outcome.ok
    assert outcome.failure is None
    appointment = outcome.appointment
    assert appointment.time == "10:00"
    assert appointment.date == MONDAY
    assert appointment.duration == 45
    assert appointment.doctor_id == "doc1"
    assert appointment.doctor_name == "Dr. Sara Ahmed"
    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.source == AppointmentSource.ONLINE_BOOKING
    assert appointment.reminder is True
    assert appointment.patient_email == "fatima@example.com"

    patient = await session.get(Patient, appointment.patient_id)
    assert patient.clinic_id == clinic.id
    assert patient.age == 0
    assert patient.address == ""
    assert patient.medical_history == []
    assert patient.total_visits == 1
    assert patient.total_spent == 0
    assert patient.notes == ONLINE_BOOKING_NOTE
    assert patient.status == PatientStatus.ACTIVE
    assert patient.next_appointment == MONDAY


@pytest.mark.asyncio
async def test_booked_slot_becomes_unavailable(session, clinic, treatments):
    outcome = await create_online_booking(session, _request(clinic.id, time="15:30"))
    await session.commit()
    assert outcome.ok

    slots = await get_available_slots(session, clinic.id, MONDAY)

    assert {s.time: s.available for s in slots}["15:30"] is False


@pytest.mark.asyncio
async def test_unknown_treatment_falls_back_to_default_duration(session, clinic, treatments):
    outcome = await create_online_booking(session, _request(clinic.id, treatment="Whitening"))

    assert outcome.ok
    assert outcome.appointment.duration == 30


@pytest.mark.asyncio
async def test_time_inside_break_is_not_offered(session, clinic):
    outcome = await create_online_booking(session, _request(clinic.id, time="12:15"))

    assert not outcome.ok
    assert outcome.failure == BookingFailure.SLOT_UNAVAILABLE
    assert outcome.reason == SlotUnavailableReason.NOT_OFFERED
    assert await _count(session, Patient) == 0


@pytest.mark.asyncio
async def test_misaligned_time_is_not_offered(session, clinic):
    outcome = await create_online_booking(session, _request(clinic.id, time="10:10"))

    assert outcome.reason == SlotUnavailableReason.NOT_OFFERED


@pytest.mark.asyncio
async def test_second_booking_for_same_slot_fails_as_taken(session, clinic):
    first = await create_online_booking(session, _request(clinic.id))
    await session.commit()
    second = await create_online_booking(session, _request(clinic.id, patient_name="Ahmed"))

    assert first.ok
    assert not second.ok
    assert second.failure == BookingFailure.SLOT_UNAVAILABLE
    assert second.reason == SlotUnavailableReason.TAKEN
    assert await _count(session, Appointment) == 1
    assert await _count(session, Patient) == 1


@pytest.mark.asyncio
async def test_unknown_clinic(session):
    outcome = await create_online_booking(session, _request(4242))

    assert outcome.failure == BookingFailure.CLINIC_NOT_FOUND
    assert outcome.reason is None


@pytest.mark.asyncio
async def test_booking_disabled(session, make_clinic):
    clinic = await make_clinic(online_booking_enabled=False)

    outcome = await create_online_booking(session, _request(clinic.id))

    assert outcome.failure == BookingFailure.BOOKING_DISABLED
    assert await _count(session, Patient) == 0


@pytest.mark.asyncio
async def test_closed_day(session, clinic):
    outcome = await create_online_booking(session, _request(clinic.id, d=FRIDAY))

    assert outcome.failure == BookingFailure.CLOSED_DAY


@pytest.mark.asyncio
async def test_lost_insert_race_leaves_no_partial_booking(session, clinic, monkeypatch):
    clinic_id = clinic.id
    first = await create_online_booking(session, _request(clinic_id))
    await session.commit()
    assert first.ok

    # Simulate a concurrent request that read the slots before the first booking landed
    async def stale_slots(_session, _clinic, d):
        return [TimeSlot(time="10:00", available=True, clinic_id=clinic_id, date=d)]

    monkeypatch.setattr(booking_service, "compute_slots_for_clinic", stale_slots)

    second = await create_online_booking(session, _request(clinic_id, patient_name="Ahmed"))

    assert not second.ok
    assert second.failure == BookingFailure.SLOT_UNAVAILABLE
    assert second.reason == SlotUnavailableReason.RACE_LOST
    assert await _count(session, Appointment) == 1
    assert await _count(session, Patient) == 1


@pytest.mark.asyncio
async def test_lost_race_keeps_callers_other_pending_writes(session, clinic, monkeypatch):
    clinic_id = clinic.id
    await create_online_booking(session, _request(clinic_id))
    await session.commit()

    async def stale_slots(_session, _clinic, d):
        return [TimeSlot(time="10:00", available=True, clinic_id=clinic_id, date=d)]

    monkeypatch.setattr(booking_service, "compute_slots_for_clinic", stale_slots)
    session.add(Treatment(name="Root Canal", duration=90, price=150000, category="endodontic"))

    outcome = await create_online_booking(session, _request(clinic_id, patient_name="Ahmed"))
    await session.commit()

    assert outcome.reason == SlotUnavailableReason.RACE_LOST
    assert await _count(session, Treatment) == 1
    assert await _count(session, Patient) == 1


@pytest.mark.asyncio
async def test_zero_duration_treatment_falls_back_to_default(session, clinic):
    session.add(Treatment(name="Consultation", duration=0))
    await session.commit()

    outcome = await create_online_booking(session, _request(clinic.id, treatment="Consultation"))

    assert outcome.ok
    assert outcome.appointment.duration == 30


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_bookings_for_one_slot_yield_one_appointment(file_engine, monkeypatch):
    maker = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as setup:
        clinic = Clinic(
            name="Erbil Smile Clinic",
            address="100m Street, Erbil",
            governorate="Erbil",
            city="Erbil",
            phone="+964 750 111 2222",
            latitude=36.19,
            longitude=44.01,
            doctor_id="doc2",
            doctor_name="Dr. Karwan Aziz",
            online_booking_enabled=True,
            working_hours=weekly_hours(),
            time_slot_duration=30,
            break_times=[{"start": "12:00", "end": "13:00"}],
        )
        setup.add(clinic)
        await setup.commit()
        clinic_id = clinic.id

    # Both requests see the slot free before either inserts
    barrier = asyncio.Barrier(2)
    real_compute = booking_service.compute_slots_for_clinic

    async def compute_then_wait(session, clinic, d):
        slots = await real_compute(session, clinic, d)
        await barrier.wait()
        return slots

    monkeypatch.setattr(booking_service, "compute_slots_for_clinic", compute_then_wait)

    async def book(name: str):
        async with maker() as s:
            outcome = await create_online_booking(s, _request(clinic_id, patient_name=name))
            await s.commit()
            return outcome

    outcomes = await asyncio.gather(book("Fatima Ali"), book("Ahmed Hassan"))

    assert sorted(o.ok for o in outcomes) == [False, True]
    loser = next(o for o in outcomes if not o.ok)
    assert loser.failure == BookingFailure.SLOT_UNAVAILABLE
    assert loser.reason == SlotUnavailableReason.RACE_LOST
    async with maker() as check:
        assert await _count(check, Appointment) == 1
        assert await _count(check, Patient) == 1
