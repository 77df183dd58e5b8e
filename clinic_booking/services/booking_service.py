"""Online booking: converts a patient's slot selection into a patient record plus appointment."""
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.config import settings
from clinic_booking.models.appointment import Appointment, OnlineBookingCreate
from clinic_booking.models.clinic import Clinic
from clinic_booking.models.enums import (
    AppointmentSource,
    AppointmentStatus,
    PatientPriority,
    PatientStatus,
)
from clinic_booking.models.patient import Patient
from clinic_booking.services.slot_service import compute_slots_for_clinic, day_schedule_for
from clinic_booking.services.treatment_service import get_treatment_by_name

logger = logging.getLogger(__name__)

ONLINE_BOOKING_NOTE = "Online booking"


class BookingFailure(str, Enum):
    CLINIC_NOT_FOUND = "clinic_not_found"
    BOOKING_DISABLED = "booking_disabled"
    CLOSED_DAY = "closed_day"
    SLOT_UNAVAILABLE = "slot_unavailable"


class SlotUnavailableReason(str, Enum):
    NOT_OFFERED = "not_offered"  # outside hours, inside a break, or not a slot start
    TAKEN = "taken"  # already booked when checked
    RACE_LOST = "race_lost"  # another booking won the insert


@dataclass
class BookingOutcome:
    appointment: Appointment | None = None
    failure: BookingFailure | None = None
    reason: SlotUnavailableReason | None = None

    @property
    def ok(self) -> bool:
        return self.appointment is not None


def _fail(failure: BookingFailure, reason: SlotUnavailableReason | None = None) -> BookingOutcome:
    return BookingOutcome(failure=failure, reason=reason)


async def _resolve_duration(session: AsyncSession, treatment_name: str) -> int:
    treatment = await get_treatment_by_name(session, treatment_name)
    if treatment is None or not treatment.duration:
        logger.warning(
            "No usable duration for treatment %r; using default of %d minutes",
            treatment_name,
            settings.default_treatment_duration_minutes,
        )
        return settings.default_treatment_duration_minutes
    return treatment.duration


async def create_online_booking(session: AsyncSession, data: OnlineBookingCreate) -> BookingOutcome:
    clinic = await session.get(Clinic, data.clinic_id)
    if clinic is None:
        return _fail(BookingFailure.CLINIC_NOT_FOUND)
    if not clinic.online_booking_enabled:
        return _fail(BookingFailure.BOOKING_DISABLED)
    if day_schedule_for(clinic, data.date) is None:
        return _fail(BookingFailure.CLOSED_DAY)

    # Re-validate against fresh slots; the client may have read them a while ago
    slots = await compute_slots_for_clinic(session, clinic, data.date)
    selected = next((s for s in slots if s.time == data.time), None)
    if selected is None:
        return _fail(BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.NOT_OFFERED)
    if not selected.available:
        return _fail(BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.TAKEN)

    duration = await _resolve_duration(session, data.treatment)
    clinic_id = clinic.id
    patient = Patient(
        clinic_id=clinic_id,
        name=data.patient_name,
        age=0,
        phone=data.patient_phone,
        email=data.patient_email,
        address="",
        last_visit=data.date,
        next_appointment=data.date,
        treatment=data.treatment,
        status=PatientStatus.ACTIVE,
        priority=PatientPriority.NORMAL,
        total_visits=1,
        total_spent=0,
        notes=ONLINE_BOOKING_NOTE,
        medical_history=[],
    )
    try:
        # Savepoint scope: a lost slot undoes the patient row, not the caller's other writes
        async with session.begin_nested():
            session.add(patient)
            await session.flush()
            appointment = Appointment(
                clinic_id=clinic_id,
                patient_id=patient.id,
                patient_name=data.patient_name,
                date=data.date,
                time=data.time,
                duration=duration,
                treatment=data.treatment,
                doctor_id=clinic.doctor_id,
                doctor_name=clinic.doctor_name,
                status=AppointmentStatus.SCHEDULED,
                source=AppointmentSource.ONLINE_BOOKING,
                reminder=True,
                patient_phone=data.patient_phone,
                patient_email=data.patient_email,
            )
            session.add(appointment)
            await session.flush()
    except IntegrityError:
        logger.info("Booking race lost for clinic %s on %s at %s", clinic_id, data.date, data.time)
        return _fail(BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.RACE_LOST)
    await session.refresh(appointment)
    logger.info(
        "Online booking created: appointment %s for clinic %s on %s at %s",
        appointment.id,
        clinic_id,
        data.date,
        data.time,
    )
    return BookingOutcome(appointment=appointment)
