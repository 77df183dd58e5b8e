import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.api.deps import get_clinic_or_404, get_session
from clinic_booking.api.schemas.booking import OnlineBookingRequest
from clinic_booking.models.appointment import AppointmentPublic, OnlineBookingCreate
from clinic_booking.models.clinic import Clinic
from clinic_booking.models.patient import PatientPublic
from clinic_booking.services.appointment_service import (
    appointment_to_public,
    cancel_appointment,
    list_clinic_appointments,
)
from clinic_booking.services.booking_service import (
    BookingFailure,
    BookingOutcome,
    SlotUnavailableReason,
    create_online_booking,
)
from clinic_booking.services.email_service import send_booking_confirmation_email
from clinic_booking.services.patient_service import list_clinic_patients, patient_to_public

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/clinics", tags=["appointments"])

_FAILURE_RESPONSES: dict[tuple[BookingFailure, SlotUnavailableReason | None], tuple[int, str]] = {
    (BookingFailure.CLINIC_NOT_FOUND, None): (status.HTTP_404_NOT_FOUND, "Clinic not found"),
    (BookingFailure.BOOKING_DISABLED, None): (
        status.HTTP_403_FORBIDDEN,
        "This clinic does not accept online bookings",
    ),
    (BookingFailure.CLOSED_DAY, None): (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "The clinic is closed on the requested day",
    ),
    (BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.NOT_OFFERED): (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "The requested time is not a bookable slot for this day",
    ),
    (BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.TAKEN): (
        status.HTTP_409_CONFLICT,
        "The requested slot is already booked",
    ),
    (BookingFailure.SLOT_UNAVAILABLE, SlotUnavailableReason.RACE_LOST): (
        status.HTTP_409_CONFLICT,
        "The requested slot was booked by someone else while your request was processed",
    ),
}


def _rejection(outcome: BookingOutcome) -> HTTPException:
    status_code, message = _FAILURE_RESPONSES[(outcome.failure, outcome.reason)]
    return HTTPException(
        status_code=status_code,
        detail={
            "message": message,
            "failure": outcome.failure.value,
            "reason": outcome.reason.value if outcome.reason else None,
        },
    )


@router.post(
    "/{clinic_id}/bookings",
    response_model=AppointmentPublic,
    status_code=status.HTTP_201_CREATED,
)
async def book_online(
    clinic_id: int,
    body: OnlineBookingRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    data = OnlineBookingCreate(clinic_id=clinic_id, **body.model_dump())
    outcome = await create_online_booking(session, data)
    if not outcome.ok:
        logger.info(
            "Online booking rejected for clinic %s on %s at %s: %s/%s",
            clinic_id,
            body.date,
            body.time,
            outcome.failure.value,
            outcome.reason.value if outcome.reason else "-",
        )
        raise _rejection(outcome)
    appointment = outcome.appointment
    clinic = await session.get(Clinic, clinic_id)
    # Send confirmation email in background (uses sync SMTP)
    background_tasks.add_task(
        send_booking_confirmation_email,
        to_email=str(body.patient_email),
        patient_name=body.patient_name,
        clinic_name=clinic.name,
        doctor_name=appointment.doctor_name,
        booking_date=appointment.date,
        booking_time=appointment.time,
        duration_minutes=appointment.duration,
        treatment=appointment.treatment,
    )
    return appointment_to_public(appointment)


@router.get("/{clinic_id}/appointments", response_model=list[AppointmentPublic])
async def list_appointments(
    date_param: date | None = Query(None, alias="date"),
    clinic: Clinic = Depends(get_clinic_or_404),
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_clinic_appointments(session, clinic.id, on_date=date_param)
    return [appointment_to_public(a) for a in appointments]


@router.delete("/{clinic_id}/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_clinic_appointment(
    clinic_id: int,
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    ok = await cancel_appointment(session, clinic_id, appointment_id)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found for this clinic",
        )


@router.get("/{clinic_id}/patients", response_model=list[PatientPublic])
async def list_patients(
    clinic: Clinic = Depends(get_clinic_or_404),
    session: AsyncSession = Depends(get_session),
) -> list[PatientPublic]:
    patients = await list_clinic_patients(session, clinic.id)
    return [patient_to_public(p) for p in patients]
