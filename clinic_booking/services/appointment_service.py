from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.models.appointment import Appointment, AppointmentPublic


async def list_clinic_appointments(
    session: AsyncSession, clinic_id: int, on_date: date | None = None
) -> list[Appointment]:
    q = (
        select(Appointment)
        .where(Appointment.clinic_id == clinic_id)
        .order_by(Appointment.date, Appointment.time)
    )
    if on_date:
        q = q.where(Appointment.date == on_date)
    result = await session.execute(q)
    return list(result.scalars().all())


async def cancel_appointment(session: AsyncSession, clinic_id: int, appointment_id: int) -> bool:
    """Delete the appointment so its slot becomes bookable again."""
    result = await session.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.clinic_id == clinic_id,
        )
    )
    appointment = result.scalar_one_or_none()
    if not appointment:
        return False
    await session.delete(appointment)
    await session.flush()
    return True


def appointment_to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic(
        id=a.id,
        clinic_id=a.clinic_id,
        patient_id=a.patient_id,
        patient_name=a.patient_name,
        date=a.date,
        time=a.time,
        duration=a.duration,
        treatment=a.treatment,
        doctor_id=a.doctor_id,
        doctor_name=a.doctor_name,
        status=a.status,
        source=a.source,
        notes=a.notes,
        reminder=a.reminder,
        created_at=a.created_at,
    )
