from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.config import settings
from clinic_booking.models.appointment import Appointment
from clinic_booking.models.clinic import BreakTime, Clinic, DaySchedule, format_hhmm, to_minutes

# Fixed English names indexed by date.weekday(); never derived from the host locale
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class TimeSlot:
    time: str
    available: bool
    clinic_id: int
    date: date


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def day_schedule_for(clinic: Clinic, d: date) -> DaySchedule | None:
    """Working hours for the weekday of `d`, or None when the clinic is closed that day."""
    raw = clinic.working_hours.get(weekday_name(d))
    if not raw:
        return None
    schedule = DaySchedule.model_validate(raw)
    if not schedule.is_open:
        return None
    return schedule


def _break_bounds(brk: BreakTime, minute_precision: bool) -> tuple[int, int]:
    if minute_precision:
        return to_minutes(brk.start), to_minutes(brk.end)
    # Hour component only: a 12:30-13:45 break blocks [12:00, 13:00)
    return int(brk.start.split(":")[0]) * 60, int(brk.end.split(":")[0]) * 60


def _in_break(minute: int, breaks: list[tuple[int, int]]) -> bool:
    return any(start <= minute < end for start, end in breaks)


def slot_times_for_day(
    schedule: DaySchedule,
    slot_duration: int,
    break_times: list[BreakTime],
    minute_precision: bool | None = None,
) -> list[str]:
    """Generate slot start times ("HH:MM") for one day, ascending.

    Slots are emitted while start + duration <= close, so a trailing remainder shorter
    than one slot is dropped. Starts falling inside [break_start, break_end) are skipped.
    """
    if slot_duration <= 0:
        raise ValueError("slot_duration must be positive")
    if minute_precision is None:
        minute_precision = settings.break_minute_precision
    breaks = [_break_bounds(b, minute_precision) for b in break_times]
    close = to_minutes(schedule.close)
    times: list[str] = []
    cursor = to_minutes(schedule.open)
    while cursor + slot_duration <= close:
        if not _in_break(cursor, breaks):
            times.append(format_hhmm(cursor))
        cursor += slot_duration
    return times


async def get_booked_times(session: AsyncSession, clinic_id: int, d: date) -> set[str]:
    result = await session.execute(
        select(Appointment.time).where(
            Appointment.clinic_id == clinic_id,
            Appointment.date == d,
        )
    )
    return {row[0] for row in result.all()}


async def compute_slots_for_clinic(session: AsyncSession, clinic: Clinic, d: date) -> list[TimeSlot]:
    if not clinic.online_booking_enabled:
        return []
    schedule = day_schedule_for(clinic, d)
    if schedule is None:
        return []
    breaks = [BreakTime.model_validate(b) for b in clinic.break_times or []]
    times = slot_times_for_day(schedule, clinic.time_slot_duration, breaks)
    if not times:
        return []
    booked = await get_booked_times(session, clinic.id, d)
    return [TimeSlot(time=t, available=t not in booked, clinic_id=clinic.id, date=d) for t in times]


async def get_available_slots(session: AsyncSession, clinic_id: int, d: date) -> list[TimeSlot]:
    """All offered slots for the clinic on `d`; taken slots are kept with available=False.

    An unknown clinic, disabled online booking, or a closed weekday all give an empty list.
    Recomputed on every call.
    """
    clinic = await session.get(Clinic, clinic_id)
    if clinic is None:
        return []
    return await compute_slots_for_clinic(session, clinic, d)
