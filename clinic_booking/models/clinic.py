import re
from datetime import UTC, datetime

from pydantic import field_validator, model_validator
from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_minutes(hhmm: str) -> int:
    """'09:30' -> 570 (minutes since midnight)."""
    hour, minute = hhmm.split(":")
    return int(hour) * 60 + int(minute)


def format_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _check_hhmm(value: str) -> str:
    if not _HHMM.match(value):
        raise ValueError(f"expected HH:MM (24-hour), got {value!r}")
    return value


class DaySchedule(SQLModel):
    open: str
    close: str
    is_open: bool = True

    @field_validator("open", "close")
    @classmethod
    def _valid_time(cls, v: str) -> str:
        return _check_hhmm(v)

    @model_validator(mode="after")
    def _open_before_close(self) -> "DaySchedule":
        if self.is_open and to_minutes(self.open) > to_minutes(self.close):
            raise ValueError("open must not be later than close on an open day")
        return self


class BreakTime(SQLModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _valid_time(cls, v: str) -> str:
        return _check_hhmm(v)


class Clinic(SQLModel, table=True):
    __tablename__ = "clinics"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    name_ar: str | None = None
    address: str
    governorate: str = Field(index=True)
    city: str
    phone: str
    email: str | None = None
    latitude: float
    longitude: float
    doctor_id: str
    doctor_name: str
    specializations: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    rating: float = 0.0
    is_promoted: bool = False
    priority_level: int = 0
    is_active: bool = True

    # Online booking configuration; JSON mirrors DaySchedule / BreakTime
    online_booking_enabled: bool = False
    working_hours: dict[str, dict] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    time_slot_duration: int = 30
    break_times: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    accepted_treatments: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=_utc_naive_now, sa_column=Column(DateTime, nullable=False))

    @property
    def booking_link(self) -> str:
        return f"/simplified-booking/{self.id}"


class ClinicPublic(SQLModel):
    id: int
    name: str
    name_ar: str | None = None
    address: str
    governorate: str
    city: str
    phone: str
    email: str | None = None
    latitude: float
    longitude: float
    doctor_id: str
    doctor_name: str
    specializations: list[str]
    rating: float
    is_promoted: bool
    online_booking_enabled: bool
    booking_link: str
    working_hours: dict[str, DaySchedule]
    time_slot_duration: int
    break_times: list[BreakTime]
    accepted_treatments: list[str]


class NearbyClinicPublic(ClinicPublic):
    distance_km: float


class ClinicBookingSettingsUpdate(SQLModel):
    """Partial update of the online booking configuration."""

    online_booking_enabled: bool | None = None
    working_hours: dict[str, DaySchedule] | None = None
    time_slot_duration: int | None = Field(default=None, gt=0)
    break_times: list[BreakTime] | None = None
    accepted_treatments: list[str] | None = None

    @field_validator("working_hours")
    @classmethod
    def _lowercase_weekdays(cls, v: dict[str, DaySchedule] | None) -> dict[str, DaySchedule] | None:
        if v is None:
            return v
        return {day.lower(): schedule for day, schedule in v.items()}
