import datetime as dt

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from clinic_booking.models.clinic import _utc_naive_now
from clinic_booking.models.enums import AppointmentSource, AppointmentStatus


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    # At most one appointment per clinic slot; the insert itself is the availability check
    __table_args__ = (UniqueConstraint("clinic_id", "date", "time", name="uq_appointments_clinic_slot"),)

    id: int | None = Field(default=None, primary_key=True)
    clinic_id: int = Field(foreign_key="clinics.id", ondelete="CASCADE", index=True)
    patient_id: int = Field(foreign_key="patients.id", ondelete="CASCADE", index=True)
    patient_name: str
    date: dt.date = Field(index=True)
    time: str = Field(max_length=5)  # HH:MM, equal to a generated slot start
    duration: int = 30
    treatment: str = ""
    doctor_id: str
    doctor_name: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    source: AppointmentSource = AppointmentSource.MANUAL
    notes: str | None = None
    reminder: bool = False
    patient_phone: str | None = None
    patient_email: str | None = None
    created_at: dt.datetime = Field(default_factory=_utc_naive_now, sa_column=Column(DateTime, nullable=False))


class AppointmentPublic(SQLModel):
    id: int
    clinic_id: int
    patient_id: int
    patient_name: str
    date: dt.date
    time: str
    duration: int
    treatment: str
    doctor_id: str
    doctor_name: str
    status: AppointmentStatus
    source: AppointmentSource
    notes: str | None = None
    reminder: bool
    created_at: dt.datetime


class OnlineBookingCreate(SQLModel):
    clinic_id: int
    patient_name: str
    patient_phone: str
    patient_email: str
    date: dt.date
    time: str
    treatment: str
