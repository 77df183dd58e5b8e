import datetime as dt

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from clinic_booking.models.clinic import _utc_naive_now
from clinic_booking.models.enums import PatientPriority, PatientStatus


class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: int | None = Field(default=None, primary_key=True)
    clinic_id: int = Field(foreign_key="clinics.id", ondelete="CASCADE", index=True)
    name: str
    age: int = 0
    phone: str
    email: str = ""
    address: str = ""
    last_visit: dt.date | None = None
    next_appointment: dt.date | None = None
    treatment: str = ""
    status: PatientStatus = PatientStatus.ACTIVE
    priority: PatientPriority = PatientPriority.NORMAL
    total_visits: int = 0
    total_spent: float = 0
    notes: str = ""
    medical_history: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: dt.datetime = Field(default_factory=_utc_naive_now, sa_column=Column(DateTime, nullable=False))


class PatientPublic(SQLModel):
    id: int
    clinic_id: int
    name: str
    age: int
    phone: str
    email: str
    address: str
    last_visit: dt.date | None = None
    next_appointment: dt.date | None = None
    treatment: str
    status: PatientStatus
    priority: PatientPriority
    total_visits: int
    total_spent: float
    notes: str
    medical_history: list[str]
