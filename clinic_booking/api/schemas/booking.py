import datetime as dt

from pydantic import BaseModel, EmailStr, Field


class SlotInfo(BaseModel):
    time: str  # HH:MM
    available: bool


class AvailableSlotsResponse(BaseModel):
    clinic_id: int
    date: str  # YYYY-MM-DD
    weekday: str
    slot_duration_minutes: int | None = None  # None when the clinic does not exist
    slots: list[SlotInfo]


class OnlineBookingRequest(BaseModel):
    patient_name: str = Field(min_length=1)
    patient_phone: str = Field(min_length=1)
    patient_email: EmailStr
    date: dt.date
    time: str = Field(pattern=r"^\d{2}:\d{2}$")
    treatment: str
