from clinic_booking.models.appointment import Appointment, AppointmentPublic, OnlineBookingCreate
from clinic_booking.models.clinic import (
    BreakTime,
    Clinic,
    ClinicBookingSettingsUpdate,
    ClinicPublic,
    DaySchedule,
    NearbyClinicPublic,
)
from clinic_booking.models.enums import (
    AppointmentSource,
    AppointmentStatus,
    PatientPriority,
    PatientStatus,
    TreatmentStatus,
)
from clinic_booking.models.patient import Patient, PatientPublic
from clinic_booking.models.treatment import Treatment, TreatmentPublic

__all__ = [
    "Appointment",
    "AppointmentPublic",
    "AppointmentSource",
    "AppointmentStatus",
    "BreakTime",
    "Clinic",
    "ClinicBookingSettingsUpdate",
    "ClinicPublic",
    "DaySchedule",
    "NearbyClinicPublic",
    "OnlineBookingCreate",
    "Patient",
    "PatientPriority",
    "PatientPublic",
    "PatientStatus",
    "Treatment",
    "TreatmentPublic",
    "TreatmentStatus",
]
