from enum import Enum


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AppointmentSource(str, Enum):
    MANUAL = "manual"
    ONLINE_BOOKING = "online_booking"


class PatientStatus(str, Enum):
    ACTIVE = "active"
    IN_TREATMENT = "in_treatment"
    COMPLETED = "completed"
    URGENT = "urgent"


class PatientPriority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


class TreatmentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
