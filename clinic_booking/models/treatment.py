from sqlmodel import Field, SQLModel

from clinic_booking.models.enums import TreatmentStatus


class Treatment(SQLModel, table=True):
    __tablename__ = "treatments"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    description: str = ""
    duration: int = Field(default=30, gt=0)  # minutes
    price: float = 0
    category: str = ""
    status: TreatmentStatus = TreatmentStatus.ACTIVE


class TreatmentPublic(SQLModel):
    id: int
    name: str
    description: str
    duration: int
    price: float
    category: str
    status: TreatmentStatus
