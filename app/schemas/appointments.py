import datetime as dt

from pydantic import BaseModel


class DoctorItem(BaseModel):
    id: str
    name: str
    specialty: str
    rating: float
    reviews: int
    available: bool


class AppointmentCreate(BaseModel):
    user_id: str
    doctor_id: str
    date: dt.date
    time: str
    notes: str | None = None


class AppointmentItem(BaseModel):
    id: str
    user_id: str
    doctor_id: str
    doctor_name: str
    specialty: str
    date: dt.date
    time: str
    status: str
    notes: str | None = None
