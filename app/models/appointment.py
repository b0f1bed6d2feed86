"""Mock appointment bookings."""
import datetime as dt
import uuid

from sqlmodel import Field, SQLModel

from .analysis import utcnow


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    doctor_id: str
    doctor_name: str
    specialty: str
    date: dt.date = Field(index=True)
    time: str  # slot label, e.g. "10:00 AM"
    status: str = "pending"  # pending | confirmed | completed
    notes: str | None = None
    created_at: dt.datetime = Field(default_factory=utcnow)
