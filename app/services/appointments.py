"""Mock doctor directory and booking rules."""
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Doctor:
    id: str
    name: str
    specialty: str
    rating: float
    reviews: int
    available: bool


DOCTORS: tuple[Doctor, ...] = (
    Doctor("1", "Dr. Sarah Johnson", "General Practitioner", 4.8, 124, True),
    Doctor("2", "Dr. Michael Chen", "Cardiologist", 4.9, 98, True),
    Doctor("3", "Dr. Emily Rodriguez", "Dermatologist", 4.7, 156, False),
    Doctor("4", "Dr. James Wilson", "Orthopedist", 4.6, 87, True),
)

TIME_SLOTS: tuple[str, ...] = (
    "9:00 AM",
    "9:30 AM",
    "10:00 AM",
    "10:30 AM",
    "11:00 AM",
    "2:00 PM",
    "2:30 PM",
    "3:00 PM",
    "3:30 PM",
    "4:00 PM",
)


def find_doctor(doctor_id: str) -> Doctor | None:
    for d in DOCTORS:
        if d.id == doctor_id:
            return d
    return None


def doctor_dict(doctor: Doctor) -> dict:
    return asdict(doctor)
