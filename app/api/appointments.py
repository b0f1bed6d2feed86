"""Mock appointment booking."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.core.database import get_db
from app.models import Appointment
from app.schemas import AppointmentCreate, AppointmentItem, DoctorItem
from app.services.appointments import DOCTORS, TIME_SLOTS, doctor_dict, find_doctor

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _item(a: Appointment) -> AppointmentItem:
    return AppointmentItem(
        id=a.id,
        user_id=a.user_id,
        doctor_id=a.doctor_id,
        doctor_name=a.doctor_name,
        specialty=a.specialty,
        date=a.date,
        time=a.time,
        status=a.status,
        notes=a.notes,
    )


@router.get("/doctors", response_model=list[DoctorItem])
def list_doctors():
    return [DoctorItem(**doctor_dict(d)) for d in DOCTORS]


@router.get("/slots", response_model=list[str])
def list_slots():
    return list(TIME_SLOTS)


@router.post("", response_model=AppointmentItem)
def book_appointment(body: AppointmentCreate, db: Session = Depends(get_db)):
    if not body.user_id.strip():
        raise HTTPException(status_code=400, detail="user_id is required.")
    doctor = find_doctor(body.doctor_id)
    if doctor is None:
        raise HTTPException(status_code=404, detail="Doctor not found.")
    if not doctor.available:
        raise HTTPException(status_code=400, detail=f"{doctor.name} is not accepting appointments.")
    if body.time not in TIME_SLOTS:
        raise HTTPException(status_code=400, detail="Choose one of the available time slots.")
    appointment = Appointment(
        user_id=body.user_id.strip(),
        doctor_id=doctor.id,
        doctor_name=doctor.name,
        specialty=doctor.specialty,
        date=body.date,
        time=body.time,
        status="pending",
        notes=(body.notes or "").strip() or None,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return _item(appointment)


@router.get("", response_model=list[AppointmentItem])
def list_appointments(user_id: str, db: Session = Depends(get_db)):
    stmt = select(Appointment).where(Appointment.user_id == user_id).order_by(Appointment.date.asc())
    return [_item(a) for a in db.exec(stmt).all()]


@router.delete("/{appointment_id}")
def cancel_appointment(appointment_id: str, user_id: str, db: Session = Depends(get_db)):
    appointment = db.get(Appointment, appointment_id)
    if not appointment or appointment.user_id != user_id:
        raise HTTPException(status_code=404, detail="Appointment not found.")
    db.delete(appointment)
    db.commit()
    return {"ok": True, "id": appointment_id}
