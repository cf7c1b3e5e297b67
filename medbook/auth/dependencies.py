from uuid import UUID

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from medbook.auth import jwt_handler
from medbook.database import SessionLocal
from medbook.models.appointment import Appointment
from medbook.models.user import User

security = HTTPBearer()

ADMIN_ROLE = "admin"
DOCTOR_ROLE = "doctor"
PATIENT_ROLE = "patient"


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> User:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except Exception as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Invalid token subject") from exc

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if user is not None:
            db.expunge(user)
    finally:
        db.close()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def can_act_for(user: User, doctor_id: UUID, patient_id: UUID) -> bool:
    if user.role == ADMIN_ROLE:
        return True
    if user.role == DOCTOR_ROLE:
        return user.id == doctor_id
    if user.role == PATIENT_ROLE:
        return user.id == patient_id
    return False


def ensure_can_access_appointment(user: User, appointment: Appointment) -> None:
    if not can_act_for(user, appointment.doctor_id, appointment.patient_id):
        raise HTTPException(status_code=403, detail="Not allowed to access this booking.")
