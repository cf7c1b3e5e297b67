from datetime import date, datetime, timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from medbook.core import config
from medbook.core.errors import SlotQueryError
from medbook.database import get_db
from medbook.routes.common import ensure_database_ready
from medbook.services.slot_query import list_available_slots

router = APIRouter(tags=['slots'])


class TimeSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool

    class Config:
        from_attributes = True


def validate_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='end_date must be on or after start_date.',
        )

    if end_date - start_date >= timedelta(days=config.MAX_SLOT_RANGE_DAYS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Date range cannot exceed {config.MAX_SLOT_RANGE_DAYS} days.',
        )


@router.get('/slots', response_model=list[TimeSlotResponse])
def list_slots(
    doctor_id: UUID = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
):
    validate_date_range(start_date, end_date)

    ensure_database_ready()

    try:
        slots = list_available_slots(db, doctor_id, start_date, end_date)
    except SlotQueryError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.message,
        ) from exc

    return [TimeSlotResponse(**slot.model_dump()) for slot in slots]
