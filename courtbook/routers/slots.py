# courtbook/routers/slots.py
"""
Slots API endpoints.

GET /api/slots/{date} - Bookable slots for a day
"""

from datetime import date, datetime
from fastapi import APIRouter, Depends
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_now, get_redis, get_site_config
from ..schemas.slots import SlotsDayResponse
from ..services.slots import SiteConfig, calculate_day_availability


router = APIRouter(prefix="/api/slots", tags=["slots"])


@router.get("/{target_date}", response_model=SlotsDayResponse)
def get_slots_day(
    target_date: date,
    db: Session = Depends(get_db),
    config: SiteConfig = Depends(get_site_config),
    now: datetime = Depends(get_now),
    redis: Redis | None = Depends(get_redis),
):
    """Get bookable time slots for a specific day."""
    result = calculate_day_availability(
        db=db,
        target_date=target_date,
        config=config,
        now=now,
        redis=redis,
    )
    return SlotsDayResponse(**result)
