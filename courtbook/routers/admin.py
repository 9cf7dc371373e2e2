# courtbook/routers/admin.py
"""
Admin endpoints. Every route requires the X-Admin-Token header.
"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_now, get_redis, get_site_config, get_store, require_admin
from ..schemas.bookings import (
    BookingRead,
    BookingResponse,
    BookingStats,
    BookingSummary,
    StatusChangeRequest,
)
from ..schemas.site_config import SiteConfigRead, SiteConfigUpdate
from ..schemas.slots import SlotDebugEntry, SlotsGridResponse, SlotsInvalidateRequest
from ..services.booking_store import BookingStore
from ..services.bookings import (
    change_booking_status,
    delete_booking,
    delete_booking_group,
    booking_stats,
    expire_pending_bookings,
    summarize_group,
)
from ..services.config_store import ConfigStore
from ..services.slots import SiteConfig, SlotsRedisStore, calculate_day_slots
from ..services.slots.invalidator import (
    config_change_affects_grid,
    get_affected_dates,
    invalidate_slots_cache,
)
from ..exceptions import BookingNotFound

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

# fields that may be explicitly cleared with null
_NULLABLE_CONFIG_FIELDS = {"night_price_per_hour"}


# ──────────────────────────────────────────────────────────────────────────────
# Bookings
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/bookings", response_model=list[BookingRead])
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    target_date: Optional[date] = Query(None, alias="date"),
    phone: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return BookingStore(db).list_bookings(status=status_filter, target_date=target_date, phone=phone)


@router.get("/bookings/{booking_number}", response_model=BookingSummary)
def get_booking_group(
    booking_number: str,
    db: Session = Depends(get_db),
    config: SiteConfig = Depends(get_site_config),
):
    rows = BookingStore(db).find_by_booking_number(booking_number)
    if not rows:
        raise BookingNotFound("Booking not found")
    return summarize_group(rows, config)


@router.get("/stats", response_model=BookingStats)
def get_stats(db: Session = Depends(get_db)):
    return BookingStats(**booking_stats(db))


@router.post("/confirm-booking", response_model=BookingResponse)
def confirm_booking(
    data: StatusChangeRequest,
    db: Session = Depends(get_db),
    config: SiteConfig = Depends(get_site_config),
    now: datetime = Depends(get_now),
):
    summary = change_booking_status(
        db,
        booking_number=data.booking_number,
        action=data.action,
        now=now,
        config=config,
        booking_id=data.booking_id,
    )
    return BookingResponse(success=True, booking=summary, message=f"Booking {summary['status']}")


@router.post("/expire")
def run_expiry_sweep(
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return {"expired": expire_pending_bookings(db, now)}


@router.delete("/booking/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking_row(id: int, db: Session = Depends(get_db)):
    delete_booking(db, id)


@router.delete("/booking-group/{booking_number}")
def delete_group(booking_number: str, db: Session = Depends(get_db)):
    return {"booking_number": booking_number, "deleted": delete_booking_group(db, booking_number)}


# ──────────────────────────────────────────────────────────────────────────────
# Site configuration
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/config", response_model=SiteConfigRead)
def get_config(config: SiteConfig = Depends(get_site_config)):
    return SiteConfigRead(**config.to_dict())


@router.put("/config", response_model=SiteConfigRead)
def update_config(
    data: SiteConfigUpdate,
    store: ConfigStore = Depends(get_store),
    redis: Redis | None = Depends(get_redis),
):
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_CONFIG_FIELDS
    }
    new_config = store.update(changes)

    if config_change_affects_grid(changes):
        invalidate_slots_cache(redis)

    return SiteConfigRead(**new_config.to_dict())


# ──────────────────────────────────────────────────────────────────────────────
# Slots cache (debug)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/slots/grid", response_model=SlotsGridResponse)
def get_slots_grid(
    target_date: date = Query(..., alias="date"),
    force_recalc: bool = False,
    config: SiteConfig = Depends(get_site_config),
    now: datetime = Depends(get_now),
    redis: Redis | None = Depends(get_redis),
):
    """Get sorted set debug view for a date."""
    store = SlotsRedisStore(redis) if redis is not None else None

    cached = False
    slot_data: list[tuple[str, float]] | None = None

    if store is not None and not force_recalc:
        try:
            slot_data = store.get_all_slots_with_scores(target_date)
        except RedisError as e:
            logger.warning(f"Slots cache read failed: {e}")
            slot_data = None
        cached = slot_data is not None

    if slot_data is None:
        slot_data = calculate_day_slots(target_date, config, now)
        if store is not None:
            try:
                store.store_day_slots(target_date, slot_data)
            except RedisError as e:
                logger.warning(f"Failed to cache grid for {target_date}: {e}")

    debug_slots = [
        SlotDebugEntry(time=time_str, expires_at=datetime.fromtimestamp(expire_ts))
        for time_str, expire_ts in slot_data
    ]

    return SlotsGridResponse(
        date=target_date,
        slots=debug_slots,
        total_slots=len(debug_slots),
        cached=cached,
    )


@router.post("/slots/invalidate")
def invalidate_slots(
    data: SlotsInvalidateRequest,
    redis: Redis | None = Depends(get_redis),
):
    """Manually invalidate slots cache (all dates, or an inclusive range)."""
    dates = None
    if data.date_start:
        dates = get_affected_dates(data.date_start, data.date_end or data.date_start)

    deleted = invalidate_slots_cache(redis, dates)

    return {
        "deleted_keys": deleted,
        "dates": [d.isoformat() for d in dates] if dates else "all",
    }
