# courtbook/services/slots/availability.py
"""
Level 2: Day availability calculation.

Takes the base grid (Level 1, cached in Redis Sorted Set) and removes:
- slots held by active bookings (pending or confirmed, not past expires_at)
- slots that start within the lead-time buffer or in the past
"""

import logging
from datetime import date, datetime
from typing import Iterable

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from ...exceptions import ConfigurationError
from ...models.tables import ACTIVE_STATUSES
from .calculator import bookable_after, calculate_day_slots, config_slots, slot_datetime
from .config import SiteConfig, get_booking_config
from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def is_active_booking(booking, now: datetime) -> bool:
    """Whether a booking row still holds its slot at ``now``."""
    if booking.status not in ACTIVE_STATUSES:
        return False
    if booking.status == "pending" and booking.expires_at:
        expires_at = booking.expires_at
        if isinstance(expires_at, str):
            expires_at = datetime.fromisoformat(expires_at)
        return now <= expires_at
    return True


def booked_times(bookings: Iterable, target_date: date, now: datetime) -> set[str]:
    """Set of "HH:MM" times on ``target_date`` held by active bookings."""
    date_str = target_date.isoformat()
    return {
        b.time for b in bookings
        if b.date == date_str and is_active_booking(b, now)
    }


def available_slots(
    target_date: date,
    all_slots: list[str],
    bookings: Iterable,
    now: datetime,
    config: SiteConfig,
) -> list[str]:
    """
    Subset of ``all_slots`` that can still be booked, order preserved.

    Pure function of its inputs: same inputs and same ``now`` give the
    same result.
    """
    booked = booked_times(bookings, target_date, now)
    cutoff = bookable_after(config, now)

    return [
        t for t in all_slots
        if t not in booked and slot_datetime(target_date, t, config) > cutoff
    ]


def calculate_day_availability(
    db: Session,
    target_date: date,
    config: SiteConfig | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> dict:
    """
    Calculate bookable slots for a date.

    Returns:
        Dict for SlotsDayResponse: available, slots, booked_slots, message.
    """
    from ..booking_store import BookingStore

    config = config or get_booking_config()
    now = now or datetime.now()

    if not config.is_working_day(target_date):
        return _unavailable(target_date, "Non-working day")

    try:
        grid = config_slots(config)
    except (ConfigurationError, ValueError) as e:
        logger.error(f"Unusable slot grid for {target_date}: {e}")
        grid = []
    if not grid:
        return _unavailable(target_date, "No availability")

    store = BookingStore(db)
    bookings = store.list_bookings_for_date(target_date)

    live_times = _get_live_times(target_date, config, now, redis)
    booked = booked_times(bookings, target_date, now)

    return {
        "date": target_date.isoformat(),
        "available": True,
        "slots": available_slots(target_date, live_times, bookings, now, config),
        "booked_slots": [t for t in grid if t in booked],
        "all_slots": grid,
        "message": None,
    }


def _unavailable(target_date: date, message: str) -> dict:
    return {
        "date": target_date.isoformat(),
        "available": False,
        "slots": [],
        "booked_slots": [],
        "all_slots": [],
        "message": message,
    }


# ── Base times (Level 1 with cache) ─────────────────────────────────────


def _get_live_times(
    target_date: date,
    config: SiteConfig,
    now: datetime,
    redis: Redis | None,
) -> list[str]:
    """Get live base times, using Redis cache when available."""
    if redis is not None:
        store = SlotsRedisStore(redis)
        try:
            cached = store.get_available_slots(target_date, now)
            if cached is not None:
                return cached

            # Cache miss: calculate and store
            slots = calculate_day_slots(target_date, config, now)
            store.store_day_slots(target_date, slots)
            return [time_str for time_str, _ in slots]
        except RedisError as e:
            logger.warning(f"Slots cache unavailable, calculating on the fly: {e}")

    # No Redis: calculate on the fly
    slots = calculate_day_slots(target_date, config, now)
    return [time_str for time_str, _ in slots]
