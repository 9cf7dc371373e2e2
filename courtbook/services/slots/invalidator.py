# courtbook/services/slots/invalidator.py
"""
Cache invalidation for the base slot grid.

Triggers:
✓ Site config changed (opening hours, grid step, working days, lead time)
  → invalidate all dates

Does NOT trigger:
✗ Booking created/declined/deleted (Level 2 subtracts bookings on the fly)
"""

import logging
from datetime import date, timedelta

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)

# Config fields that change the shape of the base grid
GRID_FIELDS = frozenset({
    "opening_start",
    "opening_end",
    "slot_duration_minutes",
    "working_days",
    "min_advance_minutes",
})


def invalidate_slots_cache(
    redis: Redis | None,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached grids.

    Args:
        redis: Redis client (None → nothing cached, nothing to do)
        dates: Specific dates, or None to invalidate every cached date

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0
    try:
        return SlotsRedisStore(redis).delete_day_slots(dates)
    except RedisError as e:
        logger.error(f"Failed to invalidate slots cache: {e}")
        return 0


def config_change_affects_grid(changes: dict) -> bool:
    return bool(GRID_FIELDS & set(changes))


def get_affected_dates(date_start: date, date_end: date) -> list[date]:
    """List of dates in range [date_start, date_end]."""
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)

    return dates
