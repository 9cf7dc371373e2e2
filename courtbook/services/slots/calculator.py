# courtbook/services/slots/calculator.py
"""
Level 1: Base slot grid calculation.

Produces per-slot data:
  (time_str "HH:MM", expire_ts float)

expire_ts = (slot_datetime − min_advance_minutes).timestamp()
Redis filters with ZRANGEBYSCORE {now_ts} +inf, so dead slots drop automatically.

Contains:
✓ opening hours (overnight schedules wrap past midnight)
✓ working days
✓ min_advance_minutes (baked into expire_ts)

Does NOT contain:
✗ Bookings (checked at Level 2)
"""

from datetime import date, datetime, timedelta

from .config import (
    MINUTES_PER_DAY,
    SiteConfig,
    get_booking_config,
    minutes_to_time_str,
    time_str_to_minutes,
)


def generate_slots(opening_start: str, opening_end: str, slot_duration_minutes: int) -> list[str]:
    """
    Ordered "HH:MM" grid covering [opening_start, opening_end).

    If end <= start the schedule is overnight: the end bound moves to the
    next day and produced values wrap modulo 24h.
    """
    if slot_duration_minutes <= 0:
        raise ValueError("slot_duration_minutes must be positive")

    start_min = time_str_to_minutes(opening_start)
    end_min = time_str_to_minutes(opening_end)
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY

    return [
        minutes_to_time_str(t)
        for t in range(start_min, end_min, slot_duration_minutes)
    ]


def config_slots(config: SiteConfig) -> list[str]:
    return generate_slots(config.opening_start, config.opening_end, config.slot_duration_minutes)


def slot_datetime(target_date: date, time_str: str, config: SiteConfig) -> datetime:
    """
    Calendar timestamp of a slot on the schedule of ``target_date``.

    On an overnight schedule a slot earlier than the opening time belongs to
    the next calendar day (22:00–03:00 → "01:00" is tomorrow 01:00).
    """
    minutes = time_str_to_minutes(time_str)
    dt = datetime.combine(target_date, datetime.min.time()) + timedelta(minutes=minutes)
    if config.is_overnight and minutes < config.start_minutes:
        dt += timedelta(days=1)
    return dt


def bookable_after(config: SiteConfig, now: datetime) -> datetime:
    """Slots must start strictly after this moment."""
    return now + timedelta(minutes=config.min_advance_minutes)


def calculate_day_slots(
    target_date: date,
    config: SiteConfig | None = None,
    now: datetime | None = None,
) -> list[tuple[str, float]]:
    """
    Calculate the live base grid for a date.

    Returns:
        List of (time_str, expire_ts) pairs. Empty list = no slots.
    """
    config = config or get_booking_config()
    now = now or datetime.now()
    now_ts = now.timestamp()

    if not config.is_working_day(target_date):
        return []

    lead = timedelta(minutes=config.min_advance_minutes)
    slots: list[tuple[str, float]] = []

    for time_str in config_slots(config):
        expire_ts = (slot_datetime(target_date, time_str, config) - lead).timestamp()
        if expire_ts > now_ts:
            slots.append((time_str, expire_ts))

    return slots
