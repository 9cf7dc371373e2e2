# courtbook/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Base day grid (cached in Redis Sorted Sets)
Level 2: Availability and booking validation (calculated on-the-fly)
"""

from .config import SiteConfig, get_booking_config
from .calculator import calculate_day_slots, generate_slots, slot_datetime
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_slots_cache
from .availability import available_slots, calculate_day_availability
from .conflicts import validate_booking_request

__all__ = [
    "SiteConfig",
    "get_booking_config",
    "calculate_day_slots",
    "generate_slots",
    "slot_datetime",
    "SlotsRedisStore",
    "invalidate_slots_cache",
    "available_slots",
    "calculate_day_availability",
    "validate_booking_request",
]
