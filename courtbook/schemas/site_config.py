# courtbook/schemas/site_config.py

from typing import Optional
from pydantic import BaseModel, Field


class SiteConfigRead(BaseModel):
    court_name: str
    opening_start: str
    opening_end: str
    slot_duration_minutes: int
    allowed_durations: list[int]
    working_days: list[str]
    max_hours_per_person_per_day: float
    enable_recurring_booking: bool
    max_recurring_weeks: int
    max_booking_days_ahead: int
    min_advance_minutes: int
    price_per_hour: float
    night_price_per_hour: Optional[float] = None
    night_starts_at: str
    night_ends_at: str
    currency: str
    require_payment_confirmation: bool
    payment_timeout_minutes: int
    payment_info: dict[str, str] = {}


class SiteConfigUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""
    court_name: Optional[str] = None
    opening_start: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    opening_end: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    slot_duration_minutes: Optional[int] = None
    allowed_durations: Optional[list[int]] = None
    working_days: Optional[list[str]] = None
    max_hours_per_person_per_day: Optional[float] = None
    enable_recurring_booking: Optional[bool] = None
    max_recurring_weeks: Optional[int] = None
    max_booking_days_ahead: Optional[int] = None
    min_advance_minutes: Optional[int] = None
    price_per_hour: Optional[float] = None
    night_price_per_hour: Optional[float] = None
    night_starts_at: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    night_ends_at: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    currency: Optional[str] = None
    require_payment_confirmation: Optional[bool] = None
    payment_timeout_minutes: Optional[int] = None
    payment_info: Optional[dict[str, str]] = None
