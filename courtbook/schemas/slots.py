# courtbook/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field


class SlotsDayResponse(BaseModel):
    """Bookable slots for a day (Level 2)."""
    date: date
    available: bool
    slots: list[str] = Field(description="Bookable start times, in grid order")
    booked_slots: list[str] = Field(description="Times held by active bookings")
    all_slots: list[str] = Field(description="Full grid for the day")
    message: Optional[str] = None

    model_config = {"from_attributes": True}


class SlotDebugEntry(BaseModel):
    time: str
    expires_at: datetime


class SlotsGridResponse(BaseModel):
    """Base grid view (for debugging/admin)."""
    date: date
    slots: list[SlotDebugEntry]
    total_slots: int
    cached: bool


class SlotsInvalidateRequest(BaseModel):
    date_start: Optional[date] = None
    date_end: Optional[date] = None
