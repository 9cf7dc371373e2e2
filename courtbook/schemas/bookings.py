# courtbook/schemas/bookings.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.booking_group import normalize_phone


class BookingCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    date: Optional[str] = Field(None, description="Date in YYYY-MM-DD format")
    time: Optional[str] = Field(None, description="Start slot in HH:MM format")
    duration: Optional[int] = Field(None, description="Minutes, a multiple of the slot grid")
    is_recurring: bool = False
    recurring_weeks: int = 1

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else normalize_phone(v)


class BookingWeek(BaseModel):
    date: str
    status: str
    booking_ids: list[int]


class BookingSummary(BaseModel):
    booking_number: str
    group_id: str
    name: str
    phone: str
    dates: list[str]
    start_time: str
    end_time: str
    duration: int
    total_price: float
    currency: str
    status: str
    created_at: str
    expires_at: Optional[str] = None
    is_recurring: bool
    recurring_weeks: int
    weeks: list[BookingWeek]
    payment_info: Optional[dict[str, str]] = None


class BookingResponse(BaseModel):
    success: bool
    booking: Optional[BookingSummary] = None
    message: Optional[str] = None


class BookingRead(BaseModel):
    id: int
    group_id: str
    booking_number: str

    name: str
    phone: str

    date: str
    time: str
    duration: int
    total_slots: int
    slot_index: int
    start_time: str
    end_time: str
    week_number: int

    price: float
    status: str

    created_at: str
    updated_at: str
    expires_at: Optional[str] = None
    confirmed_at: Optional[str] = None
    declined_at: Optional[str] = None
    expired_at: Optional[str] = None

    is_recurring: bool
    recurring_weeks: int

    model_config = {"from_attributes": True}


class CheckBookingRequest(BaseModel):
    booking_number: str = Field(description="Booking number or phone number")
    name: str


class CheckBookingResponse(BaseModel):
    success: bool
    bookings: list[BookingSummary] = []


class StatusChangeRequest(BaseModel):
    booking_number: str
    action: str = Field(description="confirm | decline")
    booking_id: Optional[int] = Field(None, description="Limit the action to this row's week")


class BookingStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    declined: int
    expired: int
    total_revenue: float
