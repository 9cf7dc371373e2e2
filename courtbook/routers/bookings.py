# courtbook/routers/bookings.py
"""
Public booking endpoints.

POST /api/book          - Submit a booking request
POST /api/check-booking - Look up own bookings by number/phone + name
"""

from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_now, get_site_config
from ..schemas.bookings import (
    BookingCreate,
    BookingResponse,
    CheckBookingRequest,
    CheckBookingResponse,
)
from ..services.booking_group import BookingRequest
from ..services.bookings import create_booking, find_customer_bookings
from ..services.slots import SiteConfig

router = APIRouter(prefix="/api", tags=["bookings"])


@router.post("/book", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def book(
    data: BookingCreate,
    db: Session = Depends(get_db),
    config: SiteConfig = Depends(get_site_config),
    now: datetime = Depends(get_now),
):
    summary = create_booking(db, BookingRequest(**data.model_dump()), config, now)

    if summary["status"] == "pending":
        message = (
            f"Booking received. Complete payment within "
            f"{config.payment_timeout_minutes} minutes to confirm it."
        )
    else:
        message = "Booking confirmed."

    return BookingResponse(success=True, booking=summary, message=message)


@router.post("/check-booking", response_model=CheckBookingResponse)
def check_booking(
    data: CheckBookingRequest,
    db: Session = Depends(get_db),
    config: SiteConfig = Depends(get_site_config),
):
    bookings = find_customer_bookings(db, data.booking_number, data.name, config)
    return CheckBookingResponse(success=True, bookings=bookings)
