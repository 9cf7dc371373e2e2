# courtbook/services/slots/conflicts.py
"""
Booking request validation.

Checks run in a fixed order and the first failure wins:

1. required fields          5. consecutive slots on the grid
2. working day              6. slots not already booked
3. start time not passed    7. customer daily hour cap
4. allowed duration         8. recurrence limits (2–7 repeated per week)

A request that passes becomes a BookingGroup; nothing is persisted here.
"""

import secrets
import string
from datetime import date, datetime, timedelta
from typing import Callable, Iterable
from uuid import uuid4

from ...exceptions import BookingValidationError, SlotConflictError
from ..booking_group import BookingGroup, BookingRequest, BookingSlot, normalize_phone
from .availability import booked_times, is_active_booking
from .calculator import bookable_after, config_slots, slot_datetime
from .config import SiteConfig, minutes_to_time_str, time_str_to_minutes, weekday_name

BookingsForDate = Callable[[date], Iterable]

_BOOKING_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def new_booking_number() -> str:
    return "".join(secrets.choice(_BOOKING_NUMBER_ALPHABET) for _ in range(8))


def validate_booking_request(
    request: BookingRequest,
    config: SiteConfig,
    now: datetime,
    bookings_for_date: BookingsForDate,
    customer_bookings_for_date: BookingsForDate,
) -> BookingGroup:
    """
    Validate a booking request and build the group to persist.

    Args:
        request: Customer submission
        config: Active site configuration
        now: Current local time
        bookings_for_date: date → bookings on that date
        customer_bookings_for_date: date → this customer's bookings on that date

    Raises:
        BookingValidationError: bad input or a broken business rule
        SlotConflictError: a slot in the run is already held
    """
    # Step 1: Required fields
    name = (request.name or "").strip()
    phone = normalize_phone(request.phone)
    if not name or not phone or not request.date or not request.time:
        raise BookingValidationError("All booking details are required", code="missing_data")

    try:
        first_date = date.fromisoformat(request.date)
        time_str_to_minutes(request.time)
    except ValueError:
        raise BookingValidationError(
            "Date must be YYYY-MM-DD and time HH:MM", code="missing_data"
        ) from None

    duration = config.slot_duration_minutes if request.duration is None else request.duration

    def check(booking_date: date, first: bool) -> list[str]:
        return _validate_date(
            request=request,
            booking_date=booking_date,
            duration=duration,
            phone=phone,
            config=config,
            now=now,
            bookings=list(bookings_for_date(booking_date)),
            customer_bookings=list(customer_bookings_for_date(booking_date)),
            check_horizon=first,
        )

    # Steps 2–7 for the requested date
    run = check(first_date, first=True)

    # Step 8: Recurrence limits, then steps 2–7 for every later week
    weeks = 1
    if request.is_recurring:
        if not config.enable_recurring_booking:
            raise BookingValidationError(
                "Recurring bookings are disabled", code="recurring_disabled"
            )
        weeks = request.recurring_weeks
        if weeks < 1 or weeks > config.max_recurring_weeks:
            raise BookingValidationError(
                f"Recurring bookings are limited to {config.max_recurring_weeks} weeks",
                code="too_many_weeks",
            )

    dates = [first_date + timedelta(days=7 * k) for k in range(weeks)]
    for booking_date in dates[1:]:
        check(booking_date, first=False)

    grid = config_slots(config)
    start_index = grid.index(run[0])
    step = config.slot_duration_minutes
    slots = [
        BookingSlot(
            time=t,
            end_time=minutes_to_time_str(time_str_to_minutes(t) + step),
            slot_index=start_index + i,
        )
        for i, t in enumerate(run)
    ]

    total_price = round(
        sum(config.rate_for_slot(t) * config.slot_hours for t in run) * len(dates), 2
    )

    if config.require_payment_confirmation:
        status = "pending"
        expires_at = now + timedelta(minutes=config.payment_timeout_minutes)
    else:
        status = "confirmed"
        expires_at = None

    return BookingGroup(
        group_id=uuid4().hex,
        booking_number=new_booking_number(),
        name=name,
        phone=phone,
        dates=dates,
        slots=slots,
        duration=duration,
        status=status,
        created_at=now,
        total_price=total_price,
        expires_at=expires_at,
        is_recurring=weeks > 1,
        recurring_weeks=weeks,
    )


def _validate_date(
    request: BookingRequest,
    booking_date: date,
    duration: int,
    phone: str,
    config: SiteConfig,
    now: datetime,
    bookings: list,
    customer_bookings: list,
    check_horizon: bool,
) -> list[str]:
    """Checks 2–7 for a single date. Returns the slot run."""
    # Step 2: Working day
    if not config.is_working_day(booking_date):
        raise BookingValidationError(
            f"Bookings are not available on {weekday_name(booking_date).capitalize()}",
            code="non_working_day",
        )

    # Step 3: Start time not passed (lead-time buffer included)
    start_dt = slot_datetime(booking_date, request.time, config)
    if start_dt <= bookable_after(config, now):
        raise BookingValidationError("This time has already passed", code="time_passed")

    if check_horizon:
        horizon = now.date() + timedelta(days=config.max_booking_days_ahead)
        if booking_date > horizon:
            raise BookingValidationError(
                f"Bookings open {config.max_booking_days_ahead} days ahead",
                code="too_far_ahead",
            )

    # Step 4: Duration
    if duration not in config.allowed_durations:
        raise BookingValidationError(
            f"Duration must be one of {', '.join(str(d) for d in config.allowed_durations)} minutes",
            code="invalid_duration",
        )

    # Step 5: Consecutive run on the grid
    grid = config_slots(config)
    if request.time not in grid:
        raise BookingValidationError(
            f"{request.time} is not a bookable start time", code="invalid_time"
        )
    slots_needed = duration // config.slot_duration_minutes
    start_index = grid.index(request.time)
    if start_index + slots_needed > len(grid):
        raise BookingValidationError(
            "Not enough consecutive slots for this duration", code="not_enough_slots"
        )
    run = grid[start_index:start_index + slots_needed]

    # Step 6: Every slot in the run is free
    booked = booked_times(bookings, booking_date, now)
    for t in run:
        if t in booked:
            raise SlotConflictError(
                f"The {t} slot on {booking_date.isoformat()} is already booked",
                slot_date=booking_date.isoformat(),
                slot_time=t,
            )

    # Step 7: Daily hour cap (each group counted once)
    group_minutes: dict[str, int] = {}
    for b in customer_bookings:
        if b.phone == phone and b.date == booking_date.isoformat() and is_active_booking(b, now):
            group_minutes[b.group_id] = b.duration
    used_hours = sum(group_minutes.values()) / 60
    if used_hours + duration / 60 > config.max_hours_per_person_per_day:
        raise BookingValidationError(
            f"Daily limit exceeded ({config.max_hours_per_person_per_day:g} hours per day)",
            code="daily_limit",
        )

    return run
