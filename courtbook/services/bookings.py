"""
Booking use cases.

create → validate against a fresh snapshot, insert the group atomically
status → pending → confirmed | declined | expired, other states are terminal
lookup → customer "check my booking" by booking number or phone + name
"""

import json
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import BookingNotFound, BookingValidationError, InvalidStatusTransition
from ..models.tables import Bookings
from .booking_group import BookingRequest, normalize_phone
from .booking_store import BookingStore
from .events import emit_event
from .slots.config import SiteConfig
from .slots.conflicts import new_booking_number, validate_booking_request

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "declined", "expired"}),
    "confirmed": frozenset(),
    "declined": frozenset(),
    "expired": frozenset(),
}

ACTIONS = {
    "confirm": "confirmed",
    "decline": "declined",
}


def check_transition(current: str, target: str) -> None:
    if target not in STATUS_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransition(f"Cannot change a {current} booking to {target}")


# ──────────────────────────────────────────────────────────────────────────────
# Create
# ──────────────────────────────────────────────────────────────────────────────

def create_booking(
    db: Session,
    request: BookingRequest,
    config: SiteConfig,
    now: datetime,
) -> dict:
    """
    Validate and persist a booking request.

    Steps:
    1. Expire overdue pending rows so their slots are free again
    2. Validate against the current bookings snapshot
    3. Draw a booking number not used by another group
    4. Insert all rows of the group in one transaction
    5. Emit booking_created event

    Returns:
        Booking summary (see summarize_group)
    """
    store = BookingStore(db)
    store.expire_overdue(now)

    phone = normalize_phone(request.phone)
    group = validate_booking_request(
        request,
        config,
        now,
        bookings_for_date=store.list_bookings_for_date,
        customer_bookings_for_date=lambda d: store.list_bookings_for_customer_and_date(phone, d),
    )

    # a number names exactly one group
    while store.find_by_booking_number(group.booking_number):
        group.booking_number = new_booking_number()

    rows = store.insert_bookings(group)

    logger.info(
        f"Booking created: number={group.booking_number}, group={group.group_id}, "
        f"dates={[d.isoformat() for d in group.dates]}, "
        f"time={group.start_time}-{group.end_time}, status={group.status}"
    )

    emit_event("booking_created", {
        "booking_number": group.booking_number,
        "group_id": group.group_id,
        "status": group.status,
    })

    return summarize_group(rows, config)


# ──────────────────────────────────────────────────────────────────────────────
# Status changes
# ──────────────────────────────────────────────────────────────────────────────

def change_booking_status(
    db: Session,
    booking_number: str,
    action: str,
    now: datetime,
    config: SiteConfig,
    booking_id: Optional[int] = None,
) -> dict:
    """
    Apply an admin action to a booking group or to one row of it.

    Without ``booking_id`` the action applies to every pending row of the
    group; with it, to the week (date) that row belongs to.
    """
    target = ACTIONS.get(action)
    if target is None:
        raise BookingValidationError(f"Unknown action: {action}", code="invalid_action")

    store = BookingStore(db)
    store.expire_overdue(now)

    rows = store.find_by_booking_number(booking_number)
    if not rows:
        raise BookingNotFound("Booking not found")

    if booking_id is not None:
        row = next((r for r in rows if r.id == booking_id), None)
        if row is None:
            raise BookingNotFound("Booking not found")
        check_transition(row.status, target)
        # a week of a multi-slot booking is every row of the group on that date
        store.update_booking_status(target, now, group_id=row.group_id, on_date=row.date)
    else:
        pending = [r for r in rows if r.status == "pending"]
        if not pending:
            check_transition(rows[0].status, target)
        store.update_booking_status(target, now, group_id=rows[0].group_id)

    logger.info(f"Booking {booking_number} → {target} (row={booking_id or 'all'})")

    emit_event(f"booking_{target}", {
        "booking_number": booking_number,
        "booking_id": booking_id,
    })

    return summarize_group(store.find_by_booking_number(booking_number), config)


def booking_stats(db: Session) -> dict:
    return BookingStore(db).stats()


def expire_pending_bookings(db: Session, now: datetime) -> int:
    """pending → expired for overdue rows. Returns the number of rows changed."""
    expired = BookingStore(db).expire_overdue(now)
    if expired:
        logger.info(f"Expired {expired} pending booking rows")
    return expired


# ──────────────────────────────────────────────────────────────────────────────
# Delete
# ──────────────────────────────────────────────────────────────────────────────

def delete_booking(db: Session, booking_id: int) -> None:
    store = BookingStore(db)
    row = store.get(booking_id)
    if not row:
        raise BookingNotFound("Booking not found")

    booking_number = row.booking_number
    store.delete_booking(booking_id)

    logger.info(f"Booking row {booking_id} of {booking_number} deleted")
    emit_event("booking_deleted", {"booking_number": booking_number, "booking_id": booking_id})


def delete_booking_group(db: Session, booking_number: str) -> int:
    deleted = BookingStore(db).delete_group(booking_number)
    if not deleted:
        raise BookingNotFound("Booking not found")

    logger.info(f"Booking group {booking_number} deleted ({deleted} rows)")
    emit_event("booking_deleted", {"booking_number": booking_number})
    return deleted


# ──────────────────────────────────────────────────────────────────────────────
# Lookup
# ──────────────────────────────────────────────────────────────────────────────

def find_customer_bookings(
    db: Session,
    reference: str,
    name: str,
    config: SiteConfig,
) -> list[dict]:
    """
    Find a customer's bookings by booking number or phone.

    The name must match (case-insensitive) so a guessed number alone does
    not reveal someone else's booking.
    """
    reference = (reference or "").strip()
    name = (name or "").strip().casefold()
    if not reference or not name:
        raise BookingValidationError(
            "Booking number or phone and name are required", code="missing_data"
        )

    store = BookingStore(db)
    rows = (
        store.find_by_booking_number(reference.upper())
        or store.find_by_phone(normalize_phone(reference))
    )
    rows = [r for r in rows if r.name.strip().casefold() == name]
    if not rows:
        raise BookingNotFound("Booking not found")

    groups: "OrderedDict[str, list[Bookings]]" = OrderedDict()
    for row in rows:
        groups.setdefault(row.booking_number, []).append(row)

    return [summarize_group(group_rows, config) for group_rows in groups.values()]


# ──────────────────────────────────────────────────────────────────────────────
# Summary
# ──────────────────────────────────────────────────────────────────────────────

def summarize_group(rows: list[Bookings], config: SiteConfig) -> dict:
    """Customer-facing view of one booking group built from its rows."""
    if not rows:
        raise BookingNotFound("Booking not found")

    first = rows[0]
    weeks: "OrderedDict[str, list[Bookings]]" = OrderedDict()
    for row in sorted(rows, key=lambda r: (r.date, r.slot_index)):
        weeks.setdefault(row.date, []).append(row)

    statuses = {row.status for row in rows}
    status = statuses.pop() if len(statuses) == 1 else "partial"

    return {
        "booking_number": first.booking_number,
        "group_id": first.group_id,
        "name": first.name,
        "phone": first.phone,
        "dates": json.loads(first.booking_dates or "[]") or list(weeks),
        "start_time": first.start_time,
        "end_time": first.end_time,
        "duration": first.duration,
        "total_price": round(sum(row.price for row in rows), 2),
        "currency": config.currency,
        "status": status,
        "created_at": first.created_at,
        "expires_at": first.expires_at,
        "is_recurring": bool(first.is_recurring),
        "recurring_weeks": first.recurring_weeks,
        "weeks": [
            {
                "date": week_date,
                "status": week_rows[0].status,
                "booking_ids": [r.id for r in week_rows],
            }
            for week_date, week_rows in weeks.items()
        ],
        "payment_info": config.payment_info if status == "pending" else None,
    }
