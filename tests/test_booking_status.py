"""Tests for booking status transitions."""

from datetime import timedelta

import pytest

from courtbook.exceptions import BookingNotFound, BookingValidationError, InvalidStatusTransition
from courtbook.models.tables import Bookings
from courtbook.services.bookings import (
    change_booking_status,
    create_booking,
    expire_pending_bookings,
    find_customer_bookings,
)
from courtbook.services.slots.availability import calculate_day_availability

from .conftest import NOW, make_request


def test_confirm_moves_every_row_to_confirmed(db, config):
    created = create_booking(db, make_request(), config, NOW)

    summary = change_booking_status(db, created["booking_number"], "confirm", NOW, config)

    assert summary["status"] == "confirmed"
    assert summary["payment_info"] is None
    assert all(r.confirmed_at for r in db.query(Bookings).all())


def test_decline_frees_the_slots(db, config):
    created = create_booking(db, make_request(), config, NOW)

    summary = change_booking_status(db, created["booking_number"], "decline", NOW, config)
    result = calculate_day_availability(db, NOW.date() + timedelta(days=1), config, NOW)

    assert summary["status"] == "declined"
    assert result["booked_slots"] == []
    assert "14:00" in result["slots"]


@pytest.mark.parametrize("first, then", [
    ("confirm", "decline"),
    ("decline", "confirm"),
    ("decline", "decline"),
])
def test_terminal_states_reject_transitions(db, config, first, then):
    created = create_booking(db, make_request(), config, NOW)
    change_booking_status(db, created["booking_number"], first, NOW, config)

    with pytest.raises(InvalidStatusTransition):
        change_booking_status(db, created["booking_number"], then, NOW, config)


def test_overdue_booking_cannot_be_confirmed(db, config):
    created = create_booking(db, make_request(), config, NOW)
    later = NOW + timedelta(minutes=config.payment_timeout_minutes + 1)

    with pytest.raises(InvalidStatusTransition):
        change_booking_status(db, created["booking_number"], "confirm", later, config)

    assert {r.status for r in db.query(Bookings).all()} == {"expired"}


def test_expiry_sweep_frees_slots(db, config):
    create_booking(db, make_request(), config, NOW)
    later = NOW + timedelta(minutes=config.payment_timeout_minutes + 1)

    expired = expire_pending_bookings(db, later)
    summary = create_booking(
        db, make_request(name="Karim", phone="01111111111"), config, later
    )

    assert expired == 2
    assert summary["start_time"] == "14:00"


def test_single_week_of_recurring_booking(db, config):
    created = create_booking(
        db, make_request(is_recurring=True, recurring_weeks=2), config, NOW
    )
    second_week_row = created["weeks"][1]["booking_ids"][0]

    summary = change_booking_status(
        db, created["booking_number"], "decline", NOW, config, booking_id=second_week_row
    )

    assert summary["status"] == "partial"
    assert [w["status"] for w in summary["weeks"]] == ["pending", "declined"]


def test_unknown_action(db, config):
    created = create_booking(db, make_request(), config, NOW)

    with pytest.raises(BookingValidationError) as exc_info:
        change_booking_status(db, created["booking_number"], "cancel", NOW, config)

    assert exc_info.value.code == "invalid_action"


def test_unknown_booking_number(db, config):
    with pytest.raises(BookingNotFound):
        change_booking_status(db, "NOPE0000", "confirm", NOW, config)


def test_customer_lookup_requires_matching_name(db, config):
    created = create_booking(db, make_request(), config, NOW)

    by_number = find_customer_bookings(db, created["booking_number"].lower(), "omar", config)
    by_phone = find_customer_bookings(db, "01001234567", "OMAR", config)

    assert [b["booking_number"] for b in by_number] == [created["booking_number"]]
    assert [b["booking_number"] for b in by_phone] == [created["booking_number"]]
    with pytest.raises(BookingNotFound):
        find_customer_bookings(db, created["booking_number"], "Karim", config)


def test_customer_lookup_by_formatted_phone(db, config):
    created = create_booking(db, make_request(phone="0100 123-4567"), config, NOW)

    found = find_customer_bookings(db, "(0100) 123 4567", "Omar", config)

    assert created["phone"] == "01001234567"
    assert [b["booking_number"] for b in found] == [created["booking_number"]]


def test_booking_number_is_redrawn_on_collision(db, config, monkeypatch):
    numbers = iter(["AAAA1111", "AAAA1111", "BBBB2222"])

    def draw():
        return next(numbers)

    monkeypatch.setattr("courtbook.services.slots.conflicts.new_booking_number", draw)
    monkeypatch.setattr("courtbook.services.bookings.new_booking_number", draw)

    first = create_booking(db, make_request(time="10:00"), config, NOW)
    second = create_booking(
        db, make_request(name="Karim", phone="01111111111", time="16:00"), config, NOW
    )

    assert first["booking_number"] == "AAAA1111"
    assert second["booking_number"] == "BBBB2222"
    assert {r.name for r in db.query(Bookings).filter(Bookings.booking_number == "AAAA1111")} == {"Omar"}
