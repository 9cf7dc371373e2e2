"""Tests for day availability."""

from datetime import date, datetime
from types import SimpleNamespace

from courtbook.services.booking_store import BookingStore
from courtbook.services.bookings import create_booking
from courtbook.services.slots.availability import (
    available_slots,
    calculate_day_availability,
    is_active_booking,
)
from courtbook.services.slots.calculator import config_slots
from courtbook.services.slots.config import SiteConfig

from .conftest import NOW, make_request

SUNDAY = date(2025, 1, 5)


def row(time, status="confirmed", expires_at=None, day="2025-01-05"):
    return SimpleNamespace(date=day, time=time, status=status, expires_at=expires_at)


def test_available_slots_is_idempotent():
    config = SiteConfig()
    grid = config_slots(config)
    bookings = [row("14:00"), row("14:30", status="pending", expires_at="2025-01-04T11:00:00")]

    first = available_slots(SUNDAY, grid, bookings, NOW, config)
    second = available_slots(SUNDAY, grid, bookings, NOW, config)

    assert first == second


def test_booked_slots_are_excluded():
    config = SiteConfig()
    grid = config_slots(config)

    slots = available_slots(SUNDAY, grid, [row("14:00"), row("14:30")], NOW, config)

    assert "14:00" not in slots
    assert "14:30" not in slots
    assert "13:30" in slots
    assert "15:00" in slots


def test_bookings_on_other_dates_are_ignored():
    config = SiteConfig()
    grid = config_slots(config)

    slots = available_slots(SUNDAY, grid, [row("14:00", day="2025-01-06")], NOW, config)

    assert "14:00" in slots


def test_past_slots_and_lead_time_are_excluded():
    config = SiteConfig(min_advance_minutes=30)
    grid = config_slots(config)
    now = datetime(2025, 1, 5, 13, 45)

    slots = available_slots(SUNDAY, grid, [], now, config)

    assert "14:00" not in slots
    assert slots[0] == "14:30"


def test_expired_pending_booking_frees_slot():
    config = SiteConfig()
    grid = config_slots(config)
    overdue = row("14:00", status="pending", expires_at="2025-01-04T09:00:00")

    assert not is_active_booking(overdue, NOW)
    assert "14:00" in available_slots(SUNDAY, grid, [overdue], NOW, config)


def test_declined_booking_frees_slot():
    config = SiteConfig()
    grid = config_slots(config)

    assert "14:00" in available_slots(SUNDAY, grid, [row("14:00", status="declined")], NOW, config)


def test_day_availability_for_non_working_day(db):
    config = SiteConfig(working_days=("monday",))

    result = calculate_day_availability(db, SUNDAY, config, NOW)

    assert result["available"] is False
    assert result["slots"] == []
    assert result["message"] == "Non-working day"


def test_day_availability_reflects_stored_bookings(db, config):
    create_booking(db, make_request(time="14:00", duration=60), config, NOW)

    result = calculate_day_availability(db, SUNDAY, config, NOW)

    assert result["available"] is True
    assert result["booked_slots"] == ["14:00", "14:30"]
    assert "14:00" not in result["slots"]
    assert "14:30" not in result["slots"]
    assert len(result["all_slots"]) == 28


def test_day_availability_uses_the_same_store(db, config):
    create_booking(db, make_request(), config, NOW)
    rows = BookingStore(db).list_bookings_for_date(SUNDAY)

    result = calculate_day_availability(db, SUNDAY, config, NOW)

    assert {r.time for r in rows} == set(result["booked_slots"])
