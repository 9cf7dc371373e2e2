"""Tests for the base slot grid and site configuration."""

from datetime import date, datetime

import pytest

from courtbook.exceptions import ConfigurationError
from courtbook.services.slots.calculator import (
    calculate_day_slots,
    generate_slots,
    slot_datetime,
)
from courtbook.services.slots.config import SiteConfig

SUNDAY = date(2025, 1, 5)


def test_grid_covers_opening_hours_in_order():
    slots = generate_slots("08:00", "22:00", 30)

    assert len(slots) == 28
    assert slots[0] == "08:00"
    assert slots[-1] == "21:30"
    assert slots == sorted(slots)


def test_grid_size_follows_step():
    assert len(generate_slots("08:00", "22:00", 60)) == 14
    assert generate_slots("08:00", "09:00", 15) == ["08:00", "08:15", "08:30", "08:45"]


def test_overnight_grid_wraps_past_midnight():
    assert generate_slots("22:00", "03:00", 60) == ["22:00", "23:00", "00:00", "01:00", "02:00"]


def test_midnight_close_is_overnight():
    slots = generate_slots("20:00", "00:00", 60)
    assert slots == ["20:00", "21:00", "22:00", "23:00"]


def test_non_positive_step_is_rejected():
    with pytest.raises(ValueError):
        generate_slots("08:00", "22:00", 0)


def test_overnight_early_slots_belong_to_next_day():
    config = SiteConfig(
        opening_start="22:00",
        opening_end="03:00",
        slot_duration_minutes=60,
        allowed_durations=(60,),
    )

    assert slot_datetime(SUNDAY, "23:00", config) == datetime(2025, 1, 5, 23, 0)
    assert slot_datetime(SUNDAY, "01:00", config) == datetime(2025, 1, 6, 1, 0)


def test_day_slots_empty_on_non_working_day():
    config = SiteConfig(working_days=("monday",))
    assert calculate_day_slots(SUNDAY, config, datetime(2025, 1, 4, 10, 0)) == []


def test_day_slots_drop_slots_inside_lead_time():
    config = SiteConfig(opening_start="08:00", opening_end="22:00")
    now = datetime(2025, 1, 5, 14, 0)

    times = [t for t, _ in calculate_day_slots(SUNDAY, config, now)]

    # 14:30 starts exactly at the end of the 30-minute buffer
    assert times[0] == "15:00"
    assert times[-1] == "21:30"


def test_config_rejects_unsupported_grid_step():
    with pytest.raises(ConfigurationError):
        SiteConfig(slot_duration_minutes=45)


def test_config_rejects_duration_off_grid():
    with pytest.raises(ConfigurationError):
        SiteConfig(slot_duration_minutes=60, allowed_durations=(60, 90))


def test_config_rejects_bad_time_format():
    with pytest.raises(ConfigurationError):
        SiteConfig(opening_start="8am")


def test_config_accepts_arabic_weekday_names():
    config = SiteConfig(working_days=("الجمعة", "Saturday"))
    assert config.working_days == ("friday", "saturday")


def test_from_dict_ignores_unknown_keys():
    config = SiteConfig.from_dict({"price_per_hour": 80, "theme": "dark"})
    assert config.price_per_hour == 80


def test_night_rate_applies_inside_window():
    config = SiteConfig(
        price_per_hour=100,
        night_price_per_hour=150,
        night_starts_at="18:00",
        night_ends_at="06:00",
    )

    assert config.rate_for_slot("17:30") == 100
    assert config.rate_for_slot("18:00") == 150
    assert config.rate_for_slot("02:00") == 150
    assert config.rate_for_slot("06:00") == 100


def test_flat_rate_without_night_price():
    config = SiteConfig(price_per_hour=100)
    assert config.rate_for_slot("23:00") == 100
