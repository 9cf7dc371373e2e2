# courtbook/services/slots/config.py
"""
Site configuration for slots calculation and booking validation.
"""

import re
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import date
from typing import Any

from ...exceptions import ConfigurationError

MINUTES_PER_DAY = 24 * 60

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Day names as stored by older Arabic deployments
WEEKDAY_ALIASES = {
    "الاثنين": "monday",
    "الثلاثاء": "tuesday",
    "الأربعاء": "wednesday",
    "الخميس": "thursday",
    "الجمعة": "friday",
    "السبت": "saturday",
    "الأحد": "sunday",
}

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    m = _TIME_RE.match(value or "")
    if not m:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return int(m.group(1)) * 60 + int(m.group(2))


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes (wrapped modulo one day) to "HH:MM"."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_name(dt: date) -> str:
    return WEEKDAYS[dt.weekday()]


def normalize_weekday(value: str) -> str:
    key = value.strip()
    key = WEEKDAY_ALIASES.get(key, key.lower())
    if key not in WEEKDAYS:
        raise ConfigurationError(f"Unknown weekday: {value!r}")
    return key


@dataclass(frozen=True)
class SiteConfig:
    """
    Configuration for the booking engine.

    Instances are immutable; an update builds a new instance and swaps it in
    (see ``services.config_store``).

    Attributes:
        opening_start / opening_end: Opening hours; end <= start is overnight
        slot_duration_minutes: Base grid step in minutes (15/30/60)
        allowed_durations: Bookable durations, multiples of the grid step
        min_advance_minutes: Slots starting within this buffer are not bookable
        max_booking_days_ahead: Booking horizon for the first requested date
    """
    court_name: str = "Football court"
    opening_start: str = "08:00"
    opening_end: str = "22:00"
    slot_duration_minutes: int = 30  # 15 / 30 / 60
    allowed_durations: tuple[int, ...] = (30, 60, 90, 120)
    working_days: tuple[str, ...] = WEEKDAYS
    max_hours_per_person_per_day: float = 3
    enable_recurring_booking: bool = True
    max_recurring_weeks: int = 8
    max_booking_days_ahead: int = 30
    min_advance_minutes: int = 30
    price_per_hour: float = 50
    night_price_per_hour: float | None = None
    night_starts_at: str = "18:00"
    night_ends_at: str = "06:00"
    currency: str = "EGP"
    require_payment_confirmation: bool = True
    payment_timeout_minutes: int = 60
    payment_info: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration."""
        for name in ("opening_start", "opening_end", "night_starts_at", "night_ends_at"):
            try:
                time_str_to_minutes(getattr(self, name))
            except ValueError as e:
                raise ConfigurationError(f"{name}: {e}") from None

        if self.slot_duration_minutes not in (15, 30, 60):
            raise ConfigurationError(
                f"slot_duration_minutes must be 15, 30, or 60, got {self.slot_duration_minutes}"
            )

        if not self.allowed_durations:
            raise ConfigurationError("allowed_durations must not be empty")
        for duration in self.allowed_durations:
            if duration <= 0 or duration % self.slot_duration_minutes:
                raise ConfigurationError(
                    f"Duration {duration} is not a multiple of the "
                    f"{self.slot_duration_minutes}-minute grid"
                )

        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "allowed_durations", tuple(sorted(set(self.allowed_durations))))
        object.__setattr__(
            self,
            "working_days",
            tuple(d for d in WEEKDAYS if d in {normalize_weekday(x) for x in self.working_days}),
        )
        object.__setattr__(self, "payment_info", dict(self.payment_info or {}))

        if self.max_hours_per_person_per_day <= 0:
            raise ConfigurationError("max_hours_per_person_per_day must be positive")
        if self.max_recurring_weeks < 1:
            raise ConfigurationError("max_recurring_weeks must be at least 1")
        if self.max_booking_days_ahead < 0 or self.min_advance_minutes < 0:
            raise ConfigurationError("Booking horizon and lead time cannot be negative")
        if self.payment_timeout_minutes <= 0:
            raise ConfigurationError("payment_timeout_minutes must be positive")
        if self.price_per_hour < 0 or (self.night_price_per_hour or 0) < 0:
            raise ConfigurationError("Prices cannot be negative")

    # ── Grid helpers ─────────────────────────────────────────────────────

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.opening_start)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.opening_end)

    @property
    def is_overnight(self) -> bool:
        return self.end_minutes <= self.start_minutes

    @property
    def slot_hours(self) -> float:
        return self.slot_duration_minutes / 60

    def is_working_day(self, dt: date) -> bool:
        return weekday_name(dt) in self.working_days

    def rate_for_slot(self, time_str: str) -> float:
        """Hourly rate for a slot; night rate applies inside the night window."""
        if self.night_price_per_hour is None:
            return self.price_per_hour

        t = time_str_to_minutes(time_str)
        start = time_str_to_minutes(self.night_starts_at)
        end = time_str_to_minutes(self.night_ends_at)
        if start <= end:
            in_night = start <= t < end
        else:
            in_night = t >= start or t < end
        return self.night_price_per_hour if in_night else self.price_per_hour

    # ── Serialisation ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["allowed_durations"] = list(self.allowed_durations)
        data["working_days"] = list(self.working_days)
        return data

    def public_dict(self) -> dict[str, Any]:
        """Fields shown to customers (everything here is public)."""
        return self.to_dict()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SiteConfig":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name in ("allowed_durations", "working_days"):
            if name in values and values[name] is not None:
                values[name] = tuple(values[name])
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigurationError(str(e)) from None

    def with_changes(self, **changes) -> "SiteConfig":
        return replace(self, **changes)


def get_booking_config() -> SiteConfig:
    """Currently active site configuration."""
    from ..config_store import get_config_store
    return get_config_store().current()
