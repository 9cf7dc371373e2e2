"""
Booking aggregate.

One customer submission is a BookingGroup: a run of consecutive grid slots
repeated over one or more weekly dates, with a single total price. The
storage layer maps it to one row per (date × slot) only at the boundary.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


def normalize_phone(value: Optional[str]) -> str:
    """Drop spaces, dashes and brackets; keep a leading +."""
    value = (value or "").strip()
    if value.startswith("+"):
        return "+" + re.sub(r"\D", "", value[1:])
    return re.sub(r"\D", "", value)


@dataclass
class BookingRequest:
    """Customer submission as received from the HTTP layer."""
    name: Optional[str]
    phone: Optional[str]
    date: Optional[str]
    time: Optional[str]
    duration: Optional[int] = None
    is_recurring: bool = False
    recurring_weeks: int = 1


@dataclass(frozen=True)
class BookingSlot:
    """One grid cell of the run (value row)."""
    time: str
    end_time: str
    slot_index: int


@dataclass
class BookingGroup:
    group_id: str
    booking_number: str
    name: str
    phone: str
    dates: list[date]
    slots: list[BookingSlot]
    duration: int
    status: str
    created_at: datetime
    total_price: float
    expires_at: Optional[datetime] = None
    is_recurring: bool = False
    recurring_weeks: int = 1
    row_ids: list[int] = field(default_factory=list)

    @property
    def start_time(self) -> str:
        return self.slots[0].time

    @property
    def end_time(self) -> str:
        return self.slots[-1].end_time

    @property
    def total_hours(self) -> float:
        return self.duration / 60 * len(self.dates)

    def to_rows(self) -> list[dict]:
        """
        Storage rows for this group.

        The first row carries the full total price, every other row carries 0,
        so summing ``price`` over the rows of a group yields the total once.
        """
        created = _ts(self.created_at)
        expires = _ts(self.expires_at) if self.expires_at else None
        dates_json = json.dumps([d.isoformat() for d in self.dates])

        rows = []
        for week_number, booking_date in enumerate(self.dates, start=1):
            for slot in self.slots:
                rows.append({
                    "group_id": self.group_id,
                    "booking_number": self.booking_number,
                    "name": self.name,
                    "phone": self.phone,
                    "date": booking_date.isoformat(),
                    "time": slot.time,
                    "duration": self.duration,
                    "total_slots": len(self.slots),
                    "slot_index": slot.slot_index,
                    "start_time": self.start_time,
                    "end_time": self.end_time,
                    "week_number": week_number,
                    "price": 0.0,
                    "status": self.status,
                    "created_at": created,
                    "updated_at": created,
                    "expires_at": expires,
                    "confirmed_at": created if self.status == "confirmed" else None,
                    "is_recurring": int(self.is_recurring),
                    "recurring_weeks": self.recurring_weeks,
                    "booking_dates": dates_json,
                })

        if rows:
            rows[0]["price"] = self.total_price
        return rows


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="seconds")
