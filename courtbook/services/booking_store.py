"""
Booking data access.

Thin wrapper around the SQLAlchemy session. The resolver only reads
snapshots through it; every write commits (or rolls back) as one unit.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import SlotConflictError, StorageError
from ..models.tables import Bookings
from .booking_group import BookingGroup

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = {
    "confirmed": "confirmed_at",
    "declined": "declined_at",
    "expired": "expired_at",
}


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class BookingStore:
    def __init__(self, db: Session):
        self.db = db

    # ── Read ─────────────────────────────────────────────────────────────

    def list_bookings_for_date(self, target_date: date) -> list[Bookings]:
        return (
            self.db.query(Bookings)
            .filter(Bookings.date == target_date.isoformat())
            .order_by(Bookings.time)
            .all()
        )

    def list_bookings_for_customer_and_date(self, phone: str, target_date: date) -> list[Bookings]:
        return (
            self.db.query(Bookings)
            .filter(
                Bookings.phone == phone,
                Bookings.date == target_date.isoformat(),
            )
            .all()
        )

    def get(self, booking_id: int) -> Optional[Bookings]:
        return self.db.get(Bookings, booking_id)

    def find_by_booking_number(self, booking_number: str) -> list[Bookings]:
        return (
            self.db.query(Bookings)
            .filter(Bookings.booking_number == booking_number)
            .order_by(Bookings.date, Bookings.slot_index)
            .all()
        )

    def find_by_phone(self, phone: str) -> list[Bookings]:
        return (
            self.db.query(Bookings)
            .filter(Bookings.phone == phone)
            .order_by(Bookings.date, Bookings.slot_index)
            .all()
        )

    def list_bookings(
        self,
        status: Optional[str] = None,
        target_date: Optional[date] = None,
        phone: Optional[str] = None,
    ) -> list[Bookings]:
        query = self.db.query(Bookings)
        if status:
            query = query.filter(Bookings.status == status)
        if target_date:
            query = query.filter(Bookings.date == target_date.isoformat())
        if phone:
            query = query.filter(Bookings.phone == phone)
        return query.order_by(Bookings.date, Bookings.time).all()

    def stats(self) -> dict:
        """Booking counts per status and confirmed revenue."""
        counts = dict(
            self.db.query(Bookings.status, func.count(Bookings.id))
            .group_by(Bookings.status)
            .all()
        )
        revenue = (
            self.db.query(func.coalesce(func.sum(Bookings.price), 0.0))
            .filter(Bookings.status == "confirmed")
            .scalar()
        )
        return {
            "total": sum(counts.values()),
            "pending": counts.get("pending", 0),
            "confirmed": counts.get("confirmed", 0),
            "declined": counts.get("declined", 0),
            "expired": counts.get("expired", 0),
            "total_revenue": float(revenue or 0),
        }

    # ── Write ────────────────────────────────────────────────────────────

    def insert_bookings(self, group: BookingGroup) -> list[Bookings]:
        """
        Insert every row of a group in one transaction.

        The partial unique index on (date, time) is the authoritative
        conflict check: a violation rolls back the whole group.
        """
        rows = [Bookings(**row) for row in group.to_rows()]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Slot race lost for booking group {group.group_id}")
            raise SlotConflictError("One of the selected slots was just booked") from None
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to insert booking group {group.group_id}")
            raise StorageError() from None

        group.row_ids = [row.id for row in rows]
        return rows

    def update_booking_status(
        self,
        status: str,
        now: datetime,
        group_id: Optional[str] = None,
        booking_id: Optional[int] = None,
        on_date: Optional[str] = None,
        from_statuses: tuple[str, ...] = ("pending",),
    ) -> int:
        """
        Move rows of a group (optionally one date of it) or a single row
        to ``status``.

        Only rows currently in ``from_statuses`` change. Returns the number
        of updated rows.
        """
        if group_id is None and booking_id is None:
            raise ValueError("group_id or booking_id required")

        query = self.db.query(Bookings).filter(Bookings.status.in_(from_statuses))
        if booking_id is not None:
            query = query.filter(Bookings.id == booking_id)
        else:
            query = query.filter(Bookings.group_id == group_id)
            if on_date is not None:
                query = query.filter(Bookings.date == on_date)

        values = {"status": status, "updated_at": _ts(now)}
        timestamp_field = TIMESTAMP_FIELDS.get(status)
        if timestamp_field:
            values[timestamp_field] = _ts(now)

        return self._commit_update(query, values)

    def expire_overdue(self, now: datetime) -> int:
        """pending → expired for every row whose expires_at has passed."""
        query = self.db.query(Bookings).filter(
            Bookings.status == "pending",
            Bookings.expires_at.isnot(None),
            Bookings.expires_at < _ts(now),
        )
        return self._commit_update(query, {
            "status": "expired",
            "expired_at": _ts(now),
            "updated_at": _ts(now),
        })

    def delete_booking(self, booking_id: int) -> bool:
        obj = self.db.get(Bookings, booking_id)
        if not obj:
            return False
        try:
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete booking {booking_id}")
            raise StorageError() from None
        return True

    def delete_group(self, booking_number: str) -> int:
        query = self.db.query(Bookings).filter(Bookings.booking_number == booking_number)
        try:
            deleted = query.delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to delete booking group {booking_number}")
            raise StorageError() from None
        return deleted

    def _commit_update(self, query, values: dict) -> int:
        try:
            updated = query.update(values, synchronize_session=False)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise SlotConflictError("The slot is already held by another booking") from None
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to update bookings")
            raise StorageError() from None
        return updated
