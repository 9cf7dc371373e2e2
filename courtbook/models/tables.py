from sqlalchemy import Column, Float, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata

ACTIVE_STATUSES = ("pending", "confirmed")

# Only pending/confirmed rows hold a slot; declined and expired rows free it.
_ACTIVE_WHERE = text("status IN ('pending', 'confirmed')")


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index(
            'uq_bookings_active_slot',
            'date',
            'time',
            unique=True,
            sqlite_where=_ACTIVE_WHERE,
            postgresql_where=_ACTIVE_WHERE,
        ),
        Index('ix_bookings_group_id', 'group_id'),
        Index('ix_bookings_booking_number', 'booking_number'),
        Index('ix_bookings_phone_date', 'phone', 'date'),
    )

    id = Column(Integer, primary_key=True)
    group_id = Column(Text, nullable=False)
    booking_number = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    date = Column(Text, nullable=False)
    time = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)
    total_slots = Column(Integer, nullable=False)
    slot_index = Column(Integer, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    week_number = Column(Integer, nullable=False, server_default=text('1'))
    price = Column(Float, nullable=False, server_default=text('0'))
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    expires_at = Column(Text)
    confirmed_at = Column(Text)
    declined_at = Column(Text)
    expired_at = Column(Text)
    is_recurring = Column(Integer, nullable=False, server_default=text('0'))
    recurring_weeks = Column(Integer, nullable=False, server_default=text('1'))
    booking_dates = Column(Text, nullable=False, server_default=text("'[]'"))
