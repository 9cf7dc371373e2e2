"""
Pending booking expiry checker.

Periodically moves pending bookings whose payment window has passed
(expires_at < now) to expired, freeing their slots.

Runs as an asyncio task in app lifespan.
Uses the synchronous DB session (via asyncio.to_thread).
"""

import asyncio
import logging

from ..config import settings
from ..database import SessionLocal
from ..dependencies import local_now
from .bookings import expire_pending_bookings

logger = logging.getLogger(__name__)


async def expiry_checker_loop() -> None:
    """Periodic loop expiring overdue pending bookings."""
    logger.info("expiry_checker_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_expire_overdue_bookings)
            except asyncio.CancelledError:
                logger.info("expiry_checker_loop cancelled")
                raise
            except Exception:
                logger.exception("expiry_checker_loop error")

            await asyncio.sleep(settings.expiry_check_interval)
    except asyncio.CancelledError:
        pass


def _expire_overdue_bookings() -> None:
    """Expire overdue pending bookings (synchronous)."""
    db = SessionLocal()
    try:
        expire_pending_bookings(db, local_now())
    finally:
        db.close()
