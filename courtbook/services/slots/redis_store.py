# courtbook/services/slots/redis_store.py
"""
Redis storage for the base slot grid using Sorted Sets.

Key format: slots:day:{date}
Value: Sorted Set where member = "HH:MM", score = expire_ts
       (unix timestamp when slot stops being bookable).

Query: ZRANGEBYSCORE key {now_ts} +inf → only live slots.
Sentinel: "__empty__" with score=0 marks "calculated, zero slots".
"""

from datetime import date, datetime, timedelta
from redis import Redis


EMPTY_SENTINEL = "__empty__"


def _decode(member) -> str:
    return member.decode() if isinstance(member, bytes) else member


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for slot data."""

    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(self, dt: date, slots: list[tuple[str, float]]) -> None:
        """
        Store calculated slots for a day.

        Args:
            dt: Target date
            slots: List of (time_str, expire_ts) pairs.
                   Empty list → sentinel is stored.
        """
        key = self._key(dt)
        pipe = self.redis.pipeline()

        pipe.delete(key)

        if slots:
            pipe.zadd(key, {time_str: expire_ts for time_str, expire_ts in slots})
            max_expire = max(expire_ts for _, expire_ts in slots)
            # Key lives until the last slot expires + 1 minute buffer
            pipe.expireat(key, int(max_expire) + 60)
        else:
            # Empty day: sentinel so EXISTS returns True.
            # Overnight grids reach into the next day, so keep it one day longer.
            pipe.zadd(key, {EMPTY_SENTINEL: 0})
            end_of_day = datetime.combine(dt + timedelta(days=1), datetime.max.time())
            pipe.expireat(key, int(end_of_day.timestamp()) + 60)

        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_available_slots(self, dt: date, now: datetime) -> list[str] | None:
        """
        Get live slots for a day, ordered by start timestamp.

        Returns:
            List of "HH:MM" strings, or None on cache miss.
        """
        key = self._key(dt)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrangebyscore(key, now.timestamp(), "+inf")
        return [
            _decode(m) for m in members
            if _decode(m) != EMPTY_SENTINEL
        ]

    def get_all_slots_with_scores(self, dt: date) -> list[tuple[str, float]] | None:
        """
        Get all stored slots with their expire_ts (for the admin debug view).

        Returns:
            List of (time_str, expire_ts) or None on cache miss.
        """
        key = self._key(dt)
        if not self.redis.exists(key):
            return None

        raw = self.redis.zrangebyscore(key, "-inf", "+inf", withscores=True)
        return [
            (_decode(m), score)
            for m, score in raw
            if _decode(m) != EMPTY_SENTINEL
        ]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(self, dates: list[date] | None = None) -> int:
        """
        Delete cached slots.

        Args:
            dates: Specific dates, or None to delete every cached day.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(dt) for dt in dates]
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)
