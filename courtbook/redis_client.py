# courtbook/redis_client.py
"""
Shared Redis client.

Redis is optional: without REDIS_URL the slot grid is computed on every
request and events are dropped with a debug log line.
"""

from redis import Redis

from .config import settings

redis_client: Redis | None = (
    Redis.from_url(settings.redis_url, socket_timeout=2.0)
    if settings.redis_url
    else None
)
