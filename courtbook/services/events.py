"""
courtbook/services/events.py

Event emitter: pushes booking events to a Redis queue for notification
consumers (SMS, messenger bots, admin dashboards).

Queue:
- events:p2p: instant delivery (booking notifications)
"""

import json
import time
import logging

from redis.exceptions import RedisError

from .. import redis_client as redis_module

logger = logging.getLogger(__name__)

EVENTS_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit a p2p event (instant delivery).

    Never raises; Redis errors are logged.
    """
    client = redis_module.redis_client
    if client is None:
        logger.debug(f"Event dropped (no Redis): {event_type}")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(EVENTS_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {EVENTS_QUEUE}")
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
