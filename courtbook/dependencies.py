# courtbook/dependencies.py
"""FastAPI dependencies shared by the routers."""

import hmac
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException, status
from redis import Redis

from .config import settings
from .services.config_store import ConfigStore, get_config_store
from .services.slots.config import SiteConfig


def local_now() -> datetime:
    """Naive wall-clock time at the court."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None, microsecond=0)


def get_now() -> datetime:
    return local_now()


def get_store() -> ConfigStore:
    return get_config_store()


def get_site_config(store: ConfigStore = Depends(get_store)) -> SiteConfig:
    # one immutable snapshot per request
    return store.current()


def get_redis() -> Redis | None:
    from .redis_client import redis_client
    return redis_client


def require_admin(x_admin_token: str | None = Header(None)) -> None:
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), settings.admin_token.encode()
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
