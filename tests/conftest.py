"""Shared fixtures: in-memory database, fixed clock and a temp config store."""

import json
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_TOKEN"] = "test-token"
os.environ["CREATE_TABLES"] = "false"
os.environ.pop("REDIS_URL", None)

from datetime import datetime

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courtbook.database import get_db
from courtbook.dependencies import get_now, get_redis, get_store
from courtbook.main import app
from courtbook.models import Base
from courtbook.services.booking_group import BookingRequest
from courtbook.services.config_store import ConfigStore

# Saturday morning; 2025-01-05 is the following Sunday
NOW = datetime(2025, 1, 4, 10, 0)

ADMIN_HEADERS = {"X-Admin-Token": "test-token"}

BASE_CONFIG = {
    "court_name": "Test court",
    "opening_start": "08:00",
    "opening_end": "22:00",
    "slot_duration_minutes": 30,
    "allowed_durations": [30, 60, 90, 120],
    "max_hours_per_person_per_day": 2,
    "enable_recurring_booking": True,
    "max_recurring_weeks": 4,
    "max_booking_days_ahead": 30,
    "min_advance_minutes": 30,
    "price_per_hour": 100,
    "currency": "EGP",
    "require_payment_confirmation": True,
    "payment_timeout_minutes": 60,
    "payment_info": {"instapay": "court@instapay"},
}


def make_request(**overrides) -> BookingRequest:
    data = {
        "name": "Omar",
        "phone": "01001234567",
        "date": "2025-01-05",
        "time": "14:00",
        "duration": 60,
    }
    data.update(overrides)
    return BookingRequest(**data)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def config_store(tmp_path):
    base_path = tmp_path / "site.base.json"
    base_path.write_text(json.dumps(BASE_CONFIG), encoding="utf-8")
    return ConfigStore(base_path, tmp_path / "site.override.json")


@pytest.fixture
def config(config_store):
    return config_store.current()


@pytest.fixture
def client(db, config_store):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_store] = lambda: config_store
    app.dependency_overrides[get_redis] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fake_redis():
    client = fakeredis.FakeRedis()
    yield client
    client.flushall()
