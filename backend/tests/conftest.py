# backend/tests/conftest.py
"""
Pytest configuration for the scheduling backend.

Every database-backed test gets its own in-memory SQLite engine (StaticPool,
foreign keys on), so commits inside services never leak between tests.
"""

import os

# Set testing mode BEFORE any slotengine imports
os.environ["is_testing"] = "true"
os.environ["database_url"] = "sqlite+pysqlite:///:memory:"
os.environ["booking_lock_enabled"] = "false"

from datetime import date, datetime, time
from typing import Any, Callable, Optional

from fastapi.testclient import TestClient
import pytest
import pytz
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from slotengine.api.dependencies.database import get_db
from slotengine.core.config import settings
from slotengine.database import Base
import slotengine.models  # noqa: F401
from slotengine.models import Booking, BookingStatus, DateOverride, EventType, Host, WeeklyRule

settings.is_testing = True
settings.booking_lock_enabled = False


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(db_engine) -> Session:
    """Session bound to the per-test engine."""
    TestingSessionLocal = sessionmaker(
        bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    from slotengine.main import app

    def override_get_db():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def make_host(db: Session) -> Callable[..., Host]:
    counter = {"n": 0}

    def _make(timezone: str = "UTC", name: str = "Host", email: Optional[str] = None) -> Host:
        counter["n"] += 1
        host = Host(
            name=name,
            email=email or f"host{counter['n']}@example.com",
            timezone=timezone,
        )
        db.add(host)
        db.commit()
        return host

    return _make


@pytest.fixture
def make_event_type(db: Session) -> Callable[..., EventType]:
    def _make(
        host: Host,
        duration: int = 30,
        buffer_before: int = 0,
        buffer_after: int = 0,
        notice: int = 0,
        is_active: bool = True,
        title: str = "Intro call",
    ) -> EventType:
        event_type = EventType(
            host_id=host.id,
            title=title,
            description="",
            duration_minutes=duration,
            buffer_before_minutes=buffer_before,
            buffer_after_minutes=buffer_after,
            min_notice_minutes=notice,
            is_active=is_active,
        )
        db.add(event_type)
        db.commit()
        return event_type

    return _make


@pytest.fixture
def make_rule(db: Session) -> Callable[..., WeeklyRule]:
    def _make(host: Host, weekday: int, start: time, end: time) -> WeeklyRule:
        rule = WeeklyRule(host_id=host.id, day_of_week=weekday, start_time=start, end_time=end)
        db.add(rule)
        db.commit()
        return rule

    return _make


@pytest.fixture
def make_override(db: Session) -> Callable[..., DateOverride]:
    def _make(
        host: Host,
        on: date,
        is_available: bool,
        start: Optional[time] = None,
        end: Optional[time] = None,
    ) -> DateOverride:
        row = DateOverride(
            host_id=host.id, date=on, is_available=is_available, start_time=start, end_time=end
        )
        db.add(row)
        db.commit()
        return row

    return _make


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    def _make(
        host: Host,
        event_type: EventType,
        start_at: datetime,
        end_at: datetime,
        status: str = BookingStatus.CONFIRMED.value,
    ) -> Booking:
        start_at = start_at.astimezone(pytz.UTC)
        end_at = end_at.astimezone(pytz.UTC)
        booking = Booking(
            host_id=host.id,
            event_type_id=event_type.id,
            guest_name="Guest",
            guest_email="guest@example.com",
            booking_date=start_at.date(),
            start_time=start_at.time(),
            end_time=end_at.time(),
            start_at=start_at,
            end_at=end_at,
            duration_minutes=int((end_at - start_at).total_seconds() // 60),
            status=status,
            booker_timezone="UTC",
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def weekday_host(make_host, make_event_type, make_rule):
    """Scenario A host: UTC, Monday 09:00-17:00, 30 minute event, no buffers."""
    host = make_host("UTC")
    event_type = make_event_type(host, duration=30)
    make_rule(host, 1, time(9, 0), time(17, 0))
    return host, event_type
