"""
Test configuration and fixtures.

Provides:
- SQLite file database per test (schema from metadata, same engine setup as the app)
- Seeded world: users, services, one center with two counters, two slots
- Recording notifier in place of the Redis queue
- FastAPI TestClient with get_db / get_notifier overridden

Fixtures hand out ids, not ORM objects: reading an expired object opens
a read transaction whose shared lock delays other sessions' commits.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from consular.database import build_engine, get_db
from consular.deps import get_notifier
from consular.main import app
from consular.models import (
    Base,
    Counters,
    Services,
    TimeSlots,
    Users,
    VerificationCenters,
)


# =============================================================================
# Clock
# =============================================================================

# Monday; tomorrow .. today + 7 days is the default booking window
NOW = datetime(2026, 3, 2, 10, 0)
TODAY = NOW.date()
WEDNESDAY = date(2026, 3, 4)
SUNDAY = date(2026, 3, 8)


def bookable_date(days_ahead: int = 2) -> date:
    """A real future date inside the default window that is not a Sunday."""
    day = date.today() + timedelta(days=days_ahead)
    if day.weekday() == 6:
        day += timedelta(days=1)
    return day


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'consular.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@dataclass
class World:
    user_id: int
    other_user_id: int
    service_id: int
    uncovered_service_id: int
    center_id: int
    counter_ids: list[int] = field(default_factory=list)
    slot_ids: list[int] = field(default_factory=list)


@pytest.fixture(scope="function")
def world(db: Session) -> World:
    """
    One center, two counters handling `service_id`.

    `uncovered_service_id` is offered by the center but handled by no counter.
    """
    user = Users(first_name="Asha", last_name="Rao", email="asha@example.com")
    other = Users(first_name="Ben", last_name="Ode", email="ben@example.com")

    service = Services(
        category="passport",
        title="Passport Renewal",
        fees='{"normal": 50}',
        required_documents='["Old passport"]',
        processing_time="10 days",
    )
    uncovered = Services(category="visa", title="Tourist Visa")

    center = VerificationCenters(name="Central Office", city="Capital", country="Country")
    center.services.extend([service, uncovered])

    db.add_all([user, other, service, uncovered, center])
    db.flush()

    counters = []
    for name in ("Counter 1", "Counter 2"):
        counter = Counters(center_id=center.id, counter_name=name)
        counter.services.append(service)
        db.add(counter)
        counters.append(counter)

    slots = [
        TimeSlots(start_time=time(9, 0), end_time=time(9, 45), duration_minutes=45),
        TimeSlots(start_time=time(9, 45), end_time=time(10, 30), duration_minutes=45),
    ]
    db.add_all(slots)
    db.flush()

    result = World(
        user_id=user.id,
        other_user_id=other.id,
        service_id=service.id,
        uncovered_service_id=uncovered.id,
        center_id=center.id,
        counter_ids=[c.id for c in counters],
        slot_ids=[s.id for s in slots],
    )
    db.commit()
    return result


# =============================================================================
# Notifier / HTTP
# =============================================================================

class RecordingNotifier:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def __call__(self, event_type: str, payload: dict) -> None:
        self.events.append((event_type, payload))

    def of_type(self, event_type: str) -> list[dict]:
        return [p for t, p in self.events if t == event_type]


@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(session_factory, notifier) -> Generator[TestClient, None, None]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def user_headers(user_id: int) -> dict:
    return {"X-User-ID": str(user_id)}


def admin_headers(admin_id: int = 1) -> dict:
    return {"X-Admin-ID": str(admin_id)}
