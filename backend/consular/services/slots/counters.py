# backend/consular/services/slots/counters.py
"""
Counter registry: which counters may serve a booking.

A counter is qualified for (center, service) when it belongs to the
center, is active, and lists the service among the ones it handles.
Results are always ordered by counter id; assignment relies on it.
"""

from sqlalchemy.orm import Query, Session

from ...models import Counters as DBCounter, t_counter_services


def qualified_counters_query(
    db: Session,
    center_id: int,
    service_id: int,
    lock: bool = False,
) -> Query:
    """
    Build the qualified-counter query without running it.

    With lock=True the rows are selected FOR UPDATE OF counters, which
    PostgreSQL honours and SQLite drops.
    """
    q = (
        db.query(DBCounter)
        .join(
            t_counter_services,
            DBCounter.id == t_counter_services.c.counter_id
        )
        .filter(
            DBCounter.center_id == center_id,
            DBCounter.is_active == 1,
            t_counter_services.c.service_id == service_id,
        )
        .order_by(DBCounter.id.asc())
    )
    if lock:
        q = q.with_for_update(of=DBCounter)
    return q


def get_qualified_counters(
    db: Session,
    center_id: int,
    service_id: int,
) -> list[DBCounter]:
    """Active counters at the center handling the service (no locks)."""
    return qualified_counters_query(db, center_id, service_id).all()


def lock_qualified_counters(
    db: Session,
    center_id: int,
    service_id: int,
) -> list[DBCounter]:
    """
    Same as get_qualified_counters, but takes row locks (SELECT ... FOR UPDATE).

    Rows are locked in ascending id order, so two allocators for
    overlapping counter sets cannot deadlock. The lock is held until
    the surrounding transaction ends.
    """
    return qualified_counters_query(db, center_id, service_id, lock=True).all()


def get_qualified_counter_ids(db: Session, center_id: int, service_id: int) -> list[int]:
    return [c.id for c in get_qualified_counters(db, center_id, service_id)]
