"""Tests for the counter registry queries."""

from sqlalchemy.dialects import postgresql

from consular.models import Counters
from consular.services.slots.counters import (
    get_qualified_counter_ids,
    lock_qualified_counters,
    qualified_counters_query,
)


def _postgres_sql(query) -> str:
    return str(query.statement.compile(dialect=postgresql.dialect()))


def test_locking_query_selects_for_update_of_counters(db, world):
    sql = _postgres_sql(qualified_counters_query(db, world.center_id, world.service_id, lock=True))

    assert "FOR UPDATE OF counters" in sql
    assert sql.index("ORDER BY counters.id ASC") < sql.index("FOR UPDATE")


def test_plain_query_takes_no_lock(db, world):
    sql = _postgres_sql(qualified_counters_query(db, world.center_id, world.service_id))

    assert "FOR UPDATE" not in sql


def test_locked_and_plain_agree(db, world):
    db.get(Counters, world.counter_ids[0]).is_active = 0
    db.commit()

    locked = [c.id for c in lock_qualified_counters(db, world.center_id, world.service_id)]

    assert locked == get_qualified_counter_ids(db, world.center_id, world.service_id)
    assert locked == [world.counter_ids[1]]


def test_uncovered_service_has_no_counters(db, world):
    assert get_qualified_counter_ids(db, world.center_id, world.uncovered_service_id) == []
