import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings

logger = logging.getLogger(__name__)

# Connection execution option asking SQLite for a write transaction
WRITE_INTENT = "consular_write_intent"


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create the engine for the configured database.

    SQLite gets two adjustments:
    - foreign keys are enforced on every connection
    - transactions opened through begin_write() start with BEGIN IMMEDIATE,
      so writers are serialized before they read capacity (SQLite ignores
      FOR UPDATE). Everything else gets a plain deferred BEGIN and reads
      never take the write lock.
    """
    if url.startswith("sqlite"):
        # check_same_thread=False: FastAPI runs sync endpoints in a threadpool
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _configure_sqlite(engine)
        return engine

    return create_engine(url, echo=echo, pool_pre_ping=True)


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection, _):
        # Disable pysqlite's own BEGIN handling; SQLAlchemy emits it below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        if conn.get_execution_options().get(WRITE_INTENT):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def begin_write(db: Session) -> None:
    """
    Open the session's next transaction as a write transaction.

    Call it before the first query of a read-check-write sequence. A
    transaction already open on the session is committed first, because
    SQLite cannot upgrade it to IMMEDIATE. Other backends ignore the option
    and rely on row locks.
    """
    if db.in_transaction():
        db.commit()
    db.connection(execution_options={WRITE_INTENT: True})


engine = build_engine(settings.resolved_database_url, echo=settings.sql_echo)

# SessionLocal — one session per request
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
