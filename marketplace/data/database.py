# marketplace/data/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.utils.logging import get_logger
from marketplace.utils.retry import db_connect_retry
from marketplace.utils.settings import DATABASE_URL, DB_ECHO, DB_STATEMENT_TIMEOUT_MS

logger = get_logger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign keys off, PostgreSQL always enforces them
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str = DATABASE_URL, statement_timeout_ms: int = DB_STATEMENT_TIMEOUT_MS) -> Engine:
    """Build an engine whose statements give up after ``statement_timeout_ms``.

    A statement that hits the timeout raises inside the caller's transaction,
    which is then rolled back by :func:`transaction`.
    """
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        kwargs = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": statement_timeout_ms / 1000,
            },
        }
        if make_url(url).database in (None, "", ":memory:"):
            # one shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, echo=DB_ECHO, **kwargs)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    if backend == "postgresql":
        return create_engine(
            url,
            echo=DB_ECHO,
            pool_pre_ping=True,
            connect_args={"options": f"-c statement_timeout={statement_timeout_ms}"},
        )

    return create_engine(url, echo=DB_ECHO, pool_pre_ping=True)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """All-or-nothing unit of work on an injected session.

    Everything executed on ``db`` inside the block is committed together; any
    exception rolls all of it back before propagating.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


@db_connect_retry()
def wait_for_db(bind: Engine | None = None) -> None:
    with (bind or engine).connect() as conn:
        conn.execute(text("SELECT 1"))


def init_db(bind: Engine | None = None) -> None:
    # models must be imported so they are registered in Base.metadata
    import marketplace.data.models  # noqa: F401

    bind = bind or engine
    wait_for_db(bind)
    Base.metadata.create_all(bind=bind)
    logger.info("Database ready", tables=sorted(Base.metadata.tables.keys()))
