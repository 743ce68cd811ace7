"""
SQLAlchemy declarative base, the ``Database`` resource that owns the engine
and session factory, and the FastAPI dependency that provides a session per
request.

The application factory creates one ``Database`` and stores it on
``app.state.database``; nothing in this module holds a live connection.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import Request

Base = declarative_base()

# Largest id SQLite (and a BIGINT column) can hold; larger ids are rejected
# at validation time instead of overflowing the driver.
MAX_ID = 2**63 - 1

# SQLite reuses the highest deleted rowid unless AUTOINCREMENT is declared;
# order lines must never start pointing at a later product.
SQLITE_TABLE_ARGS = {"sqlite_autoincrement": True}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine + session factory for one database URL."""

    def __init__(self, url: str):
        engine_kwargs = {}
        if url.startswith("sqlite"):
            # The threadpool may hand one connection to several threads
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # Every session must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool
        else:
            # pool_pre_ping keeps idle connections alive across MySQL's wait_timeout
            engine_kwargs["pool_pre_ping"] = True

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            # Off by default in SQLite; ON DELETE SET NULL/CASCADE depend on it
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        """Create the users, products and orders tables if they are missing."""
        # Import every ORM model so that Base.metadata knows about all tables.
        import models.user     # noqa: F401
        import models.product  # noqa: F401
        import models.order    # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request):
    """
    FastAPI dependency.  Yields a session bound to the application's
    database for the duration of the request, then closes it.
    Use with Depends(get_db).
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
