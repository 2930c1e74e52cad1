"""Database setup.

Provides the SQLAlchemy declarative base and :class:`Store`, the handle that
owns an engine and its session factory. A store is created from a URL,
opened once at process start and closed at shutdown; callers receive it by
injection rather than importing a module-level engine.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger("movienight_core.db")

Base = declarative_base()


def _ensure_sqlite_dir(url: str) -> None:
    database = make_url(url).database
    if not database or database == ":memory:":
        return
    directory = os.path.dirname(database)
    if directory:
        os.makedirs(directory, exist_ok=True)


def _sqlite_on_connect(dbapi_conn, _record) -> None:
    # Let SQLAlchemy emit BEGIN itself so reads share the write transaction
    # and SAVEPOINTs nest properly under pysqlite
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_on_begin(conn) -> None:
    # IMMEDIATE takes the write lock up front: a second writer on the same
    # room waits for the first to commit and then re-reads its status
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class Store:
    """Engine + session factory with an explicit open/close lifecycle."""

    def __init__(self, url: str):
        self.url = url
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("store is not open")
        return self._engine

    def open(self) -> "Store":
        """Create the engine and all tables. Calling it twice is a no-op."""
        if self._engine is not None:
            return self
        connect_args = {}
        is_sqlite = self.url.startswith("sqlite")
        if is_sqlite:
            _ensure_sqlite_dir(self.url)
            connect_args["check_same_thread"] = False
        engine = create_engine(self.url, connect_args=connect_args)
        if is_sqlite:
            event.listen(engine, "connect", _sqlite_on_connect)
            event.listen(engine, "begin", _sqlite_on_begin)
        # Register the mapped tables before create_all
        from movienight_core import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        logger.info("store.open url=%s", engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("store.close")

    def new_session(self) -> Session:
        if self._sessions is None:
            raise RuntimeError("store is not open")
        return self._sessions()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session; roll back on error and always close."""
        db = self.new_session()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = ["Base", "Store"]
