"""
Engine and session handling for the finance database.

One engine is shared per process. Requests receive their own session through
the ``get_db_session`` dependency; startup code and scripts use
``DatabaseEngine().session_scope()``.
"""

import os
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


class DatabaseEngine:
    """Process-wide engine and session factory, configured from DATABASE_URL."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if DatabaseEngine._initialized:
            return
        self.database_url = os.environ.get("DATABASE_URL")
        if not self.database_url:
            raise ValueError("DATABASE_URL environment variable is required")

        self.engine = create_engine(
            self.database_url,
            echo=os.environ.get("SQL_ECHO", "false").lower() == "true",
            **self._engine_options(self.database_url),
        )
        self.session_local = sessionmaker(autoflush=False, bind=self.engine, class_=Session)
        DatabaseEngine._initialized = True

    @staticmethod
    def _engine_options(database_url: str) -> dict:
        """Pool settings per backend."""
        if not database_url.startswith("sqlite"):
            return {"pool_pre_ping": True, "pool_recycle": 300}

        options = {"connect_args": {"check_same_thread": False}}
        # An in-memory database only exists on its one connection
        if database_url in IN_MEMORY_SQLITE_URLS:
            options["poolclass"] = StaticPool
        return options

    def get_db_session(self) -> Generator[Session, None, None]:
        """
        Yield a session for one unit of work and close it afterwards.

        Yields:
            Database session
        """
        db = self.session_local()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context-managed session for code running outside a request."""
        yield from self.get_db_session()

    def create_tables(self):
        SQLModel.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        SQLModel.metadata.drop_all(bind=self.engine)


def get_db_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    yield from DatabaseEngine().get_db_session()
