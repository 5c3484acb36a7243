from contextlib import contextmanager
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session, select

import models  # noqa: F401  (registers every table on SQLModel.metadata)
from core.logging_config import logger
from models.enums import LEGACY_CUSTOMER_ROLE, Role
from models.user import User


class Database:
    """
    Explicit data-store handle. Built once per application,
    opened at startup, disposed at shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {}

        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory SQLite only lives as long as its single connection
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, echo=echo, **kwargs)

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def create_db_and_tables(self) -> None:
        SQLModel.metadata.create_all(self.engine)

    def migrate_legacy_roles(self) -> int:
        """Rewrite the legacy USER role to CUSTOMER. Returns rows touched."""
        with Session(self.engine) as session:
            legacy = session.exec(
                select(User).where(User.role == LEGACY_CUSTOMER_ROLE)
            ).all()
            for user in legacy:
                user.role = Role.CUSTOMER.value
                session.add(user)
            session.commit()
            count = len(legacy)

        if count:
            logger.info(f"Migrated {count} account(s) from role {LEGACY_CUSTOMER_ROLE} to {Role.CUSTOMER}")
        return count

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        # Closing without commit rolls back
        with Session(self.engine) as session:
            yield session

    def close(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session(request: Request) -> Generator[Session, None, None]:
    db: Optional[Database] = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("Database handle not initialised")
    with db.session() as session:
        yield session
