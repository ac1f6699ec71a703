from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from gradtrack.config import Settings, get_settings


def engine_options(settings: Settings) -> dict[str, Any]:
    url = settings.sqlalchemy_database_url
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    connect_args: dict[str, Any] = {"connect_timeout": settings.db_pool_timeout_sec}
    if settings.is_production:
        connect_args["sslmode"] = "require"
    return {
        "connect_args": connect_args,
        "pool_size": settings.db_pool_size,
        "max_overflow": 0,
        "pool_timeout": settings.db_pool_timeout_sec,
        "pool_pre_ping": True,
    }


settings = get_settings()
engine = create_engine(settings.sqlalchemy_database_url, future=True, **engine_options(settings))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False)


def get_db_session() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
