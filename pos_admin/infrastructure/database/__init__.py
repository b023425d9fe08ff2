"""
Database initialization and session management.
"""

from collections.abc import Generator
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlmodel import SQLModel

from pos_admin.core.config import get_engine_url, get_settings
from pos_admin.core.logging_config import get_logger
from pos_admin.infrastructure.database import models  # noqa: F401  (registers tables)

logger = get_logger("database")

DATABASE_URL = get_engine_url(get_settings().database_type)

if "sqlite" in DATABASE_URL:
    engine = create_engine(DATABASE_URL, echo=False, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, echo=False)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency - Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Initialize database - create all tables."""
    bind = bind or engine
    url = make_url(str(bind.url))
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    SQLModel.metadata.create_all(bind=bind)
    logger.info("database_initialized", extra={"backend": url.get_backend_name()})


if __name__ == "__main__":
    init_db()
    print("Database initialized successfully!")
