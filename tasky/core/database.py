# tasky/core/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from contextlib import contextmanager
import logging
from .config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # SQLite по умолчанию запрещает использовать соединение из другого потока
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


try:
    engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args(settings.DATABASE_URL))
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base = declarative_base()
    logger.info("Database engine and session created successfully.")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}", exc_info=True)
    raise


@contextmanager
def get_db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
