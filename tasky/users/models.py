# tasky/users/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from tasky.core.database import Base

ACCOUNT_LOCAL = "local"
ACCOUNT_GOOGLE = "google"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # У Google-аккаунтов пароля нет
    password_hash = Column(String(255), nullable=True)
    account_type = Column(String(16), nullable=False, default=ACCOUNT_LOCAL)
    google_id = Column(String(255), unique=True, index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
