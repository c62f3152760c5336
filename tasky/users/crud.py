# tasky/users/crud.py
from sqlalchemy.orm import Session
from typing import Optional
import logging
from .models import User, ACCOUNT_LOCAL, ACCOUNT_GOOGLE

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_google_id(db: Session, google_id: str) -> Optional[User]:
    return db.query(User).filter(User.google_id == google_id).first()


def _save(db: Session, user: User) -> User:
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
        return user
    except Exception as e:
        logger.error(f"Database commit failed while saving user {user.email}: {e}", exc_info=True)
        db.rollback()
        raise


def create_local_user(db: Session, *, name: str, email: str, password_hash: str) -> User:
    logger.info(f"Creating local user: {normalize_email(email)}")
    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password_hash=password_hash,
        account_type=ACCOUNT_LOCAL,
    )
    return _save(db, user)


def create_google_user(db: Session, *, google_id: str, email: str, name: Optional[str]) -> User:
    logger.info(f"Creating Google user: {normalize_email(email)}")
    user = User(
        name=(name or email).strip(),
        email=normalize_email(email),
        password_hash=None,
        account_type=ACCOUNT_GOOGLE,
        google_id=google_id,
    )
    return _save(db, user)
