# tasky/core/dependencies.py
from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from tasky.core.database import get_db_session
from tasky.core.errors import UnauthorizedError
from tasky.users import models as user_models
from tasky.auth.service import AuthService


# Зависимость для получения сессии БД
def get_db() -> Generator[Session, None, None]:
    with get_db_session() as db:
        yield db


def get_current_user(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> user_models.User:
    if not authorization:
        raise UnauthorizedError("Access token required")

    scheme, _, token = authorization.partition(' ')
    if not scheme or scheme.lower() != 'bearer' or not token.strip():
        raise UnauthorizedError("Invalid authorization scheme")

    return AuthService(db).authenticate_request(token.strip())
