# tasky/auth/security.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tasky.core.config import settings
from tasky.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

# bcrypt сам солит хэш; cost 12
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Тратит столько же времени, сколько настоящая проверка пароля."""
    pwd_context.dummy_verify()


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    to_encode = {"sub": user_id, "iat": now, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Проверяет подпись и срок действия токена.

    Returns:
        Идентификатор пользователя из claim 'sub'.

    Raises:
        UnauthorizedError: если токен испорчен, просрочен или подписан другим ключом.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise UnauthorizedError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise UnauthorizedError("Invalid or expired token")
    return user_id
