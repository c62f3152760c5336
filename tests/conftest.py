# tests/conftest.py
import os
import pytest
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Явно добавляем путь к проекту
import sys
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Настройки читаются при импорте, поэтому окружение задаем до импорта приложения
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("CLIENT_URL", "http://client.test")

from main import app
from tasky.core.database import Base
from tasky.core.dependencies import get_db
from tasky.client.api import ApiClient
from tasky.client.token_store import MemoryTokenStore

# Явно импортируем все модели SQLAlchemy здесь,
# чтобы Base.metadata знал обо всех таблицах до create_all().
from tasky.users.models import User  # noqa: F401
from tasky.tasks.models import Task  # noqa: F401

# --- Настройка тестовой базы данных ---
# StaticPool: одна in-memory база на все потоки TestClient
SQLALCHEMY_DATABASE_URL = "sqlite://"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Переопределяем зависимость get_db для использования тестовой БД
def override_get_db() -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def setup_database() -> Generator[None, None, None]:
    """
    Фикстура, отвечающая только за создание и удаление таблиц.
    """
    assert len(Base.metadata.tables) > 0, "Модели SQLAlchemy не были импортированы, Base.metadata пуст!"

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(setup_database: None) -> Generator[Session, None, None]:
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture(scope="function")
def client(setup_database: None) -> Generator[TestClient, None, None]:
    yield TestClient(app)


@pytest.fixture(scope="function")
def api_client(setup_database: None) -> Generator[ApiClient, None, None]:
    """Клиентский ApiClient, который ходит в приложение через TestClient."""
    http = TestClient(app, base_url="http://testserver/api")
    yield ApiClient(http=http, token_store=MemoryTokenStore())


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., dict]:
    """Регистрирует пользователя через API и возвращает тело ответа."""

    def _register(name: str = "Ann", email: str = "ann@x.com", password: str = "secret1") -> dict:
        response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def auth_headers(register_user: Callable[..., dict]) -> Callable[..., dict]:
    def _headers(email: str = "ann@x.com", name: str = "Ann") -> dict:
        body = register_user(name=name, email=email)
        return {"Authorization": f"Bearer {body['token']}"}

    return _headers
