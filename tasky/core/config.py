# tasky/core/config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"
    # Адрес фронтенда, куда возвращаем пользователя после Google OAuth
    CLIENT_URL: str = "http://localhost:5173"
    CORS_ORIGINS: list[str] = ["*"]

    # Параметры БД
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "tasky"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    # Полный URL перекрывает DB_* (например, sqlite для локальной разработки)
    DB_URL: Optional[str] = None

    # JWT
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Google
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/api/auth/google/callback"

    # Scopes
    OAUTH_SCOPES: list[str] = [
        'openid',
        'https://www.googleapis.com/auth/userinfo.profile',
        'https://www.googleapis.com/auth/userinfo.email'
    ]

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


# Создаем единственный экземпляр настроек, который будем импортировать везде
settings = Settings()
