# tasky/client/config.py
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKY_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    API_URL: str = "http://localhost:8000/api"
    TOKEN_PATH: Path = Path.home() / ".tasky" / "token.json"
