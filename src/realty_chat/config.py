from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Postgres shared with the marketplace backend
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    JWT_SECRET: str = ""
    JWT_VERIFY_MODE: Literal["hs256", "jwks"] = "hs256"
    JWT_ALGORITHM: str = "HS256"
    JWKS_URL: str | None = None

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    WS_HEARTBEAT_SECONDS: int = 30
    WS_REQUIRE_TOKEN: bool = False

    AVATAR_FALLBACK_URL: str = "https://i.pravatar.cc/100?u={user_id}"
    NOTIFICATION_POPUP_TITLE: str = "💬 Nova mensagem recebida"

    HOST: str = "0.0.0.0"
    PORT: int = 3333
    LOG_LEVEL: str = "info"

    @property
    def database_url(self) -> URL:
        return URL.create(
            "postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.POSTGRES_DB,
        )

    def avatar_for(self, user_id: int, avatar_url: str | None) -> str:
        """The user's avatar, or the generated placeholder when none is set."""
        return avatar_url or self.AVATAR_FALLBACK_URL.format(user_id=user_id)


settings = Settings()  # type: ignore[call-arg]
