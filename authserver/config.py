from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Auth Server"
    NODE_ENV: Optional[str] = None  # "production" => exported only, "development" => stack traces in 500s
    PORT: int = 5000

    # Extra exact-match CORS origin (e.g. the deployed frontend)
    FRONTEND_URL: Optional[str] = None

    # JWT
    JWT_SECRET: str
    JWT_EXPIRES_MINUTES: int = 60

    # Mongo
    MONGO_CONNECTION: str = "mongodb"
    MONGO_HOST: str = "127.0.0.1"
    MONGO_PORT: int = 27017
    MONGO_DATABASE: str = "auth_server"
    MONGO_USERNAME: Optional[str] = None
    MONGO_PASSWORD: Optional[str] = None
    MONGO_AUTH_SOURCE: str = "admin"

    # Security / Limits
    RATE_AUTH_PER_MIN: int = 20

    # Meta
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

settings = Settings()
