from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "SkyJourney API"
    # comma-separated; empty means the local dev frontends
    CORS_ORIGINS: str = ""

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    SEED_DEMO_DATA: bool = True
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_EMAIL: str = "admin@skyjourney.com"

    BOOKING_REF_PREFIX: str = "SKY"
    BOOKING_REF_MAX_ATTEMPTS: int = 10

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()


settings = Settings()
