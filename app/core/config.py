# app/core/config.py

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False
    STORE_NAME: str = "Leonisa's Store"
    CURRENCY_SYMBOL: str = "₱"

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str
    DB_TIMEOUT_SECONDS: int = 10

    # Point of sale
    POS_TAX_RATE: Decimal = Decimal("0.08")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Seeding (default catalog + default accounts)
    SEED_DEFAULTS: bool = True
    ADMIN_PASSWORD: str | None = None
    CASHIER_PASSWORD: str | None = None

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
