from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # project root
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    DATABASE_URL: str = "sqlite+aiosqlite:///./coupons.db"

    CLAIM_COOLDOWN_MINUTES: int = 60
    # "global": one claim per cooldown window across all visitors (legacy behaviour)
    # "browser": one claim per cooldown window per browser id
    COOLDOWN_SCOPE: Literal["global", "browser"] = "global"

    SEED_ON_STARTUP: bool = True

    # claims.ip_address is NOT NULL; the placeholder is stored unless TRUST_CLIENT_IP
    IP_PLACEHOLDER: str = "client-ip"
    TRUST_CLIENT_IP: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    LOG_LEVEL: str = "INFO"


settings = Settings()
