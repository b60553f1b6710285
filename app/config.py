from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env (VS Code terminals sometimes don't inject env vars)
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
    )

    DATABASE_URL: str = "sqlite:///./coupons.db"

    # Rendered barcode PNG/SVG files live here
    BARCODE_DIR: str = str(BASE_DIR / "barcodes")

    # Optional JSON file {"2025": {"2025-01-01": "New Year's Day", ...}}
    HOLIDAYS_FILE: Optional[str] = None

    MIN_YEAR: int = 2024
    MAX_YEAR: int = 2030

    BARCODE_MAX_ATTEMPTS: int = 10
    GENERATION_MAX_ATTEMPTS: int = 3

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]


settings = Settings()
