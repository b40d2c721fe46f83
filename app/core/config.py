import os
from typing import List
from pydantic_settings import BaseSettings
from pathlib import Path

class Settings(BaseSettings):
    # Database configuration
    database_url: str = os.getenv("DATABASE_URL", "")
    db_pool_min: int = 1
    db_pool_max: int = 5
    # Run app/core/schema.sql on startup
    auto_create_schema: bool = False

    # API configuration
    project_name: str = "Furniture Shop Back Office"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Business rules
    low_stock_threshold: int = 5

    # Invoice / receipt branding
    shop_name: str = "MVR FURNITURE MART"
    shop_tagline: str = "Quality Furniture for Every Home"
    currency_prefix: str = "Rs."

    class Config:
        # Ensure we load the repo-level .env regardless of current working directory
        env_file = str(Path(__file__).resolve().parents[2] / ".env")

settings = Settings()
