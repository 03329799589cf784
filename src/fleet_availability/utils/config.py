# src/fleet_availability/utils/config.py
"""
Config that works on a laptop AND on the yard server.

Environment first, then .env at the project root, then safe defaults.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///fleet_availability.db").strip()
    OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", "output"))

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return self.DATABASE_URL

    def __repr__(self):
        return f"<Config db={self.DATABASE_URL} output={self.OUTPUT_DIR}>"


class AvailabilitySettings(BaseSettings):
    """
    Tunables for the availability report, loaded from environment variables.
    """
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra='ignore')

    availability_target_pct: float = 90.0
    refresh_interval_seconds: int = 60
    report_retention_days: int = 30


# Singleton
config = Config()
