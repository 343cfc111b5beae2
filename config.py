"""
Environment-backed settings and logging setup.
"""

import logging
import os
from typing import List

from dotenv import load_dotenv, find_dotenv

# Load environment variables
load_dotenv(find_dotenv())


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings read from the environment."""

    def __init__(self):
        self.project_name = os.environ.get("PROJECT_NAME", "Household Finance API")
        self.host = os.environ.get("HOST", "0.0.0.0")
        self.port = int(os.environ.get("PORT", 8000))
        self.reload = _env_bool("RELOAD")
        self.log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.cors_origins = self._parse_origins(os.environ.get("CORS_ORIGINS", "*"))
        self.openai_model = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")

    @staticmethod
    def _parse_origins(raw: str) -> List[str]:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


settings = Settings()


def configure_logging(level: str = None):
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
