"""
Doula JSON Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py (bootstrap) and by tests that build their own app.
When:  Loaded once at module import time; validated before the app starts.
"""

import re
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_COLLECTIONS = ["bookings", "doulas", "services", "paychecks"]

# Collection names become file names and URL segments.
COLLECTION_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")

# Path segment taken by the aggregate endpoint (GET /api/all).
RESERVED_COLLECTION_NAMES = {"all"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a default, so the server starts with no environment at
    all: port 4000, data under ./data, the four standard collections.
    """

    # ── Server ────────────────────────────────────────────────────────────
    # PORT is the one knob most deployments touch (Heroku/Render style).
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000, ge=1, le=65535)

    # ── Storage ───────────────────────────────────────────────────────────
    # What: Directory holding one `<collection>.json` file per collection
    # Relative paths resolve against the process CWD.
    data_dir: str = Field(default="./data")

    # What: Collections exposed under /api/<name>
    # Env format: JSON list, e.g. COLLECTIONS='["bookings","doulas"]'
    collections: List[str] = Field(default_factory=lambda: list(DEFAULT_COLLECTIONS))

    # What: Indent used when pretty-printing collection files
    json_indent: int = Field(default=2, ge=0, le=8)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" lets every origin in.
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def cors_allow_all(self) -> bool:
        return "*" in self.cors_origins_list

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("collections")
    @classmethod
    def validate_collections(cls, v: List[str]) -> List[str]:
        """
        Collection names must be safe as both file names and URL segments,
        unique, and must not shadow the aggregate endpoint.
        """
        if not v:
            raise ValueError("At least one collection must be configured")
        seen = set()
        for name in v:
            if not COLLECTION_NAME_PATTERN.match(name):
                raise ValueError(
                    f"Invalid collection name '{name}'. "
                    f"Use lowercase letters, digits, '-' or '_', starting with a letter."
                )
            if name in RESERVED_COLLECTION_NAMES:
                raise ValueError(f"Collection name '{name}' is reserved")
            if name in seen:
                raise ValueError(f"Duplicate collection name '{name}'")
            seen.add(name)
        return v

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # PORT and port both work
    }


# Singleton instance, imported by main.py for the default app
settings = Settings()
