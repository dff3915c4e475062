"""Runtime settings loaded from the environment (and a local .env file)."""
from __future__ import annotations

import os
import threading
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

try:
    load_dotenv()
except Exception as e:  # pragma: no cover
    logger.warning(f"Failed to load .env file: {e}")


DEFAULT_MAX_INHERIT_DEPTH = 16
DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_DATABASE_URL = "sqlite:///:memory:"


class Settings(BaseModel):
    max_inherit_depth: int = Field(DEFAULT_MAX_INHERIT_DEPTH, ge=1)
    bcrypt_rounds: int = Field(DEFAULT_BCRYPT_ROUNDS, ge=4, le=31)
    database_url: str = DEFAULT_DATABASE_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``ACL_*`` and ``DATABASE_URL`` variables.

        Raises:
            ValueError: If a variable is set to an unusable value.
        """
        values = {}
        depth = os.getenv("ACL_MAX_INHERIT_DEPTH")
        if depth:
            values["max_inherit_depth"] = depth
        rounds = os.getenv("ACL_BCRYPT_ROUNDS")
        if rounds:
            values["bcrypt_rounds"] = rounds
        database_url = os.getenv("DATABASE_URL")
        if database_url:
            values["database_url"] = database_url

        try:
            return cls(**values)
        except ValidationError as e:
            raise ValueError(f"Invalid ACL settings: {e}") from e


_settings: Optional[Settings] = None
_settings_lock = threading.Lock()


def get_settings(reset: bool = False) -> Settings:
    """Return the cached settings, reading the environment on first use.

    Args:
        reset: Re-read the environment (for testing)
    """
    global _settings

    with _settings_lock:
        if _settings is None or reset:
            _settings = Settings.from_env()
    return _settings
