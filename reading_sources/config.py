"""
Runtime settings read from the environment.

Library code never reads the environment directly; the CLI (or a host) calls
load_settings() once and passes the values on. A .env file is honoured when
the caller has run python-dotenv's load_dotenv() first.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .transport import DEFAULT_USER_AGENT
from .logger import get_module_logger

logger = get_module_logger("config")

ENV_PREFIX = "READING_SOURCES_"


class Settings(BaseModel):
    log_level: str = "INFO"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(default=30.0, gt=0)
    cache_dir: Optional[Path] = None        # No content cache when unset

    @field_validator("log_level")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


def load_settings(environ: Optional[dict] = None) -> Settings:
    """
    Build Settings from READING_SOURCES_* variables.

    Invalid values fall back to the defaults with a warning instead of
    stopping the program.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip():
            values[name] = raw.strip()

    try:
        return Settings(**values)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid {ENV_PREFIX}* settings: {e}")
        return Settings()
