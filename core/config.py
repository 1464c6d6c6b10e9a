"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads for the validator happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.
The one exception is color detection in core/formatter.py, which follows the
NO_COLOR / FORCE_COLOR conventions shared with other terminal tools.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. FastAPI
      routes and the CLI share the same instance.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. max_document_size -> MAX_DOCUMENT_SIZE).

  @model_validator(mode="after"): Cross-field checks once every field is
      resolved. A misconfigured log level or a non-positive size limit is a
      hard startup failure rather than a surprise at request time.

Layer rule: core/ is the kernel. This module may not import from api/.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ValidationPreset

logger = logging.getLogger("csafvalidator.config")

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Validator settings loaded from environment variables and .env file.

    Every field has a default so Settings() works in tests without a .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    default_preset: ValidationPreset = ValidationPreset.basic
    # CSAF documents are JSON text; anything beyond this is refused by the loader.
    max_document_size: int = 15 * 1024 * 1024
    # Replacement CWE / SSVC tables; the bundled ones under advisory/data/ otherwise.
    cwe_catalog_path: Optional[Path] = None
    ssvc_catalog_path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    log_level: str = "WARNING"

    # ------------------------------------------------------------------
    # HTTP API
    # ------------------------------------------------------------------

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    validate_rate_limit: str = "30/minute"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Normalize LOG_LEVEL and reject impossible size limits.

        Catalog paths that do not exist only log a warning.
        """
        level = self.log_level.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got '{self.log_level}'.")
        self.log_level = level
        if self.max_document_size <= 0:
            raise ValueError("MAX_DOCUMENT_SIZE must be a positive number of bytes.")
        for name in ("cwe_catalog_path", "ssvc_catalog_path"):
            path = getattr(self, name)
            if path is not None and not path.is_file():
                logger.warning(
                    "%s=%s does not exist; rules using it will report an execution error", name.upper(), path
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
