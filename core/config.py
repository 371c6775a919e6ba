"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads happen here. No module should call os.getenv()
or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. redis_url -> REDIS_URL). Type coercion and validation are built in.

  @model_validator(mode="after"): Cross-field validation once every field is
      resolved. Rejects settings that would make sessions or hashing unusable
      at startup instead of on the first login.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("userauth.config")

SEVEN_DAYS = 60 * 60 * 24 * 7


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"

    # CORS origins allowed to send the session cookie. JSON list in the environment, e.g.
    # ALLOWED_ORIGINS='["http://localhost:3000","https://app.example.com"]'
    allowed_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # User database (SQLAlchemy URL)
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///./userauth.db"
    db_pool_size: int = 5
    db_pool_timeout_seconds: float = 3.0

    # ------------------------------------------------------------------
    # Session store (Redis)
    # ------------------------------------------------------------------

    redis_url: str = "redis://localhost:6379/0"
    # Applied to both connect and per-command socket timeouts.
    store_timeout_seconds: float = 3.0

    # ------------------------------------------------------------------
    # Sessions / cookies
    # ------------------------------------------------------------------

    session_ttl_seconds: int = SEVEN_DAYS
    session_cookie_name: str = "session_id"
    secure_cookies: bool = False

    # ------------------------------------------------------------------
    # Password hashing (argon2id work factors)
    # ------------------------------------------------------------------

    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    argon2_parallelism: int = 4

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Reject values that would break sessions or hashing at runtime.

        A zero TTL makes Redis reject SET EX outright; a zero timeout turns
        every store call into an immediate failure. argon2 refuses a memory
        cost below 8 KiB per lane.
        """
        if self.session_ttl_seconds <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be a positive number of seconds.")
        if self.store_timeout_seconds <= 0 or self.db_pool_timeout_seconds <= 0:
            raise ValueError("Store timeouts must be positive.")
        if self.argon2_time_cost < 1 or self.argon2_parallelism < 1:
            raise ValueError("ARGON2_TIME_COST and ARGON2_PARALLELISM must be at least 1.")
        if self.argon2_memory_cost < 8 * self.argon2_parallelism:
            raise ValueError("ARGON2_MEMORY_COST must be at least 8 KiB per parallel lane.")
        if self.debug and not self.secure_cookies:
            logger.warning("Running with DEBUG=true and SECURE_COOKIES=false -- do not use in production.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
