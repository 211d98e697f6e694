from typing import Any, ClassVar, FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./scorehub.db"

    # Database pool (applies to client/server DBs like Postgres; SQLite uses NullPool)
    DB_POOL_PRE_PING: bool = True
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    # Applied for Postgres connections only.
    DB_POSTGRES_ISOLATION_LEVEL: str = "READ COMMITTED"

    # JWT
    # NOTE: This default is intentionally insecure and must never be used outside dev/test.
    DEFAULT_JWT_SECRET: ClassVar[str] = "dev-secret-change-me-please-32chars!!"
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 12 * 60

    # Application
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Environment
    # Used for guardrails. Suggested values: dev|staging|prod.
    ENV: str = "dev"

    # Local dev servers on any port, localhost only.
    CORS_ORIGIN_REGEX: str = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    # Join PIN / access code allocation
    CODE_MAX_ATTEMPTS: int = 100

    # Timestamps in CSV exports are rendered in this zone.
    DISPLAY_TIMEZONE: str = "Asia/Taipei"

    # Field limits
    ACTIVITY_NAME_MAX_LENGTH: int = 100
    ACTIVITY_DESCRIPTION_MAX_LENGTH: int = 500
    PARTICIPANT_NAME_MAX_LENGTH: int = 100
    SCORE_REASON_MAX_LENGTH: int = 500
    USER_DISPLAY_NAME_MAX_LENGTH: int = 100

    # Rate limiting (in-memory, best-effort)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_REQUESTS_PER_WINDOW: int = 240

    # Observability
    METRICS_ENABLED: bool = True

    # --- Guardrails ---
    _SAFE_ENVS: ClassVar[FrozenSet[str]] = frozenset({"dev", "development", "test", "testing"})
    _UNSAFE_PLACEHOLDERS: ClassVar[FrozenSet[str]] = frozenset(
        {
            "change-me-in-production",
            "change-me",
            "changeme",
            "",
        }
    )

    def model_post_init(self, __context: Any) -> None:
        # Runs on every Settings() instantiation (including module-level `settings = Settings()`).
        self._guardrail_default_secrets()

    def _guardrail_default_secrets(self) -> None:
        env = (self.ENV or "").strip().lower()
        if env in self._SAFE_ENVS:
            return

        jwt_secret = (self.JWT_SECRET or "").strip()
        lowered = jwt_secret.lower()
        if (
            jwt_secret == self.DEFAULT_JWT_SECRET
            or lowered in self._UNSAFE_PLACEHOLDERS
            or "change-me" in lowered
        ):
            raise RuntimeError(
                "Refusing to start with an insecure default/placeholder JWT_SECRET outside dev/test. "
                f"Got ENV={self.ENV!r}. "
                "Set a secure value via the JWT_SECRET env var, or run with ENV=dev/test."
            )


settings = Settings()


def get_settings() -> Settings:
    """Return the global settings instance.

    Provided as a callable for FastAPI Depends() and test mocking convenience.
    """
    return settings
