from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - Every field has a local-development default; production deployments
          override `DATABASE_DSN` (e.g. `postgresql+asyncpg://...`).
        - The scoring and reference flags keep the lenient behaviour unless
          explicitly switched.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        protected_namespaces=()
    )

    ENV: str = Field(default="dev", description="Deployment environment, e.g. dev/staging/prod")
    SERVICE_NAME: str = Field(default="quiz", description="Service name")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    DATABASE_DSN: str = Field(
        default="sqlite+aiosqlite:///./quiz.db",
        description="SQLAlchemy async DSN",
    )
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    SCORING_COUNT_DUPLICATE_ANSWERS: bool = Field(
        default=True,
        description="Count every submitted answer, even repeats for the same question",
    )
    STRICT_QUIZ_REFERENCES: bool = Field(
        default=False,
        description="Reject questions for unknown quizzes or with an unlisted correct option",
    )

    HOST: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    PORT: int = Field(default=8000, description="Bind port for the HTTP server")


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
