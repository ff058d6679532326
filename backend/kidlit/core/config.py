from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "https://kids-paradise-liart.vercel.app",
    "https://kidlit-library-quest.vercel.app",
)


def parse_origins(value: str | None) -> list[str]:
    """Split a comma-separated origin list, dropping blanks."""
    if not value:
        return []
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Later files win, so a local .env overrides the project root one.
        env_file=("../.env", ".env"),
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    PROJECT_NAME: str = "kidlit-backend"
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )
    LOG_LEVEL: str = "INFO"

    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    LLM_TIMEOUT_SECONDS: float = 30.0

    SUPABASE_URL: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    SUPABASE_SERVICE_ROLE_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "SUPABASE_SERVICE_ROLE_KEY", "VITE_SUPABASE_SERVICE_ROLE_KEY"
        ),
    )
    PROFILES_TABLE: str = "profiles"

    CORS_ORIGIN: str = ""

    CLIENT_DIST_DIR: Path = Path("client/dist")
    PRODUCTION_DIST_DIR: Path = Path("dist")

    @property
    def allowed_origins(self) -> list[str]:
        origins = list(DEFAULT_ALLOWED_ORIGINS) + parse_origins(self.CORS_ORIGIN)
        return list(dict.fromkeys(origins))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def static_dir(self) -> Path:
        return self.PRODUCTION_DIST_DIR if self.is_production else self.CLIENT_DIST_DIR

    @property
    def identity_store_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()
