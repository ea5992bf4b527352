import json
from typing import Union

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


POSTGRES_DRIVER_SCHEME = "postgresql+psycopg2://"


def _parse_cors_origins(v: Union[str, list[str]]) -> list[str]:
    """Parse CORS_ORIGINS from env: JSON array, comma-separated, or single URL."""
    if isinstance(v, list):
        return [str(x).strip() for x in v if x]
    s = str(v).strip()
    if not s:
        return []
    if s.startswith("["):
        try:
            return [x.strip() for x in json.loads(s) if x]
        except json.JSONDecodeError:
            pass
    return [x.strip() for x in s.split(",") if x.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    # Empty means "not configured": reads answer with an informational empty
    # list and writes fall back to Netlify Forms or development mode.
    # The Netlify Neon extension injects NETLIFY_DATABASE_URL.
    DATABASE_URL: str = Field(
        default="",
        validation_alias=AliasChoices("DATABASE_URL", "NETLIFY_DATABASE_URL"),
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: object) -> str:
        # Neon hands out postgres:// URLs; pin the psycopg2 driver we install
        # since bare postgresql:// resolves to psycopg 3 on newer SQLAlchemy.
        s = str(v or "").strip()
        for scheme in ("postgres://", "postgresql://"):
            if s.startswith(scheme):
                return POSTGRES_DRIVER_SCHEME + s[len(scheme):]
        return s

    # ── Netlify Forms ─────────────────────────────────────────────────────────
    NETLIFY_API_URL: str = "https://api.netlify.com/api/v1"
    NETLIFY_SITE_ID: str = ""
    NETLIFY_ACCESS_TOKEN: str = ""
    # Public URL of the deployed site; submissions are POSTed to its root.
    NETLIFY_SITE_URL: str = ""
    NETLIFY_FORM_NAME: str = "movie-review"

    # ── Server ────────────────────────────────────────────────────────────────
    PORT: int = 8000

    # ── CORS ──────────────────────────────────────────────────────────────────
    # Env: comma-separated (https://a.com,https://b.com) or JSON ["https://a.com"]
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:8888",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v: object) -> list[str]:
        if v is None:
            return []
        return _parse_cors_origins(v)

    # ── App ───────────────────────────────────────────────────────────────────
    APP_ENV: str = "development"  # development | production
    ENABLE_DOCS: bool = True
    LOG_LEVEL: str = "INFO"

    @property
    def is_dev(self) -> bool:
        return self.APP_ENV == "development"

    @property
    def database_configured(self) -> bool:
        return bool(self.DATABASE_URL)

    @property
    def forms_configured(self) -> bool:
        return bool(self.NETLIFY_SITE_ID or self.NETLIFY_ACCESS_TOKEN or self.NETLIFY_SITE_URL)


settings = Settings()
