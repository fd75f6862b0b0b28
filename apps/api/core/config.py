"""
Process settings for the plan engine API.

Values come from the environment (and a local .env). Business rules for
plan generation do not live here; see config/plan_rules.yaml and
services.plan_framework.config.ConfigService.
"""
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """Environment-backed settings, validated at startup."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_RELOAD: bool = Field(default=False)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Comma-separated, e.g. "https://plans.example.com,https://coach.example.com"
    CORS_ORIGINS: Optional[str] = Field(default=None)

    # Plan generation
    DEFAULT_PLAN_WEEKS: int = Field(default=12, ge=1, le=52)
    # Goal distances (km) served by the advanced engine; the rest go to the legacy generator
    ADVANCED_MIN_DISTANCE_KM: float = Field(default=15, gt=0)
    ADVANCED_MAX_DISTANCE_KM: float = Field(default=50, gt=0)

    @field_validator("LOG_FORMAT")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return value

    @model_validator(mode="after")
    def _distance_window(self) -> "Settings":
        if self.ADVANCED_MIN_DISTANCE_KM > self.ADVANCED_MAX_DISTANCE_KM:
            raise ValueError("ADVANCED_MIN_DISTANCE_KM must not exceed ADVANCED_MAX_DISTANCE_KM")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def cors_origin_list(self) -> List[str]:
        if not self.CORS_ORIGINS:
            return []
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
