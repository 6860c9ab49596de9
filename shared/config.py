"""
Shared configuration management for the contributions service.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORS_ALLOWED_ORIGINS = [
    "https://finndore.dev",
    "finnnn.vercel.app",
    "http://localhost:3000",
]


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    service_name: str = "gh"
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3002, validation_alias="PORT")

    # Environment
    env: str = Field(default="production", validation_alias="ENV")
    log_level: str = Field(default="debug", validation_alias="LOG_LEVEL")

    # Observability
    axiom_token: Optional[str] = Field(default=None, validation_alias="AXIOM_TOKEN")
    axiom_dataset: str = Field(default="gh", validation_alias="AXIOM_DATASET")
    otel_exporter: str = Field(
        default="https://api.axiom.co/v1/traces",
        validation_alias="OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    )
    deployment_id: Optional[str] = Field(default=None, validation_alias="RAILWAY_DEPLOYMENT_ID")
    replica_id: Optional[str] = Field(default=None, validation_alias="RAILWAY_REPLICA_ID")

    @property
    def is_development(self) -> bool:
        return self.env.lower() == "development"

    @property
    def enable_tracing(self) -> bool:
        return bool(self.axiom_token)


class ContributionsConfig(BaseConfig):
    """Configuration for the contributions proxy.

    ``user`` is an operator override: when set, every request is served for
    this login and the login in the request path is ignored.
    """

    # Upstream
    github_token: str = Field(validation_alias="GITHUB_TOKEN")
    user: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_USER", "GITHUB_URL"),
    )
    github_graphql_url: str = Field(
        default="https://api.github.com/graphql",
        validation_alias="GITHUB_GRAPHQL_URL",
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="CONTRIBUTIONS_UPSTREAM_TIMEOUT_SECONDS",
    )
    collapse_concurrent_refreshes: bool = Field(
        default=False,
        validation_alias="CONTRIBUTIONS_SINGLE_FLIGHT",
    )

    # CORS (JSON list in the environment)
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ALLOWED_ORIGINS),
        validation_alias="CORS_ALLOWED_ORIGINS",
    )

    @field_validator("user", mode="before")
    @classmethod
    def _blank_user_is_unset(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


def get_config(**overrides) -> ContributionsConfig:
    """Load configuration from the environment; keyword overrides win."""
    return ContributionsConfig(**overrides)
