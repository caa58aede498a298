"""Configuration management for devcenter-deploy."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Deployment configuration settings.

    Every field can be supplied through a ``DEVCENTER_``-prefixed environment
    variable or a ``.env`` file. CLI flags override both.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEVCENTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials and target
    tenant_id: Optional[str] = Field(None, description="Azure AD tenant ID")
    client_id: Optional[str] = Field(None, description="Azure AD application (client) ID")
    client_secret: Optional[str] = Field(None, description="Azure AD client secret")
    app_id: Optional[str] = Field(None, description="Store application ID")
    flight_id: Optional[str] = Field(None, description="Package flight ID, if publishing to a flight")
    package_path: Optional[str] = Field(None, description="Path to the .appx/.msix package to publish")

    # Endpoints
    login_base_url: str = Field(
        "https://login.microsoftonline.com",
        description="Identity provider base URL",
    )
    store_base_url: str = Field(
        "https://manage.devcenter.microsoft.com/v1.0/my",
        description="Store submission API base URL",
    )
    store_resource: str = Field(
        "https://manage.devcenter.microsoft.com",
        description="Resource the access token is scoped to",
    )

    # Timing
    poll_interval_seconds: float = Field(30.0, description="Delay between commit status polls")
    request_timeout_seconds: float = Field(60.0, description="Timeout for a single HTTP call")

    # Observability
    log_level: str = Field("INFO")
    log_format: str = Field("console")
    metrics_enabled: bool = Field(True)

    @field_validator("login_base_url", "store_base_url", "store_resource")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise base URLs so paths can be appended with '/'."""
        return v.rstrip("/")

    @field_validator("poll_interval_seconds")
    @classmethod
    def non_negative_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("poll_interval_seconds must be >= 0")
        return v

    @field_validator("log_format")
    @classmethod
    def known_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v
