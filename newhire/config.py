"""Configuration for the onboarding service using environment variables."""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment Variables:
        STAFF_CEO_EMAIL: First staff recipient for onboarding alerts
        STAFF_DEV_EMAIL: Second staff recipient for onboarding alerts
        DISCORD_INVITE_URL: Invite link shown in the final welcome message
        BACKEND_BASE_URL: Base URL of the backend HTTP functions
        REDIS_URL: Redis connection URL for session storage (optional)
        HOST, PORT, PORT_TRIES: Where ``python -m newhire`` listens
        OPEN_BROWSER, RELOAD: Development server conveniences
        NEWHIRE_LOG_LEVEL: Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Staff directory
    staff_ceo_email: str = Field(
        default="",
        validation_alias="STAFF_CEO_EMAIL",
        description="CEO address for staff notifications (empty to skip)",
    )
    staff_dev_email: str = Field(
        default="",
        validation_alias="STAFF_DEV_EMAIL",
        description="Developer address for staff notifications (empty to skip)",
    )
    ceo_contact_display_name: str = Field(
        default="Corey LTS (CEO)",
        validation_alias="CEO_CONTACT_DISPLAY_NAME",
        description="How the CEO is named in the welcome message",
    )
    support_contact_name: str = Field(
        default="Adam Black",
        validation_alias="SUPPORT_CONTACT_NAME",
        description="Human support contact named in the welcome message",
    )
    discord_invite_url: str = Field(
        default="https://discord.gg/yourinvite",
        validation_alias="DISCORD_INVITE_URL",
        description="Discord server invite with the training materials",
    )

    # Backend functions (e-signature and email)
    backend_base_url: str = Field(
        default="http://localhost:8080/_functions",
        validation_alias="BACKEND_BASE_URL",
        description="Base URL for the contract and notification functions",
    )
    backend_timeout: float = Field(
        default=15.0,
        validation_alias="BACKEND_TIMEOUT",
        description="Timeout in seconds for a single backend call",
    )

    # Session storage
    redis_url: str = Field(
        default="",
        validation_alias="REDIS_URL",
        description="Redis URL; sessions are kept in memory when empty",
    )
    session_ttl_seconds: int = Field(
        default=86400,
        validation_alias="SESSION_TTL_SECONDS",
        description="Expiry for stored sessions in Redis",
    )

    # Local server (python -m newhire)
    host: str = Field(
        default="127.0.0.1",
        validation_alias="HOST",
        description="Interface the development server binds to",
    )
    port: int = Field(
        default=8002,
        validation_alias="PORT",
        description="First port tried by the development server",
    )
    port_tries: int = Field(
        default=20,
        validation_alias="PORT_TRIES",
        description="How many consecutive ports to try before giving up",
    )
    open_browser: bool = Field(
        default=True,
        validation_alias="OPEN_BROWSER",
        description="Open the chat page in a browser once the server starts",
    )
    reload: bool = Field(
        default=False,
        validation_alias="RELOAD",
        description="Restart the server when source files change",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias="NEWHIRE_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @property
    def staff_recipients(self) -> list[str]:
        """Configured staff addresses, skipping the ones left empty."""
        candidates = [self.staff_ceo_email, self.staff_dev_email]
        return [c.strip() for c in candidates if c and c.strip()]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
