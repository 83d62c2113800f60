"""Sync configuration loaded from environment variables.

The SaaS worker passes decrypted credentials straight into AdapterConfig;
this settings class covers the standalone CLI and local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from src.boatsync.adapter import AdapterConfig
from src.boatsync.models import SessionWindow


def _default_sessions() -> dict[str, SessionWindow]:
    return {
        "morning1": SessionWindow(start="06:30", end="07:30"),
        "morning2": SessionWindow(start="07:30", end="08:30"),
    }


class SyncConfig(BaseSettings):
    """Sync configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # RevSport settings (HTML scraping, no public API)
    revsport_url: str = Field(
        default="https://www.lakemacquarierowingclub.org.au",
        description="RevSport club site base URL",
    )
    revsport_user: str = Field(
        default="",
        description="RevSport username",
    )
    revsport_pass: str = Field(
        default="",
        description="RevSport password",
    )

    # Club settings
    club_timezone: str = Field(
        default="Australia/Sydney",
        description="IANA timezone used for calendar query parameters",
    )
    days_ahead: int = Field(
        default=7,
        ge=1,
        description="Number of days of bookings to fetch, starting today",
    )
    sessions: dict[str, SessionWindow] = Field(
        default_factory=_default_sessions,
        description='Named booking windows as JSON, e.g. {"morning1": {"start": "06:30", "end": "07:30"}}',
    )

    # HTTP settings
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout in seconds",
    )

    # Logging
    debug: bool = Field(
        default=False,
        description="Verbose client logging (forces DEBUG level)",
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def adapter_config(self) -> AdapterConfig:
        """Build the adapter configuration for this club."""
        return AdapterConfig(
            url=self.revsport_url,
            username=self.revsport_user,
            password=self.revsport_pass,
            timezone=self.club_timezone,
            sessions=self.sessions,
            debug=self.debug,
            request_timeout=self.request_timeout,
        )


# Singleton pattern
_config: SyncConfig | None = None


def get_config() -> SyncConfig:
    """Get the sync configuration singleton.

    Returns:
        SyncConfig: Sync configuration instance
    """
    global _config
    if _config is None:
        _config = SyncConfig()
    return _config
