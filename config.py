"""Runtime configuration for the webhook handlers.

Every handler takes an explicit Settings object. When the caller does not
inject one, it is built per invocation from the environment:

    from config import Settings
    settings = Settings.from_env()
    settings.require("airtable_api_key", "airtable_base_id")
"""
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class ConfigError(RuntimeError):
    """Raised when a handler needs a setting that is not configured."""


class Settings(BaseModel):
    airtable_api_key: str = ""
    airtable_base_id: str = ""
    airtable_contacts_table: str = "Contacts"
    airtable_activity_table: str = "Contacts"
    airtable_activity_email_field: str = "Primary email"

    hubspot_access_token: str = ""
    hubspot_portal_id: str = ""
    hubspot_app_host: str = "app-eu1.hubspot.com"

    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    calendar_refresh_token: str = ""
    google_project_id: str = ""
    gmail_topic_name: str = "gmail-email-notifications"

    calendar_id: str = "primary"
    calendar_webhook_url: str = ""
    calendar_watch_ttl: int = 604800  # 7 days, the provider maximum
    calendar_forward_url: str = ""
    calendar_forward_events: bool = True

    owner_email: str = ""
    http_timeout: int = 10

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables (upper-cased field names).

        A local .env file is loaded first when reading the real environment.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        return cls(**values)

    def require(self, *names: str) -> None:
        """Raise ConfigError listing every named setting that is empty."""
        missing = [n.upper() for n in names if not getattr(self, n)]
        if missing:
            raise ConfigError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Set it in the hosting environment or a local .env file."
            )

    @property
    def calendar_token(self) -> str:
        return self.calendar_refresh_token or self.google_refresh_token
