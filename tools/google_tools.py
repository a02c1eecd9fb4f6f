"""Google Calendar and Gmail helpers.

Services are authorized with OAuth2 user credentials rebuilt from a stored
refresh token on every invocation.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)


TOKEN_URI = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar"]
GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]


def _credentials(settings, refresh_token: str, scopes: List[str]) -> Credentials:
    settings.require("google_client_id", "google_client_secret")
    if not refresh_token:
        settings.require("google_refresh_token")
    creds = Credentials(
        None,
        refresh_token=refresh_token,
        token_uri=TOKEN_URI,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scopes=scopes,
    )
    creds.refresh(Request())
    logger.info("Refreshed Google access token")
    return creds


def calendar_service(settings):
    creds = _credentials(settings, settings.calendar_token, CALENDAR_SCOPES)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def gmail_service(settings):
    creds = _credentials(settings, settings.google_refresh_token, GMAIL_SCOPES)
    return build("gmail", "v1", credentials=creds, cache_discovery=False)


def list_events_around(
    service,
    calendar_id: str,
    now: Optional[datetime] = None,
    window: timedelta = timedelta(hours=24),
    max_results: int = 50,
) -> Tuple[str, List[Dict[str, Any]]]:
    """List single events starting within +/- window of now, ordered by start.

    Returns:
        (calendar name, raw event items)
    """
    now = now or datetime.now(timezone.utc)
    response = (
        service.events()
        .list(
            calendarId=calendar_id,
            timeMin=(now - window).isoformat(),
            timeMax=(now + window).isoformat(),
            maxResults=max_results,
            singleEvents=True,
            orderBy="startTime",
        )
        .execute()
    )
    items = response.get("items", [])
    logger.info("Found %d recent events on calendar %s", len(items), calendar_id)
    return response.get("summary", ""), items


def watch_calendar(
    service,
    calendar_id: str,
    channel_id: str,
    address: str,
    ttl_seconds: int,
) -> Dict[str, Any]:
    """Register a web_hook push channel for event changes on a calendar."""
    body = {
        "id": channel_id,
        "type": "web_hook",
        "address": address,
        "params": {"ttl": str(ttl_seconds)},
    }
    return service.events().watch(calendarId=calendar_id, body=body).execute()


def stop_channel(service, channel_id: str, resource_id: str) -> None:
    """Cancel a calendar push channel so it stops delivering notifications."""
    service.channels().stop(body={"id": channel_id, "resourceId": resource_id}).execute()
    logger.info("Stopped calendar channel %s", channel_id)


def watch_gmail(service, topic_name: str, label_ids: Optional[List[str]] = None) -> Dict[str, Any]:
    """Point mailbox change notifications at a Pub/Sub topic."""
    body = {"topicName": topic_name, "labelIds": label_ids or ["INBOX"]}
    return service.users().watch(userId="me", body=body).execute()


def stop_gmail(service) -> None:
    """Cancel every existing mailbox watch for the user."""
    service.users().stop(userId="me").execute()
    logger.info("Stopped existing Gmail watch")


def expiration_iso(expiration: Optional[str]) -> str:
    """Convert a millisecond epoch string from Google into ISO 8601."""
    if not expiration:
        return "Not provided"
    return datetime.fromtimestamp(int(expiration) / 1000, tz=timezone.utc).isoformat()
