"""Event Fetcher: resolve a calendar change notification into concrete events.

A resource id does not identify a single event, so the fetcher lists every
event within 24 hours either side of now and lets consumers rely on recency.
"""
import logging
from datetime import datetime
from typing import List, Optional

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from schemas.calendar import CalendarEvent
from tools import google_tools

logger = logging.getLogger(__name__)


def fetch_recent_events(
    settings: Settings,
    calendar_id: Optional[str] = None,
    service=None,
    now: Optional[datetime] = None,
) -> List[CalendarEvent]:
    """Return normalized events around now for a calendar. Read only.

    Args:
        settings: Runtime settings (OAuth client and refresh token).
        calendar_id: Calendar to read; defaults to settings.calendar_id.
        service: Optional pre-built Calendar API service.
        now: Centre of the time window; defaults to the current UTC time.
    """
    cal_id = calendar_id or settings.calendar_id
    service = service or google_tools.calendar_service(settings)
    calendar_name, items = google_tools.list_events_around(service, cal_id, now=now)
    return [CalendarEvent.from_api(item, cal_id, calendar_name) for item in items]


def serialize_events(events: List[CalendarEvent]) -> list:
    return [e.model_dump(by_alias=True) for e in events]


@webhook_handler("fetch calendar events")
def handler(request: Request, settings: Settings):
    payload = request.json_body()
    logger.info("Fetch request for resource %s", payload.get("resourceId"))

    resource_id = payload.get("resourceId")
    if not resource_id:
        raise BadRequest("Missing resourceId in request")
    calendar_id = payload.get("calendarId") or settings.calendar_id

    events = fetch_recent_events(settings, calendar_id)
    return json_response(200, {
        "resourceId": resource_id,
        "calendarId": calendar_id,
        "events": serialize_events(events),
    })
