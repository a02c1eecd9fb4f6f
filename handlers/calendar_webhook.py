"""Calendar Notification Adapter.

Google Calendar push notifications arrive as X-Goog-* headers with no body.
Sync handshakes are acknowledged; change notifications are resolved into
recent events and forwarded once to the downstream processing endpoint.
"""
import logging
from datetime import datetime, timezone

import requests

from config import Settings
from handlers.base import Request, json_response, webhook_handler
from handlers.fetch_calendar_events import fetch_recent_events, serialize_events
from schemas.calendar import CalendarNotification

logger = logging.getLogger(__name__)


def build_forward_payload(notification: CalendarNotification, events: list = None) -> dict:
    payload = {
        "type": "calendar_notification",
        "resource": notification.to_payload(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if events is not None:
        payload["events"] = events
    return payload


@webhook_handler("calendar webhook")
def handler(request: Request, settings: Settings):
    notification = CalendarNotification.from_headers(request.headers)
    logger.info(
        "Calendar notification: channel=%s resource=%s state=%s message=%s changed=%s",
        notification.channel_id,
        notification.resource_id,
        notification.resource_state,
        notification.message_number,
        notification.changed_fields,
    )

    if notification.resource_state == "sync":
        logger.info("Sync handshake, nothing to process")
        return json_response(200, {"message": "Sync notification received and acknowledged"})

    if not notification.is_change:
        return json_response(200, {"message": "Notification received but no action needed"})

    settings.require("calendar_forward_url")
    events = None
    if settings.calendar_forward_events:
        events = serialize_events(fetch_recent_events(settings))

    resp = requests.post(
        settings.calendar_forward_url,
        json=build_forward_payload(notification, events),
        timeout=settings.http_timeout,
    )
    if not resp.ok:
        logger.error("Downstream rejected calendar notification (%s): %s", resp.status_code, resp.text)
        return json_response(502, {
            "error": "Failed to forward calendar notification",
            "details": resp.text,
        })

    try:
        result = resp.json()
    except ValueError:
        result = resp.text
    logger.info("Forwarded calendar notification (%d events)", len(events or []))
    return json_response(200, {
        "message": "Calendar notification processed and forwarded",
        "result": result,
    })
