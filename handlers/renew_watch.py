"""Watch renewal jobs for Calendar and Gmail push notifications.

Both providers expire a watch after at most 7 days, so an external scheduler
calls these before expiry. Old subscriptions can be cancelled first so the
same change is not delivered twice.
"""
import logging
import time

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from tools import google_tools

logger = logging.getLogger(__name__)


@webhook_handler("calendar watch renewal")
def renew_calendar_watch(request: Request, settings: Settings):
    """Stop any listed channels, then register a fresh web_hook channel.

    Optional body: {"stopChannels": [{"id": "...", "resourceId": "..."}]}
    """
    settings.require("calendar_webhook_url")
    payload = request.json_body()
    service = google_tools.calendar_service(settings)

    stopped = []
    for channel in payload.get("stopChannels") or []:
        if not channel.get("id") or not channel.get("resourceId"):
            raise BadRequest("Each entry in stopChannels needs 'id' and 'resourceId'")
        google_tools.stop_channel(service, channel["id"], channel["resourceId"])
        stopped.append(channel["id"])

    channel_id = f"calendar-watch-{int(time.time() * 1000)}"
    logger.info("Registering calendar channel %s -> %s", channel_id, settings.calendar_webhook_url)
    data = google_tools.watch_calendar(
        service,
        settings.calendar_id,
        channel_id,
        settings.calendar_webhook_url,
        settings.calendar_watch_ttl,
    )
    expiration = google_tools.expiration_iso(data.get("expiration"))
    logger.info("Calendar watch %s registered, expires %s", data.get("id"), expiration)
    return json_response(200, {
        "message": "Calendar watch renewal successful",
        "watchId": data.get("id"),
        "resourceId": data.get("resourceId"),
        "expiration": expiration,
        "stopped": stopped,
    })


@webhook_handler("gmail watch renewal")
def renew_gmail_watch(request: Request, settings: Settings):
    """Re-point the mailbox watch at the Pub/Sub topic.

    Optional body: {"stopExisting": true} cancels the current watch first.
    """
    settings.require("google_project_id")
    payload = request.json_body()
    topic = f"projects/{settings.google_project_id}/topics/{settings.gmail_topic_name}"
    service = google_tools.gmail_service(settings)

    if payload.get("stopExisting"):
        google_tools.stop_gmail(service)

    logger.info("Registering Gmail watch on %s", topic)
    data = google_tools.watch_gmail(service, topic)
    expiration = google_tools.expiration_iso(data.get("expiration"))
    logger.info("Gmail watch renewed, history %s, expires %s", data.get("historyId"), expiration)
    return json_response(200, {
        "message": "Gmail watch renewal successful",
        "historyId": data.get("historyId"),
        "expiration": expiration,
    })
