"""Gmail ingestion adapter for Zapier "new email" webhooks.

Payload: {"from_email": "...", "date": "...", "direction": "sent" | "received"}
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from schemas.messages import EmailEvent
from tools.airtable_tools import AirtableClient

logger = logging.getLogger(__name__)


EMAIL_FIELD = "Primary email"


def format_date(timestamp: Optional[str]) -> str:
    """Reduce an email timestamp to the YYYY-MM-DD an Airtable date field takes.

    Aware timestamps are converted to UTC first; a missing timestamp means today.
    """
    if not timestamp:
        return date.today().isoformat()
    parsed = date_parser.parse(timestamp)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def parse_email_event(payload: dict) -> EmailEvent:
    email = (payload.get("from_email") or "").strip().lower()
    if not email:
        raise BadRequest("Missing from_email in request")
    return EmailEvent(
        email=email,
        timestamp=payload.get("date"),
        direction=payload.get("direction") or "received",
    )


@webhook_handler("gmail webhook", methods=("POST",))
def handler(request: Request, settings: Settings):
    event = parse_email_event(request.json_body())
    field = "Last Email Sent" if event.is_sent else "Last Email Received"
    day = format_date(event.timestamp)

    airtable = AirtableClient.from_settings(settings)
    table = settings.airtable_contacts_table
    existing = airtable.find_first(table, EMAIL_FIELD, event.email)
    if existing:
        logger.info("Updating contact %s (%s = %s)", existing["id"], field, day)
        airtable.update(table, existing["id"], {field: day})
        action = "updated"
    else:
        logger.info("Creating contact for %s", event.email)
        airtable.create(table, {EMAIL_FIELD: event.email, field: day})
        action = "created"
    return json_response(200, {"success": True, "action": action})
