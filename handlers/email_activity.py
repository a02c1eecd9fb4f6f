"""Stamp 'Last Contact' on every Airtable record that took part in an email.

Payload: {"from": "a@x.com", "to": ["b@y.com", ...]}. The mailbox owner's own
address is left out. Records are matched on AIRTABLE_ACTIVITY_EMAIL_FIELD in
AIRTABLE_ACTIVITY_TABLE; the two are configured as a pair.
"""
import logging
from datetime import date
from typing import List

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from tools.airtable_tools import AirtableClient, formula_equals

logger = logging.getLogger(__name__)


def participants(payload: dict, owner_email: str = "") -> List[str]:
    to = payload.get("to") or []
    if isinstance(to, str):
        to = [to]
    owner = owner_email.strip().lower()
    seen = []
    for address in [payload.get("from"), *to]:
        address = (address or "").strip().lower()
        if address and address != owner and address not in seen:
            seen.append(address)
    return seen


@webhook_handler("email activity", methods=("POST",))
def handler(request: Request, settings: Settings):
    emails = participants(request.json_body(), settings.owner_email)
    if not emails:
        raise BadRequest("No email addresses in request")

    airtable = AirtableClient.from_settings(settings)
    table = settings.airtable_activity_table
    field = settings.airtable_activity_email_field
    today = date.today().isoformat()
    updated = 0
    for email in emails:
        for record in airtable.select(table, formula_equals(field, email)):
            airtable.update(table, record["id"], {"Last Contact": today})
            logger.info("Updated record %s for email %s", record["id"], email)
            updated += 1
    return json_response(200, {"message": "Success", "updated": updated})
