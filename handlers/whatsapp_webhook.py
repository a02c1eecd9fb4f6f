"""WhatsApp ingestion adapter for TimelinesAI message webhooks.

Each message updates the counterpart's last WhatsApp timestamp in Airtable,
creating the contact when the phone number is unknown. Group chats are
ignored.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from schemas.messages import ChatMessage
from tools.airtable_tools import AirtableClient

logger = logging.getLogger(__name__)


PHONE_FIELD = "Mobile Phone Number"
MIN_PHONE_DIGITS = 10


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Return '+' followed by the digits of raw, or None if too short.

    '+1 (415) 555-0100' -> '+14155550100'
    """
    digits = re.sub(r"\D", "", raw or "")
    if len(digits) < MIN_PHONE_DIGITS:
        return None
    return f"+{digits}"


def _text(value: Any) -> Optional[str]:
    """Numbers arrive as JSON numbers from some senders; keep them as text."""
    return None if value is None else str(value)


def parse_messages(payload: Dict[str, Any]) -> List[Optional[ChatMessage]]:
    """Read either the aggregated ('messages') or single ('message') format.

    A message's own 'phone' wins over the chat's phone. Entries that are not
    objects come back as None so the caller can count them as skipped.
    """
    chat = payload.get("chat") or {}
    if isinstance(payload.get("messages"), list):
        raw_messages = payload["messages"]
    elif isinstance(payload.get("message"), dict):
        raw_messages = [payload["message"]]
    else:
        raise BadRequest("Invalid webhook format received: expected 'messages' or 'message'")

    messages: List[Optional[ChatMessage]] = []
    for m in raw_messages:
        if not isinstance(m, dict):
            logger.warning("Skipping malformed message entry: %r", m)
            messages.append(None)
            continue
        messages.append(ChatMessage(
            phone_number=_text(m.get("phone") or chat.get("phone")),
            timestamp=_text(m.get("timestamp")),
            direction=_text(m.get("direction")) or "received",
            text=_text(m.get("text")),
            message_id=_text(m.get("message_id")),
        ))
    return messages


def is_group_chat(payload: Dict[str, Any]) -> bool:
    return bool((payload.get("chat") or {}).get("is_group"))


def record_message(airtable: AirtableClient, table: str, phone: str, message: ChatMessage) -> str:
    """Update or create the contact for one message. Returns 'updated' or 'created'."""
    field = "Last Whatsapp Sent" if message.is_sent else "Last Whatsapp Received"
    existing = airtable.find_first(table, PHONE_FIELD, phone)
    if existing:
        airtable.update(table, existing["id"], {field: message.timestamp})
        return "updated"
    airtable.create(table, {PHONE_FIELD: phone, field: message.timestamp})
    return "created"


@webhook_handler("whatsapp webhook", methods=("POST",))
def handler(request: Request, settings: Settings):
    payload = request.json_body()
    if is_group_chat(payload):
        logger.info("Group chat message, skipping")
        return json_response(200, {"success": True, "message": "No messages to process"})

    messages = parse_messages(payload)
    logger.info("Processing %d message(s)", len(messages))
    airtable = AirtableClient.from_settings(settings)
    table = settings.airtable_contacts_table

    counts = {"updated": 0, "created": 0, "skipped": 0}
    for message in messages:
        if message is None:
            counts["skipped"] += 1
            continue
        phone = normalize_phone(message.phone_number)
        if phone is None:
            logger.warning("Skipping invalid phone number: %r", message.phone_number)
            counts["skipped"] += 1
            continue
        counts[record_message(airtable, table, phone, message)] += 1

    logger.info("WhatsApp webhook done: %s", counts)
    return json_response(200, {
        "success": True,
        "processed": counts["updated"] + counts["created"],
        **counts,
    })
