from .contact import (
    ContactRecord,
    MergeRequest,
    AIRTABLE_DISPLAY_FIELDS,
    HUBSPOT_DISPLAY_FIELDS,
)
from .calendar import (
    Attendee,
    CalendarEvent,
    CalendarNotification,
    CalendarRef,
    CHANGE_STATES,
)
from .messages import ChatMessage, EmailEvent

__all__ = [
    "ContactRecord", "MergeRequest", "AIRTABLE_DISPLAY_FIELDS", "HUBSPOT_DISPLAY_FIELDS",
    "Attendee", "CalendarEvent", "CalendarNotification", "CalendarRef", "CHANGE_STATES",
    "ChatMessage", "EmailEvent",
]
