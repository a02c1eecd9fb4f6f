"""Calendar push notification and event schemas."""
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


CHANGE_STATES = ("exists", "update", "delete")


class CalendarNotification(BaseModel):
    channel_id: str = ""
    resource_id: str = ""
    resource_state: str = ""
    message_number: int = 0
    changed_fields: List[str] = Field(default_factory=list)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "CalendarNotification":
        """Read the X-Goog-* headers. Keys are expected lower-cased."""
        raw_number = headers.get("x-goog-message-number", "")
        changed = headers.get("x-goog-changed", "")
        return cls(
            channel_id=headers.get("x-goog-channel-id", ""),
            resource_id=headers.get("x-goog-resource-id", ""),
            resource_state=headers.get("x-goog-resource-state", ""),
            message_number=int(raw_number) if raw_number.isdigit() else 0,
            changed_fields=[f.strip() for f in changed.split(",") if f.strip()],
        )

    @property
    def is_change(self) -> bool:
        return self.resource_state in CHANGE_STATES

    def to_payload(self) -> Dict[str, Any]:
        return {
            "channelId": self.channel_id,
            "resourceId": self.resource_id,
            "resourceState": self.resource_state,
            "messageNumber": self.message_number,
            "changedFields": self.changed_fields,
        }


class Attendee(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    response_status: Optional[str] = Field(default=None, alias="responseStatus")


class CalendarRef(BaseModel):
    id: str
    name: str


class CalendarEvent(BaseModel):
    """A calendar event flattened for downstream consumers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    google_meeting_id: str
    summary: str = "Untitled Event"
    description: Optional[str] = None
    start: Dict[str, Any] = Field(default_factory=dict)
    meeting_date: Optional[str] = None
    end: Dict[str, Any] = Field(default_factory=dict)
    status: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    color_id: Optional[str] = Field(default=None, alias="colorId")
    calendar_colour: Optional[str] = None
    calendar: CalendarRef
    attendees: List[Attendee] = Field(default_factory=list)

    @classmethod
    def from_api(cls, item: Dict[str, Any], calendar_id: str, calendar_name: str) -> "CalendarEvent":
        start = item.get("start") or {}
        color_id = item.get("colorId")
        return cls(
            id=item["id"],
            google_meeting_id=item["id"],
            summary=item.get("summary") or "Untitled Event",
            description=item.get("description"),
            start=start,
            meeting_date=start.get("dateTime") or start.get("date"),
            end=item.get("end") or {},
            status=item.get("status"),
            created=item.get("created"),
            updated=item.get("updated"),
            color_id=color_id,
            calendar_colour=f"{color_id} {calendar_name or 'Calendar'}" if color_id else None,
            calendar=CalendarRef(id=calendar_id, name=calendar_name or "Google Calendar"),
            attendees=[Attendee(**a) for a in item.get("attendees", [])],
        )

    def attendee_emails(self) -> set[str]:
        return {a.email.lower() for a in self.attendees if a.email}
