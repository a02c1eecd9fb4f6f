"""Contact record and merge request schemas."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


Source = Literal["airtable", "hubspot"]

# Fields shown in the reconciliation view, with their display labels.
AIRTABLE_DISPLAY_FIELDS = {
    "Contact": "Name",
    "Primary email": "Email",
    "Mobile Phone Number": "Phone",
    "Category": "Category",
    "Last Contact": "Last contact",
    "Last Email Sent": "Last email sent",
    "Last Email Received": "Last email received",
    "Last Whatsapp Sent": "Last WhatsApp sent",
    "Last Whatsapp Received": "Last WhatsApp received",
    "HubSpot ID": "HubSpot ID",
}

HUBSPOT_DISPLAY_FIELDS = {
    "firstname": "First name",
    "lastname": "Last name",
    "email": "Email",
    "hs_additional_emails": "Other emails",
    "phone": "Phone",
    "mobilephone": "Mobile",
    "company": "Company",
    "contact_category": "Category",
    "notes_last_contacted": "Last contacted",
    "airtable_id": "Airtable ID",
    "createdate": "Created",
}

EMAIL_FIELDS = {"Primary email", "email", "hs_additional_emails"}


class ContactRecord(BaseModel):
    """One person as held by one store, reduced to the curated display fields."""

    source: Source
    id: str
    fields: Dict[str, Any] = Field(default_factory=dict)
    emails: List[str] = Field(default_factory=list)
    url: Optional[str] = None

    @classmethod
    def from_airtable(cls, record: Dict[str, Any]) -> "ContactRecord":
        raw = record.get("fields", {})
        return cls(
            source="airtable",
            id=record["id"],
            fields=_curate(raw, AIRTABLE_DISPLAY_FIELDS),
            emails=_emails(raw),
        )

    @classmethod
    def from_hubspot(cls, contact: Dict[str, Any], url: Optional[str] = None) -> "ContactRecord":
        raw = contact.get("properties", {})
        return cls(
            source="hubspot",
            id=str(contact["id"]),
            fields=_curate(raw, HUBSPOT_DISPLAY_FIELDS),
            emails=_emails(raw),
            url=url,
        )


def _curate(raw: Dict[str, Any], labels: Dict[str, str]) -> Dict[str, Any]:
    return {label: raw[key] for key, label in labels.items() if raw.get(key) not in (None, "")}


def _emails(raw: Dict[str, Any]) -> List[str]:
    found = []
    for key in EMAIL_FIELDS:
        value = raw.get(key)
        if value:
            found.extend(e.strip().lower() for e in str(value).replace(",", ";").split(";") if e.strip())
    return sorted(set(found))


class MergeRequest(BaseModel):
    """Ordered CRM ids: the first is kept, the rest are merged into it.

    Only the first two ids are merged per request; anything after the
    second is reported back as ignored.
    """

    record_ids: List[str] = Field(min_length=2)

    @classmethod
    def from_query(cls, raw: str) -> "MergeRequest":
        return cls(record_ids=[r.strip() for r in (raw or "").split(",") if r.strip()])

    @property
    def primary(self) -> str:
        return self.record_ids[0]

    @property
    def secondary(self) -> str:
        return self.record_ids[1]

    @property
    def ignored(self) -> List[str]:
        return self.record_ids[2:]
