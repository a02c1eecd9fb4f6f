"""Contact Reconciliation View.

Looks a contact key up in both Airtable and HubSpot, renders the matches side
by side, and runs the delete / merge / id-sync actions the page posts back.

    GET ?contactId=Jane Doe                 -> HTML view
    GET ?contactId=jane@acme.com&format=json
    GET ?contactId=...&includeEvents=true   -> view plus recent meetings
    GET ?action=delete&source=hubspot&recordId=123
    GET ?action=merge&records=123,456
    GET ?action=syncHubspotId&airtableId=rec1&hubspotId=123
    GET ?action=syncAirtableId&hubspotId=123&airtableId=rec1
"""
import logging
from typing import List

from googleapiclient.errors import HttpError
from pydantic import ValidationError

from config import Settings
from handlers.base import BadRequest, Request, html_response, json_response, webhook_handler
from handlers.contact_view import render_contact_view, render_error
from handlers.fetch_calendar_events import fetch_recent_events
from schemas.calendar import CalendarEvent
from schemas.contact import ContactRecord, MergeRequest
from tools.airtable_tools import AirtableClient
from tools.contact_matcher import ContactMatcher, matcher_for
from tools.errors import ApiError
from tools.hubspot_tools import HubSpotClient, contact_url

logger = logging.getLogger(__name__)


def find_records(
    matcher: ContactMatcher,
    airtable: AirtableClient,
    hubspot: HubSpotClient,
    table: str,
) -> List[ContactRecord]:
    """Query both stores with one matcher and return normalized records.

    The two lookups run one after the other; a failure in either raises.
    """
    records = [
        ContactRecord.from_airtable(r)
        for r in airtable.select(table, matcher.record_store_formula())
    ]
    filter_groups = matcher.crm_filter_groups()
    if filter_groups:
        records.extend(
            ContactRecord.from_hubspot(c, url=hubspot.contact_url(str(c["id"])))
            for c in hubspot.search_contacts(filter_groups)
        )
    logger.info("Matched %d record(s) for %r", len(records), matcher.key)
    return records


def meetings_with(records: List[ContactRecord], events: List[CalendarEvent]) -> List[CalendarEvent]:
    """Keep events that have an attendee whose email belongs to a matched record."""
    emails = {e for r in records for e in r.emails}
    return [e for e in events if e.attendee_emails() & emails]


def _require(request: Request, *names: str) -> List[str]:
    values = [request.param(n) for n in names]
    missing = [n for n, v in zip(names, values) if not v]
    if missing:
        raise BadRequest(f"Missing required parameter(s): {', '.join(missing)}")
    return values


def delete_record(request: Request, settings: Settings) -> dict:
    source, record_id = _require(request, "source", "recordId")
    source = source.lower()
    if source == "airtable":
        AirtableClient.from_settings(settings).delete(settings.airtable_contacts_table, record_id)
    elif source == "hubspot":
        HubSpotClient.from_settings(settings).delete_contact(record_id)
    else:
        raise BadRequest(f"Unknown source {source!r}; expected 'airtable' or 'hubspot'")
    logger.info("Deleted %s record %s", source, record_id)
    return json_response(200, {"message": f"Deleted {source} record {record_id}"})


def merge_records(request: Request, settings: Settings) -> dict:
    try:
        merge = MergeRequest.from_query(request.param("records"))
    except ValidationError:
        raise BadRequest("At least 2 records are required for merging") from None
    if merge.ignored:
        # TODO: merge the remaining ids into the primary one pair at a time.
        logger.warning("Merge request has %d extra id(s); only the first two are merged: %s",
                       len(merge.ignored), merge.ignored)
    HubSpotClient.from_settings(settings).merge_contacts(merge.primary, merge.secondary)
    return json_response(200, {
        "message": "Records merged successfully",
        "primary": merge.primary,
        "merged": merge.secondary,
        "ignored": merge.ignored,
    })


def sync_hubspot_id(request: Request, settings: Settings) -> dict:
    airtable_id, hubspot_id = _require(request, "airtableId", "hubspotId")
    AirtableClient.from_settings(settings).update(settings.airtable_contacts_table, airtable_id, {
        "HubSpot ID": hubspot_id,
        "HubSpot URL": contact_url(settings.hubspot_portal_id, hubspot_id, settings.hubspot_app_host),
    })
    return json_response(200, {"message": f"Linked Airtable record {airtable_id} to HubSpot {hubspot_id}"})


def sync_airtable_id(request: Request, settings: Settings) -> dict:
    hubspot_id, airtable_id = _require(request, "hubspotId", "airtableId")
    HubSpotClient.from_settings(settings).update_contact(hubspot_id, {"airtable_id": airtable_id})
    return json_response(200, {"message": f"Linked HubSpot contact {hubspot_id} to Airtable {airtable_id}"})


ACTIONS = {
    "delete": delete_record,
    "merge": merge_records,
    "syncHubspotId": sync_hubspot_id,
    "syncAirtableId": sync_airtable_id,
}


def show_contact(request: Request, settings: Settings) -> dict:
    contact_key = request.param("contactId")
    as_json = request.param("format").lower() == "json"
    if not contact_key:
        message = "Missing contactId parameter. Call this page with ?contactId=<name or email>."
        if as_json:
            return json_response(400, {"error": message})
        return html_response(400, render_error("", message))

    try:
        records = find_records(
            matcher_for(contact_key),
            AirtableClient.from_settings(settings),
            HubSpotClient.from_settings(settings),
            settings.airtable_contacts_table,
        )
        events = None
        if request.param("includeEvents").lower() == "true":
            events = meetings_with(records, fetch_recent_events(settings))
    except ApiError as exc:
        logger.error("Contact lookup for %r failed: %s", contact_key, exc)
        if as_json:
            return json_response(502, {"error": str(exc), "details": exc.body})
        return html_response(502, render_error(contact_key, str(exc), exc.body))
    except HttpError as exc:
        logger.error("Meeting lookup for %r failed: %s", contact_key, exc)
        if as_json:
            return json_response(502, {"error": "Google API error", "details": str(exc)})
        return html_response(502, render_error(contact_key, "Google API error", str(exc)))

    if as_json:
        payload = {"contactId": contact_key, "records": [r.model_dump() for r in records]}
        if events is not None:
            payload["events"] = [e.model_dump(by_alias=True) for e in events]
        return json_response(200, payload)
    return html_response(200, render_contact_view(contact_key, records, events))


@webhook_handler("contact records", methods=("GET", "POST"))
def handler(request: Request, settings: Settings):
    action = request.param("action")
    if not action:
        return show_contact(request, settings)
    if action not in ACTIONS:
        raise BadRequest(f"Unknown action {action!r}")
    logger.info("Running contact action %s", action)
    return ACTIONS[action](request, settings)
