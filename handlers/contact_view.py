"""HTML rendering for the contact reconciliation view.

Pure functions: normalized records in, markup out. No fetching here.
"""
import json
from html import escape
from typing import Iterable, List, Optional

from schemas.calendar import CalendarEvent
from schemas.contact import ContactRecord


STORE_NAMES = {"airtable": "Airtable", "hubspot": "HubSpot"}

_STYLE = """
body { font-family: -apple-system, Helvetica, Arial, sans-serif; margin: 24px; color: #222; }
.columns { display: flex; gap: 24px; }
.column { flex: 1; }
.record { border: 1px solid #ddd; border-radius: 6px; padding: 12px; margin-bottom: 12px; }
.field-name { font-weight: 600; color: #555; }
.delete-btn { background: #cc3333; color: white; border: none; border-radius: 4px; padding: 6px 10px; cursor: pointer; }
.sync-btn, .merge-btn { background: #0077cc; color: white; border: none; border-radius: 4px; padding: 6px 10px; cursor: pointer; }
.merge-btn { margin-bottom: 20px; }
.empty, .error { color: #777; }
.error { color: #cc3333; }
"""

_SCRIPT = """
let selectedRecords = [];
function updateMergeSelection(checkbox) {
  if (checkbox.checked) { selectedRecords.push(checkbox.value); }
  else { selectedRecords = selectedRecords.filter(id => id !== checkbox.value); }
}
function runAction(query, confirmText) {
  if (confirmText && !confirm(confirmText)) { return; }
  fetch(`?${query}&contactId=${encodeURIComponent(contactId)}`)
    .then(response => response.json())
    .then(data => {
      if (data.error) { throw new Error(data.details || data.error); }
      alert(data.message);
      window.location.reload();
    })
    .catch(error => alert("Error: " + error.message));
}
function deleteRecord(source, id) {
  runAction(`action=delete&source=${source}&recordId=${id}`, "Delete this record? This cannot be undone.");
}
function mergeRecords() {
  if (selectedRecords.length < 2) { alert("Please select at least 2 records to merge"); return; }
  runAction(`action=merge&records=${selectedRecords.join(",")}`, "Merge the selected records? This cannot be undone.");
}
function syncIds(action, airtableId, hubspotId) {
  runAction(`action=${action}&airtableId=${airtableId}&hubspotId=${hubspotId}`);
}
"""


def _page(title: str, body: str, contact_key: str = "") -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{escape(title)}</title>\n<style>{_STYLE}</style>\n</head>\n<body>\n"
        f"{body}\n"
        f"<script>const contactId = {_js_string(contact_key)};{_SCRIPT}</script>\n"
        "</body>\n</html>\n"
    )


def _js_string(value: str) -> str:
    return json.dumps(value).replace("<", "\\u003c")


def _render_fields(record: ContactRecord) -> str:
    rows = [
        f'<div><span class="field-name">{escape(label)}:</span> <span>{escape(str(value))}</span></div>'
        for label, value in record.fields.items()
    ]
    if record.url:
        rows.append(f'<div><a href="{escape(record.url)}" target="_blank">Open in HubSpot</a></div>')
    return "\n".join(rows)


def _render_record(record: ContactRecord, counterpart_ids: List[str]) -> str:
    rid = escape(record.id)
    parts = ['<div class="record">']
    if record.source == "hubspot":
        parts.append(f'<input type="checkbox" class="merge-checkbox" value="{rid}" onchange="updateMergeSelection(this)">')
    parts.append(_render_fields(record))
    for other in counterpart_ids:
        other_id = escape(other)
        if record.source == "airtable":
            parts.append(
                f'<button class="sync-btn" onclick="syncIds(\'syncHubspotId\', \'{rid}\', \'{other_id}\')">'
                f"Link HubSpot {other_id}</button>"
            )
        else:
            parts.append(
                f'<button class="sync-btn" onclick="syncIds(\'syncAirtableId\', \'{other_id}\', \'{rid}\')">'
                f"Link Airtable {other_id}</button>"
            )
    parts.append(f'<button class="delete-btn" onclick="deleteRecord(\'{record.source}\', \'{rid}\')">Delete</button>')
    parts.append("</div>")
    return "\n".join(parts)


def _render_column(source: str, records: List[ContactRecord], counterpart_ids: List[str]) -> str:
    name = STORE_NAMES[source]
    parts = [f'<div class="column">\n<h2>{name} Records</h2>']
    if source == "hubspot" and len(records) > 1:
        parts.append('<button class="merge-btn" onclick="mergeRecords()">Merge Selected Records</button>')
    if records:
        parts.extend(_render_record(r, counterpart_ids) for r in records)
    else:
        parts.append(f'<div class="empty">No {name} records found.</div>')
    parts.append("</div>")
    return "\n".join(parts)


def render_events(events: Iterable[CalendarEvent]) -> str:
    events = list(events)
    parts = ["<h2>Recent Meetings</h2>"]
    if not events:
        parts.append('<div class="empty">No recent meetings with this contact.</div>')
        return "\n".join(parts)
    parts.append("<ul>")
    for event in events:
        parts.append(
            f"<li>{escape(event.meeting_date or '')} {escape(event.summary)}"
            f" <small>({escape(event.status or 'unknown')})</small></li>"
        )
    parts.append("</ul>")
    return "\n".join(parts)


def render_contact_view(
    contact_key: str,
    records: List[ContactRecord],
    events: Optional[List[CalendarEvent]] = None,
) -> str:
    """Render records from both stores side by side.

    Args:
        contact_key: The search key the records were matched on.
        records: Normalized records from either store.
        events: Optional recent meetings to list under the records.
    """
    heading = f"<h1>Contact: {escape(contact_key)}</h1>"
    if not records:
        body = f'{heading}\n<div class="empty">No records found for {escape(contact_key)}.</div>'
    else:
        airtable = [r for r in records if r.source == "airtable"]
        hubspot = [r for r in records if r.source == "hubspot"]
        columns = "\n".join([
            _render_column("airtable", airtable, [r.id for r in hubspot]),
            _render_column("hubspot", hubspot, [r.id for r in airtable]),
        ])
        body = f'{heading}\n<div class="columns">\n{columns}\n</div>'
    if events is not None:
        body = f"{body}\n{render_events(events)}"
    return _page(f"Contact records: {contact_key}", body, contact_key)


def render_error(contact_key: str, message: str, details: str = "") -> str:
    body = f'<h1>Contact: {escape(contact_key)}</h1>\n<div class="error">{escape(message)}</div>'
    if details:
        body = f"{body}\n<pre>{escape(details)}</pre>"
    return _page("Contact records: error", body, contact_key)
