"""Tests for the event fetcher."""
import json
from unittest.mock import MagicMock, patch

from handlers import fetch_calendar_events


GOOGLE_MODULE = "tools.google_tools"

ITEMS = [
    {"id": "evt1", "summary": "Intro call", "start": {"dateTime": "2024-03-05T10:00:00Z"}, "colorId": "3"},
    {"id": "evt2", "start": {"date": "2024-03-06"}},
]


@patch(f"{GOOGLE_MODULE}.list_events_around", return_value=("Work", ITEMS))
def test_fetch_recent_events_normalizes_items(mock_list, settings):
    service = MagicMock()

    events = fetch_calendar_events.fetch_recent_events(settings, service=service)

    mock_list.assert_called_once_with(service, "primary", now=None)
    assert [e.id for e in events] == ["evt1", "evt2"]
    assert events[0].calendar_colour == "3 Work"
    assert events[1].summary == "Untitled Event"


@patch(f"{GOOGLE_MODULE}.list_events_around", return_value=("Work", ITEMS))
@patch(f"{GOOGLE_MODULE}.calendar_service")
def test_handler_returns_events(mock_service, mock_list, settings):
    event = {"httpMethod": "POST", "body": json.dumps({"resourceId": "res-1", "calendarId": "team@acme.com"})}

    response = fetch_calendar_events.handler(event, settings=settings)

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["resourceId"] == "res-1"
    assert body["calendarId"] == "team@acme.com"
    assert [e["google_meeting_id"] for e in body["events"]] == ["evt1", "evt2"]
    assert body["events"][0]["colorId"] == "3"
    assert mock_list.call_args.args[1] == "team@acme.com"


@patch(f"{GOOGLE_MODULE}.calendar_service")
def test_handler_requires_resource_id(mock_service, settings):
    response = fetch_calendar_events.handler({"httpMethod": "POST", "body": "{}"}, settings=settings)

    assert response["statusCode"] == 400
    assert json.loads(response["body"]) == {"error": "Missing resourceId in request"}
    mock_service.assert_not_called()
