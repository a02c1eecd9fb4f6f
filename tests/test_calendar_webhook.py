"""Tests for the calendar notification adapter."""
import json
from unittest.mock import MagicMock, patch

from handlers import calendar_webhook
from schemas.calendar import Attendee, CalendarEvent, CalendarRef


WEBHOOK_MODULE = "handlers.calendar_webhook"


def _event(state, **headers):
    return {
        "httpMethod": "POST",
        "headers": {
            "X-Goog-Channel-ID": "chan-1",
            "X-Goog-Resource-ID": "res-1",
            "X-Goog-Resource-State": state,
            "X-Goog-Message-Number": "7",
            **headers,
        },
    }


def _calendar_event():
    return CalendarEvent(
        id="evt1",
        google_meeting_id="evt1",
        calendar=CalendarRef(id="primary", name="Work"),
        attendees=[Attendee(email="jane@acme.com")],
    )


def _resp(ok=True, status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    return resp


@patch(f"{WEBHOOK_MODULE}.fetch_recent_events")
@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_sync_is_acknowledged_without_side_effects(mock_post, mock_fetch, settings):
    response = calendar_webhook.handler(_event("sync"), settings=settings)

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"message": "Sync notification received and acknowledged"}
    mock_post.assert_not_called()
    mock_fetch.assert_not_called()


@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_unknown_state_needs_no_action(mock_post, settings):
    response = calendar_webhook.handler(_event("not_exists"), settings=settings)

    assert json.loads(response["body"]) == {"message": "Notification received but no action needed"}
    mock_post.assert_not_called()


@patch(f"{WEBHOOK_MODULE}.fetch_recent_events")
@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_change_is_forwarded_once_with_events(mock_post, mock_fetch, settings):
    mock_fetch.return_value = [_calendar_event()]
    mock_post.return_value = _resp(payload={"received": True})

    response = calendar_webhook.handler(_event("exists", **{"X-Goog-Changed": "content"}), settings=settings)

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["result"] == {"received": True}
    mock_post.assert_called_once()
    assert mock_post.call_args.args[0] == "https://downstream.example.com/calendar"
    payload = mock_post.call_args.kwargs["json"]
    assert payload["type"] == "calendar_notification"
    assert payload["resource"]["resourceId"] == "res-1"
    assert payload["resource"]["messageNumber"] == 7
    assert payload["resource"]["changedFields"] == ["content"]
    assert payload["events"][0]["id"] == "evt1"


@patch(f"{WEBHOOK_MODULE}.fetch_recent_events")
@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_metadata_only_forwarding(mock_post, mock_fetch, settings):
    settings.calendar_forward_events = False
    mock_post.return_value = _resp(payload={})

    calendar_webhook.handler(_event("update"), settings=settings)

    mock_fetch.assert_not_called()
    assert "events" not in mock_post.call_args.kwargs["json"]


@patch(f"{WEBHOOK_MODULE}.fetch_recent_events", return_value=[])
@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_downstream_failure_surfaces_as_502(mock_post, mock_fetch, settings):
    mock_post.return_value = _resp(ok=False, status_code=503, text="unavailable")

    response = calendar_webhook.handler(_event("exists"), settings=settings)

    assert response["statusCode"] == 502
    assert json.loads(response["body"]) == {
        "error": "Failed to forward calendar notification",
        "details": "unavailable",
    }


@patch(f"{WEBHOOK_MODULE}.requests.post")
def test_missing_forward_url_is_a_server_error(mock_post, settings):
    settings.calendar_forward_url = ""

    response = calendar_webhook.handler(_event("exists"), settings=settings)

    assert response["statusCode"] == 500
    assert "CALENDAR_FORWARD_URL" in json.loads(response["body"])["message"]
    mock_post.assert_not_called()
