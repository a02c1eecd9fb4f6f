"""Shared fixtures. Nothing here touches the network or the real environment."""
import pytest

from config import Settings


@pytest.fixture
def settings():
    return Settings(
        airtable_api_key="test-airtable-key",
        airtable_base_id="appTEST",
        hubspot_access_token="test-hubspot-token",
        hubspot_portal_id="144",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_refresh_token="refresh-token",
        google_project_id="test-project",
        calendar_webhook_url="https://functions.example.com/calendar-webhook",
        calendar_forward_url="https://downstream.example.com/calendar",
    )
