"""Unit tests for airtable_tools: record CRUD against the REST API."""
from unittest.mock import MagicMock, patch

import pytest

from tools.airtable_tools import AirtableClient, formula_equals, quote_formula_value
from tools.errors import ApiError


AIRTABLE_MODULE = "tools.airtable_tools"


def _resp(payload=None, ok=True, status_code=200, text=""):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload if payload is not None else {}
    return resp


def _client():
    return AirtableClient("test-key", "appTEST")


class TestFormula:
    def test_exact_match_expression(self):
        assert formula_equals("Email", "jane@acme.com") == "{Email} = 'jane@acme.com'"

    def test_escapes_single_quotes(self):
        assert quote_formula_value("O'Brien") == "'O\\'Brien'"

    def test_escapes_backslashes_before_quotes(self):
        assert quote_formula_value("a\\b") == "'a\\\\b'"


class TestSelect:
    @patch(f"{AIRTABLE_MODULE}.requests.get")
    def test_sends_formula_and_returns_records(self, mock_get):
        mock_get.return_value = _resp({"records": [{"id": "rec1", "fields": {"Contact": "Jane"}}]})

        records = _client().select("Contacts", "{Contact} = 'Jane'")

        assert records == [{"id": "rec1", "fields": {"Contact": "Jane"}}]
        assert mock_get.call_args.args[0] == "https://api.airtable.com/v0/appTEST/Contacts"
        assert mock_get.call_args.kwargs["params"] == {"filterByFormula": "{Contact} = 'Jane'"}
        assert mock_get.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"

    @patch(f"{AIRTABLE_MODULE}.requests.get")
    def test_table_name_is_url_encoded(self, mock_get):
        mock_get.return_value = _resp({"records": []})

        _client().select("TEST AREA")

        assert mock_get.call_args.args[0].endswith("/appTEST/TEST%20AREA")
        assert mock_get.call_args.kwargs["params"] == {}

    @patch(f"{AIRTABLE_MODULE}.requests.get")
    def test_failed_call_raises_with_body(self, mock_get):
        mock_get.return_value = _resp(ok=False, status_code=422, text='{"error": "INVALID_FILTER_BY_FORMULA"}')

        with pytest.raises(ApiError) as excinfo:
            _client().select("Contacts", "{Broken")

        assert excinfo.value.status_code == 422
        assert "INVALID_FILTER_BY_FORMULA" in excinfo.value.body

    @patch(f"{AIRTABLE_MODULE}.requests.get")
    def test_find_first_returns_none_without_matches(self, mock_get):
        mock_get.return_value = _resp({"records": []})

        assert _client().find_first("Contacts", "Primary email", "nobody@acme.com") is None


class TestMutations:
    @patch(f"{AIRTABLE_MODULE}.requests.post")
    def test_create_drops_empty_fields(self, mock_post):
        mock_post.return_value = _resp({"id": "recNew", "fields": {}})

        record = _client().create("Contacts", {"Primary email": "jane@acme.com", "Last Email Sent": None})

        assert record["id"] == "recNew"
        assert mock_post.call_args.kwargs["json"] == {"fields": {"Primary email": "jane@acme.com"}}

    @patch(f"{AIRTABLE_MODULE}.requests.patch")
    def test_update_patches_record(self, mock_patch):
        mock_patch.return_value = _resp({"id": "rec1"})

        _client().update("Contacts", "rec1", {"Last Contact": "2024-03-05"})

        assert mock_patch.call_args.args[0] == "https://api.airtable.com/v0/appTEST/Contacts/rec1"
        assert mock_patch.call_args.kwargs["json"] == {"fields": {"Last Contact": "2024-03-05"}}

    @patch(f"{AIRTABLE_MODULE}.requests.delete")
    def test_delete_targets_record(self, mock_delete):
        mock_delete.return_value = _resp({"id": "rec1", "deleted": True})

        result = _client().delete("Contacts", "rec1")

        assert result["deleted"] is True
        assert mock_delete.call_args.args[0].endswith("/Contacts/rec1")


def test_from_settings_requires_credentials(settings):
    from config import ConfigError

    settings.airtable_api_key = ""
    with pytest.raises(ConfigError, match="AIRTABLE_API_KEY"):
        AirtableClient.from_settings(settings)
