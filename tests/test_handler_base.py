"""Tests for the shared trigger plumbing in handlers.base."""
import base64
import json
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from config import ConfigError
from handlers.base import BadRequest, Request, html_response, json_response, webhook_handler
from tools.errors import ApiError


def _body(response):
    return json.loads(response["body"])


class TestRequest:
    def test_normalizes_event(self):
        request = Request.from_event({
            "httpMethod": "post",
            "headers": {"X-Goog-Resource-State": "sync"},
            "queryStringParameters": {"contactId": "  Jane Doe "},
            "body": '{"a": 1}',
        })

        assert request.method == "POST"
        assert request.headers == {"x-goog-resource-state": "sync"}
        assert request.param("contactId") == "Jane Doe"
        assert request.param("missing") == ""
        assert request.json_body() == {"a": 1}

    def test_decodes_base64_body(self):
        encoded = base64.b64encode(b'{"from_email": "a@b.com"}').decode()

        request = Request.from_event({"body": encoded, "isBase64Encoded": True})

        assert request.json_body() == {"from_email": "a@b.com"}

    def test_missing_event_defaults_to_empty_get(self):
        request = Request.from_event(None)

        assert request.method == "GET"
        assert request.json_body() == {}

    def test_invalid_json_is_a_bad_request(self):
        request = Request.from_event({"body": "{not json"})

        with pytest.raises(BadRequest, match="not valid JSON"):
            request.json_body()


def test_response_helpers():
    assert json_response(201, {"ok": True}, {"X-Extra": "1"}) == {
        "statusCode": 201,
        "headers": {"Content-Type": "application/json", "X-Extra": "1"},
        "body": '{"ok": true}',
    }
    assert html_response(200, "<p>hi</p>")["headers"]["Content-Type"] == "text/html; charset=utf-8"


class TestWebhookHandler:
    def _wrap(self, exc=None, methods=None):
        @webhook_handler("test handler", methods=methods)
        def fn(request, settings):
            if exc is not None:
                raise exc
            return json_response(200, {"method": request.method, "timeout": settings.http_timeout})

        return fn

    def test_passes_request_and_settings(self, settings):
        response = self._wrap()({"httpMethod": "GET"}, None, settings=settings)

        assert response["statusCode"] == 200
        assert _body(response) == {"method": "GET", "timeout": 10}

    def test_disallowed_method_gets_405(self, settings):
        response = self._wrap(methods=("POST",))({"httpMethod": "GET"}, settings=settings)

        assert response["statusCode"] == 405
        assert _body(response) == {"error": "Method not allowed"}

    def test_bad_request_maps_to_400(self, settings):
        response = self._wrap(BadRequest("Missing thing"))({}, settings=settings)

        assert response["statusCode"] == 400
        assert _body(response) == {"error": "Missing thing"}

    def test_api_error_maps_to_502_with_details(self, settings):
        response = self._wrap(ApiError("HubSpot", 500, "boom"))({}, settings=settings)

        assert response["statusCode"] == 502
        assert _body(response) == {"error": "HubSpot request failed with status 500", "details": "boom"}

    def test_google_http_error_maps_to_502(self, settings):
        resp = MagicMock(status=404, reason="Not Found")
        response = self._wrap(HttpError(resp, b'{"error": {"code": 404, "message": "notFound"}}'))({}, settings=settings)

        assert response["statusCode"] == 502
        body = _body(response)
        assert body["error"] == "Google API error in test handler"
        assert "notFound" in body["details"]

    def test_missing_configuration_maps_to_500(self, settings):
        response = self._wrap(ConfigError("Missing required configuration: AIRTABLE_API_KEY."))({}, settings=settings)

        assert response["statusCode"] == 500
        body = _body(response)
        assert body["error"] == "Error processing test handler"
        assert "AIRTABLE_API_KEY" in body["message"]
