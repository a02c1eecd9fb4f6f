"""Request parsing, response helpers and the shared handler wrapper.

Handlers are invoked with an API Gateway / Netlify style trigger event:

    {"httpMethod": "POST", "headers": {...}, "queryStringParameters": {...},
     "body": "...", "isBase64Encoded": false}

and return {"statusCode": int, "headers": {...}, "body": str}.
"""
import base64
import functools
import json
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from googleapiclient.errors import HttpError
from pydantic import BaseModel, Field, ValidationError

from config import Settings
from tools.errors import ApiError

logger = logging.getLogger(__name__)


class BadRequest(ValueError):
    """Missing or malformed input from the caller."""


class Request(BaseModel):
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    query: Dict[str, str] = Field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_event(cls, event: Optional[Dict[str, Any]]) -> "Request":
        event = event or {}
        body = event.get("body") or ""
        if body and event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")
        return cls(
            method=(event.get("httpMethod") or "GET").upper(),
            headers={str(k).lower(): str(v) for k, v in (event.get("headers") or {}).items()},
            query={str(k): str(v) for k, v in (event.get("queryStringParameters") or {}).items()},
            body=body if isinstance(body, str) else json.dumps(body),
        )

    def json_body(self) -> Dict[str, Any]:
        if not self.body.strip():
            return {}
        try:
            data = json.loads(self.body)
        except json.JSONDecodeError as exc:
            raise BadRequest(f"Request body is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise BadRequest("Request body must be a JSON object")
        return data

    def param(self, name: str) -> str:
        """Return a stripped query parameter, or '' when absent."""
        return (self.query.get(name) or "").strip()


def json_response(status: int, payload: Any, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **(headers or {})},
        "body": json.dumps(payload, default=str),
    }


def html_response(status: int, markup: str) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "text/html; charset=utf-8"},
        "body": markup,
    }


def _http_error_details(exc: HttpError) -> str:
    content = exc.content
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return str(content)


def webhook_handler(name: str, methods: Optional[Iterable[str]] = None):
    """Wrap a handler body into a trigger function with uniform error responses.

    The wrapped function is called as fn(request, settings) and must return a
    response dict. The resulting function has the trigger signature
    handler(event, context=None, settings=None).

    Args:
        name: Human-readable handler name used in logs and error messages.
        methods: Allowed HTTP methods; others get 405. None allows any.
    """
    allowed = {m.upper() for m in methods} if methods else None

    def decorator(fn: Callable[[Request, Settings], Dict[str, Any]]):
        @functools.wraps(fn)
        def wrapper(event=None, context=None, settings: Optional[Settings] = None):
            try:
                request = Request.from_event(event)
                logger.info("%s: received %s request", name, request.method)
                if allowed is not None and request.method not in allowed:
                    logger.warning("%s: rejected %s request", name, request.method)
                    return json_response(405, {"error": "Method not allowed"})
                return fn(request, settings or Settings.from_env())
            except (BadRequest, ValidationError) as exc:
                logger.warning("%s: bad request: %s", name, exc)
                return json_response(400, {"error": str(exc)})
            except ApiError as exc:
                logger.error("%s: %s (status %s): %s", name, exc, exc.status_code, exc.body)
                return json_response(502, {"error": str(exc), "details": exc.body})
            except HttpError as exc:
                logger.error("%s: Google API error: %s", name, exc)
                return json_response(502, {"error": f"Google API error in {name}", "details": _http_error_details(exc)})
            except Exception as exc:
                logger.exception("%s: unexpected error", name)
                return json_response(500, {"error": f"Error processing {name}", "message": str(exc)})

        return wrapper

    return decorator
