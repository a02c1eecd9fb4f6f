"""Errors raised by the REST clients."""
from typing import Optional


class ApiError(RuntimeError):
    """An outbound call returned a non-success status.

    Keeps the failing response text so handlers can surface it to the caller.
    """

    def __init__(self, service: str, status_code: Optional[int], body: str = ""):
        self.service = service
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service} request failed with status {status_code}")


def check_response(resp, service: str):
    """Return resp unchanged if it succeeded, otherwise raise ApiError."""
    if not resp.ok:
        raise ApiError(service, resp.status_code, resp.text)
    return resp
