"""Airtable record store client.

Calls the Airtable REST API directly (no official Python SDK).
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from tools.errors import check_response

logger = logging.getLogger(__name__)


AIRTABLE_BASE = "https://api.airtable.com/v0"
SERVICE = "Airtable"


def quote_formula_value(value: str) -> str:
    """Quote a string for use inside an Airtable formula."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def formula_equals(field: str, value: str) -> str:
    """Build an exact-match filterByFormula expression, e.g. {Email} = 'a@b.com'."""
    return f"{{{field}}} = {quote_formula_value(value)}"


class AirtableClient:
    """Record CRUD and formula-filtered queries against one Airtable base."""

    def __init__(self, api_key: str, base_id: str, timeout: int = 10):
        self.api_key = api_key
        self.base_id = base_id
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "AirtableClient":
        settings.require("airtable_api_key", "airtable_base_id")
        return cls(settings.airtable_api_key, settings.airtable_base_id, settings.http_timeout)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _table_url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{AIRTABLE_BASE}/{self.base_id}/{quote(table, safe='')}"
        if record_id:
            url = f"{url}/{record_id}"
        return url

    def select(
        self,
        table: str,
        formula: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return the first page of records in a table matching a formula.

        Args:
            table: Table name.
            formula: Optional filterByFormula expression.
            max_records: Optional cap on the number of records.

        Returns:
            List of raw records, each with 'id', 'fields' and 'createdTime'.
        """
        params: Dict[str, Any] = {}
        if formula:
            params["filterByFormula"] = formula
        if max_records is not None:
            params["maxRecords"] = max_records
        resp = requests.get(
            self._table_url(table),
            headers=self._headers(),
            params=params,
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        records = resp.json().get("records", [])
        logger.info("Airtable %s: %d record(s) for %s", table, len(records), formula)
        return records

    def find_first(self, table: str, field: str, value: str) -> Optional[Dict[str, Any]]:
        """Return the first record whose field equals value, or None."""
        records = self.select(table, formula_equals(field, value))
        return records[0] if records else None

    def create(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record. Fields set to None are left out."""
        payload = {"fields": {k: v for k, v in fields.items() if v is not None}}
        resp = requests.post(
            self._table_url(table),
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        record = resp.json()
        logger.info("Airtable %s: created record %s", table, record.get("id"))
        return record

    def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Patch the given fields on a record, leaving other fields untouched."""
        resp = requests.patch(
            self._table_url(table, record_id),
            headers=self._headers(),
            json={"fields": fields},
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        logger.info("Airtable %s: updated record %s (%s)", table, record_id, ", ".join(fields))
        return resp.json()

    def delete(self, table: str, record_id: str) -> Dict[str, Any]:
        """Delete a record. There is no undo."""
        resp = requests.delete(
            self._table_url(table, record_id),
            headers=self._headers(),
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        logger.info("Airtable %s: deleted record %s", table, record_id)
        return resp.json()
