"""HubSpot CRM contact client.

Calls the HubSpot CRM v3 REST API directly with a private-app access token.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from tools.errors import check_response

logger = logging.getLogger(__name__)


HUBSPOT_BASE = "https://api.hubapi.com"
CONTACTS_PATH = "/crm/v3/objects/contacts"
SERVICE = "HubSpot"

DEFAULT_PROPERTIES = [
    "firstname", "lastname", "email", "hs_additional_emails", "phone",
    "mobilephone", "company", "contact_category", "notes_last_contacted",
    "airtable_id", "createdate", "lastmodifieddate",
]


def contact_url(portal_id: str, contact_id: str, app_host: str = "app-eu1.hubspot.com") -> str:
    """Link to the contact in the HubSpot web app."""
    return f"https://{app_host}/contacts/{portal_id}/contact/{contact_id}"


class HubSpotClient:
    """Contact search, update, merge and delete."""

    def __init__(
        self,
        access_token: str,
        portal_id: str = "",
        app_host: str = "app-eu1.hubspot.com",
        timeout: int = 10,
    ):
        self.access_token = access_token
        self.portal_id = portal_id
        self.app_host = app_host
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "HubSpotClient":
        settings.require("hubspot_access_token")
        return cls(
            settings.hubspot_access_token,
            portal_id=settings.hubspot_portal_id,
            app_host=settings.hubspot_app_host,
            timeout=settings.http_timeout,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def contact_url(self, contact_id: str) -> str:
        return contact_url(self.portal_id, contact_id, self.app_host)

    def search_contacts(
        self,
        filter_groups: List[Dict[str, Any]],
        properties: Optional[List[str]] = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """Search contacts. Filter groups are ORed, filters inside a group ANDed.

        Returns:
            List of raw contacts, each with 'id' and 'properties'.
        """
        payload = {
            "filterGroups": filter_groups,
            "properties": properties or DEFAULT_PROPERTIES,
            "limit": limit,
        }
        resp = requests.post(
            f"{HUBSPOT_BASE}{CONTACTS_PATH}/search",
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        data = resp.json()
        results = data.get("results", [])
        logger.info("HubSpot search: %d of %s contact(s)", len(results), data.get("total", len(results)))
        return results

    def get_contact(self, contact_id: str, properties: Optional[List[str]] = None) -> Dict[str, Any]:
        resp = requests.get(
            f"{HUBSPOT_BASE}{CONTACTS_PATH}/{contact_id}",
            headers=self._headers(),
            params={"properties": ",".join(properties or DEFAULT_PROPERTIES)},
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        return resp.json()

    def update_contact(self, contact_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        resp = requests.patch(
            f"{HUBSPOT_BASE}{CONTACTS_PATH}/{contact_id}",
            headers=self._headers(),
            json={"properties": properties},
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        logger.info("HubSpot: updated contact %s (%s)", contact_id, ", ".join(properties))
        return resp.json()

    def delete_contact(self, contact_id: str) -> None:
        """Archive a contact. HubSpot answers 204 with no body."""
        resp = requests.delete(
            f"{HUBSPOT_BASE}{CONTACTS_PATH}/{contact_id}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        logger.info("HubSpot: deleted contact %s", contact_id)

    def merge_contacts(self, primary_id: str, merge_id: str) -> Dict[str, Any]:
        """Merge merge_id into primary_id. merge_id ceases to exist afterwards."""
        resp = requests.post(
            f"{HUBSPOT_BASE}{CONTACTS_PATH}/merge",
            headers=self._headers(),
            json={"primaryObjectId": primary_id, "objectIdToMerge": merge_id},
            timeout=self.timeout,
        )
        check_response(resp, SERVICE)
        logger.info("HubSpot: merged contact %s into %s", merge_id, primary_id)
        return resp.json()
