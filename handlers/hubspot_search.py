"""Look up the HubSpot contact for an Airtable record by email.

Returns the fields the Airtable side stores to link the two records.
"""
import logging

from config import Settings
from handlers.base import BadRequest, Request, json_response, webhook_handler
from tools.contact_matcher import EmailMatcher
from tools.hubspot_tools import HubSpotClient

logger = logging.getLogger(__name__)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET",
}


@webhook_handler("hubspot search", methods=("GET", "OPTIONS"))
def handler(request: Request, settings: Settings):
    if request.method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    email = request.param("email")
    record_id = request.param("recordId")
    if not email or not record_id:
        raise BadRequest("Email and recordId parameters are required")

    hubspot = HubSpotClient.from_settings(settings)
    results = hubspot.search_contacts(EmailMatcher(email).crm_filter_groups(), properties=["email"], limit=1)
    if not results:
        logger.info("No HubSpot contact for %s", email)
        return json_response(404, {"error": "No matching HubSpot contact found"}, headers=CORS_HEADERS)

    hubspot_id = str(results[0]["id"])
    props = hubspot.get_contact(hubspot_id, ["email", "hs_additional_emails"]).get("properties", {})
    all_emails = [props.get("email")] if props.get("email") else []
    if props.get("hs_additional_emails"):
        all_emails.extend(e for e in props["hs_additional_emails"].split(";") if e)

    return json_response(200, {
        "recordId": record_id,
        "fields": {
            "HubSpot ID": hubspot_id,
            "HubSpot URL": hubspot.contact_url(hubspot_id),
            "allEmails": ", ".join(all_emails),
        },
    }, headers=CORS_HEADERS)
