from .errors import ApiError, check_response
from .airtable_tools import AirtableClient, formula_equals, quote_formula_value
from .hubspot_tools import HubSpotClient
from .contact_matcher import ContactMatcher, EmailMatcher, NameTokenMatcher, matcher_for

__all__ = [
    "ApiError", "check_response",
    "AirtableClient", "formula_equals", "quote_formula_value",
    "HubSpotClient",
    "ContactMatcher", "EmailMatcher", "NameTokenMatcher", "matcher_for",
]
