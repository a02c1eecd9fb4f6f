"""Contact matching strategies for looking a person up in both stores.

Call sites only depend on the ContactMatcher interface; pick an
implementation with matcher_for().
"""
from typing import Any, Dict, List

from tools.airtable_tools import formula_equals


class ContactMatcher:
    """Turns a search key into a record store formula and CRM filter groups."""

    def __init__(self, key: str):
        self.key = key.strip()

    def record_store_formula(self) -> str:
        raise NotImplementedError

    def crm_filter_groups(self) -> List[Dict[str, Any]]:
        raise NotImplementedError


class NameTokenMatcher(ContactMatcher):
    """Exact display-name match in the record store, first/last name in the CRM.

    The CRM filter uses the first whitespace token as first name and the
    second as last name. Further tokens are ignored, so "Anna Maria Rossi"
    searches for firstname=Anna, lastname=Maria.
    """

    def __init__(self, key: str, field: str = "Contact"):
        super().__init__(key)
        self.field = field

    def record_store_formula(self) -> str:
        return formula_equals(self.field, self.key)

    def crm_filter_groups(self) -> List[Dict[str, Any]]:
        tokens = self.key.split()
        if not tokens:
            return []
        filters = [{"propertyName": "firstname", "operator": "EQ", "value": tokens[0]}]
        if len(tokens) > 1:
            filters.append({"propertyName": "lastname", "operator": "EQ", "value": tokens[1]})
        return [{"filters": filters}]


class EmailMatcher(ContactMatcher):
    """Match on primary email, or on any additional email in the CRM."""

    def __init__(self, key: str, field: str = "Primary email"):
        super().__init__(key)
        self.field = field

    def record_store_formula(self) -> str:
        return formula_equals(self.field, self.key)

    def crm_filter_groups(self) -> List[Dict[str, Any]]:
        return [
            {"filters": [{"propertyName": "email", "operator": "EQ", "value": self.key}]},
            {"filters": [{
                "propertyName": "hs_additional_emails",
                "operator": "CONTAINS_TOKEN",
                "value": self.key,
            }]},
        ]


def matcher_for(key: str) -> ContactMatcher:
    """Email-first: keys that look like an address match on email, others on name."""
    if "@" in key:
        return EmailMatcher(key)
    return NameTokenMatcher(key)
