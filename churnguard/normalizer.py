"""
Field normalization for uploaded customer rows.

Maps loosely spelled CSV headers ("Customer Name", "REVENUE", "tickets")
onto the canonical customer field names. Values are left untouched;
numeric and date parsing happens in records.py.
"""

from typing import Any, Dict, Mapping


CANONICAL_FIELDS = [
    "name",
    "email",
    "phone",
    "company",
    "segment",
    "last_activity_date",
    "total_revenue",
    "support_tickets",
]

HEADER_SYNONYMS: Dict[str, str] = {
    "name": "name",
    "customer_name": "name",
    "customer name": "name",
    "email": "email",
    "email_address": "email",
    "phone": "phone",
    "phone_number": "phone",
    "company": "company",
    "company_name": "company",
    "segment": "segment",
    "customer_segment": "segment",
    "last_activity_date": "last_activity_date",
    "last activity date": "last_activity_date",
    "last_activity": "last_activity_date",
    "total_revenue": "total_revenue",
    "total revenue": "total_revenue",
    "revenue": "total_revenue",
    "support_tickets": "support_tickets",
    "support tickets": "support_tickets",
    "tickets": "support_tickets",
}


def normalize_header(header: str) -> str:
    """Trim and lower-case a header, then resolve known synonyms."""
    normalized = str(header).strip().lower()
    return HEADER_SYNONYMS.get(normalized, normalized)


def normalize_row(row: Mapping[Any, Any]) -> Dict[str, Any]:
    """
    Rename the keys of one row to canonical field names.

    Unknown headers are kept under their normalized spelling. When several
    headers resolve to the same field the first non-empty value wins.
    """
    normalized: Dict[str, Any] = {}
    for header, value in row.items():
        if header is None:
            # csv.DictReader stores surplus cells under a None key
            continue
        key = normalize_header(header)
        if _is_blank(normalized.get(key)):
            normalized[key] = value
    return normalized


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
