"""
Canonical customer record and lenient field parsing.

Uploaded values arrive as strings of uneven quality. Revenue and ticket
counts that cannot be parsed default to 0; dates are kept as text and
interpreted at scoring time.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import MissingFieldError
from .normalizer import CANONICAL_FIELDS


def parse_revenue(value: Any) -> float:
    """Parse a revenue cell, defaulting to 0.0 when unparsable."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = value.strip().replace("$", "").replace(",", "")
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        number = float(value)
    return number if math.isfinite(number) else 0.0


def parse_tickets(value: Any) -> int:
    """Parse a support ticket count, defaulting to 0 when unparsable."""
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    else:
        number = float(value)
    return int(number) if math.isfinite(number) else 0


def clean_text(value: Any) -> Optional[str]:
    """Trim a text cell; blank becomes None."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        value = str(value)
    text = value.strip()
    return text or None


@dataclass
class CustomerRecord:
    """
    One customer, as created from an uploaded row or an API call.

    churn_score, risk_level and risk_factors are filled in by the scorer;
    customer_id is assigned by the repository.
    """

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    segment: Optional[str] = None
    last_activity_date: Optional[str] = None
    total_revenue: float = 0.0
    support_tickets: int = 0
    churn_score: Optional[int] = None
    risk_level: Optional[str] = None
    risk_factors: List[str] = field(default_factory=list)
    customer_id: Optional[str] = None
    owner_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CustomerRecord":
        """
        Build a record from a normalized row.

        Raises:
            MissingFieldError: If name is absent or blank
        """
        name = clean_text(row.get("name"))
        if not name:
            raise MissingFieldError("name")

        segment = clean_text(row.get("segment"))
        return cls(
            name=name,
            email=clean_text(row.get("email")),
            phone=clean_text(row.get("phone")),
            company=clean_text(row.get("company")),
            segment=segment.lower() if segment else None,
            last_activity_date=clean_text(row.get("last_activity_date")),
            total_revenue=parse_revenue(row.get("total_revenue")),
            support_tickets=parse_tickets(row.get("support_tickets")),
            extra={
                key: value for key, value in row.items()
                if key not in CANONICAL_FIELDS
            },
        )

    def to_scoring_row(self) -> dict:
        """Columns consumed by ChurnScorer."""
        return {
            "CUSTOMER_ID": self.customer_id,
            "NAME": self.name,
            "SEGMENT": self.segment,
            "LAST_ACTIVITY_DATE": self.last_activity_date,
            "TOTAL_REVENUE": self.total_revenue,
            "SUPPORT_TICKETS": self.support_tickets,
        }

    def apply_score(self, churn_score: int, risk_level: str, risk_factors: List[str]) -> None:
        self.churn_score = int(churn_score)
        self.risk_level = risk_level
        self.risk_factors = list(risk_factors)

    def to_dict(self) -> dict:
        return asdict(self)
