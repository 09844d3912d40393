"""
Pytest fixtures for ChurnGuard scoring tests.
"""

import pandas as pd
import pytest

# Add package to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from churnguard.config import ScoringConfig, ScoringStrategy
from churnguard.repository import InMemoryCustomerRepository
from churnguard.scorer import ChurnScorer, generate_sample_data

# Fixed reference time so inactivity is deterministic
NOW = pd.Timestamp("2025-06-01", tz="UTC")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def days_ago():
    """Date string n whole days before NOW."""
    def _days_ago(n: int) -> str:
        return (NOW - pd.Timedelta(days=n)).strftime("%Y-%m-%d")
    return _days_ago


@pytest.fixture
def default_config():
    """Import-time scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def bulk_config():
    """Bulk re-analysis scoring configuration."""
    return ScoringStrategy.BULK_REANALYSIS.config


@pytest.fixture
def scorer(default_config):
    """ChurnScorer with the import-time heuristic."""
    return ChurnScorer(default_config)


@pytest.fixture
def bulk_scorer(bulk_config):
    """ChurnScorer with the bulk re-analysis heuristic."""
    return ChurnScorer(bulk_config)


@pytest.fixture
def repository():
    return InMemoryCustomerRepository()


@pytest.fixture
def sample_data():
    """100 sample customers with realistic distributions."""
    return generate_sample_data(n_customers=100, seed=42, now=NOW)


@pytest.fixture
def edge_cases(days_ago):
    """Specific customers for boundary conditions."""
    return pd.DataFrame([
        # No activity date, no revenue
        {
            "CUSTOMER_ID": "EDGE_NO_ACTIVITY",
            "SEGMENT": "smb",
            "LAST_ACTIVITY_DATE": "",
            "TOTAL_REVENUE": "0",
            "SUPPORT_TICKETS": "0",
        },
        # Long gone, many tickets, no revenue
        {
            "CUSTOMER_ID": "EDGE_HIGH_RISK",
            "SEGMENT": "enterprise",
            "LAST_ACTIVITY_DATE": days_ago(400),
            "TOTAL_REVENUE": "0",
            "SUPPORT_TICKETS": "12",
        },
        # Active, healthy revenue, no tickets
        {
            "CUSTOMER_ID": "EDGE_LOW_RISK",
            "SEGMENT": "smb",
            "LAST_ACTIVITY_DATE": days_ago(3),
            "TOTAL_REVENUE": "2500",
            "SUPPORT_TICKETS": "0",
        },
        # Garbled date
        {
            "CUSTOMER_ID": "EDGE_INVALID_DATE",
            "SEGMENT": None,
            "LAST_ACTIVITY_DATE": "not-a-date",
            "TOTAL_REVENUE": "200",
            "SUPPORT_TICKETS": "0",
        },
        # Large enterprise account, recently active
        {
            "CUSTOMER_ID": "EDGE_HIGH_VALUE",
            "SEGMENT": "enterprise",
            "LAST_ACTIVITY_DATE": days_ago(10),
            "TOTAL_REVENUE": "20000",
            "SUPPORT_TICKETS": "1",
        },
    ])


@pytest.fixture
def upload_rows(days_ago):
    """Raw CSV rows with loosely spelled headers."""
    return [
        {"Customer Name": "Acme", "Last Activity Date": "", "Total Revenue": "0",
         "Support Tickets": "0"},
        {"Customer Name": "Beta Co", "Last Activity Date": days_ago(95),
         "Total Revenue": "50000", "Support Tickets": "2"},
        {"Customer Name": "", "Email": "x@x.com"},
        {"Customer Name": "Gamma", "Last Activity Date": "not-a-date",
         "Total Revenue": "200", "Support Tickets": "0"},
    ]
