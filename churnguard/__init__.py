"""
ChurnGuard Scoring Package

Rule-based churn risk scoring and CSV ingestion for customer data.
"""

from .classifier import classify
from .config import ScoringConfig, ScoringStrategy
from .ingestion import IngestionOrchestrator, IngestionResult, RowError
from .normalizer import normalize_header, normalize_row
from .records import CustomerRecord
from .repository import CustomerRepository, InMemoryCustomerRepository
from .scorer import ChurnScorer, ScoringResult, generate_sample_data

__all__ = [
    "ChurnScorer",
    "ScoringResult",
    "ScoringConfig",
    "ScoringStrategy",
    "classify",
    "normalize_header",
    "normalize_row",
    "CustomerRecord",
    "CustomerRepository",
    "InMemoryCustomerRepository",
    "IngestionOrchestrator",
    "IngestionResult",
    "RowError",
    "generate_sample_data",
]
__version__ = "1.0.0"
