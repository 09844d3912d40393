"""
Scoring configuration for churn risk heuristics.

All scoring thresholds, points and factor texts are defined here for easy
tuning. Two heuristics exist side by side and are never merged:

- Import-time: applied to every customer created from an uploaded CSV
- Bulk re-analysis: applied when all customers of an account are re-scored
  and no AI provider answered
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


RISK_LEVEL_ORDER = ["low", "medium", "high", "critical"]


@dataclass
class ScoringConfig:
    """
    Configuration for all scoring components.

    Threshold tables are ordered, first match wins:
    - inactivity: days inactive > threshold
    - tickets: support tickets > threshold
    - low revenue: revenue < threshold
    - high value: revenue >= threshold

    Factor templates use str.format fields: {days}, {n}, {revenue}, {segment}.
    """

    name: str = "import_time"

    # === Inactivity ===
    inactivity_thresholds: List[Tuple[int, int]] = field(default_factory=lambda: [
        (90, 40),   # >90 days: long gone
        (60, 25),   # 61-90 days
        (30, 15),   # 31-60 days
        # <=30 days: 0 points
    ])
    inactivity_default: int = 0
    inactivity_factor: str = "{days} days since last activity"
    missing_activity_points: int = 35
    missing_activity_factor: str = "No recorded activity"
    invalid_activity_points: int = 10
    invalid_activity_factor: str = "Last activity date unknown or invalid"

    # === Support tickets ===
    # Third element is the factor template, None for no factor
    ticket_thresholds: List[Tuple[int, int, Optional[str]]] = field(default_factory=lambda: [
        (10, 30, "High support ticket volume ({n})"),
        (5, 20, "Elevated support tickets ({n})"),
        (0, 10, None),
    ])
    ticket_default: int = 0

    # === Revenue ===
    zero_revenue_points: int = 15
    zero_revenue_factor: str = "No revenue generated"
    low_revenue_thresholds: List[Tuple[float, int, Optional[str]]] = field(default_factory=lambda: [
        (100, 10, "Low revenue (${revenue:.2f})"),
    ])
    # Negative points lower the score of high-value accounts
    high_value_thresholds: List[Tuple[float, int]] = field(default_factory=list)
    revenue_default: int = 0

    # === Segment ===
    segment_points: Dict[str, int] = field(default_factory=dict)
    segment_factor: str = "{segment} segment account"
    segment_default: int = 0

    # === Risk level categorization (minimum score, level), highest first ===
    risk_levels: List[Tuple[int, str]] = field(default_factory=lambda: [
        (70, "critical"),
        (50, "high"),
        (30, "medium"),
        (0, "low"),
    ])

    no_factors_text: str = "No significant risk factors detected"

    # === Metadata ===
    min_score: int = 0
    max_score: int = 100
    version: str = "1.0.0"

    def get_risk_level(self, score: int) -> str:
        """Map numeric score to risk level."""
        for min_score, level in self.risk_levels:
            if score >= min_score:
                return level
        return self.risk_levels[-1][1]

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ScoringConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to dictionary of plain lists and dicts."""
        return _plain(asdict(self))


def _plain(value):
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


# CSV upload heuristic
IMPORT_TIME_CONFIG = ScoringConfig()

# Re-analysis heuristic, used as the fallback when no AI provider answers
BULK_REANALYSIS_CONFIG = ScoringConfig(
    name="bulk_reanalysis",
    inactivity_thresholds=[
        (365, 50),  # over a year
        (180, 35),  # over six months
        (90, 25),   # over a quarter
        (30, 15),   # over a month
    ],
    missing_activity_points=25,
    missing_activity_factor="Last activity unknown",
    invalid_activity_points=25,
    invalid_activity_factor="Last activity unknown",
    ticket_thresholds=[
        (10, 20, "High support ticket volume ({n})"),
        (5, 10, "Elevated support tickets ({n})"),
    ],
    zero_revenue_points=20,
    high_value_thresholds=[
        (10000, -15),
        (1000, -5),
    ],
    segment_points={"enterprise": 10},
    risk_levels=[
        (80, "critical"),
        (60, "high"),
        (30, "medium"),
        (0, "low"),
    ],
)


class ScoringStrategy(str, Enum):
    """Named scoring heuristics."""

    IMPORT_TIME = "import_time"
    BULK_REANALYSIS = "bulk_reanalysis"

    @property
    def config(self) -> ScoringConfig:
        return STRATEGY_CONFIGS[self]


STRATEGY_CONFIGS = {
    ScoringStrategy.IMPORT_TIME: IMPORT_TIME_CONFIG,
    ScoringStrategy.BULK_REANALYSIS: BULK_REANALYSIS_CONFIG,
}

# Default configuration instance
DEFAULT_CONFIG = IMPORT_TIME_CONFIG
