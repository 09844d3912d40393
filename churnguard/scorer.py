"""
Main ChurnScorer class - orchestrates scoring components.

Usage:
    from churnguard import ChurnScorer, ScoringStrategy

    # Import-time heuristic (default)
    scorer = ChurnScorer()
    result = scorer.score(df)

    # Bulk re-analysis heuristic
    scorer = ChurnScorer.for_strategy(ScoringStrategy.BULK_REANALYSIS)
    result = scorer.score(df)

    # Access results
    print(result.df[["NAME", "CHURN_SCORE", "RISK_LEVEL", "RISK_FACTORS"]])
    print(result.summary())
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .classifier import at_or_above
from .config import ScoringConfig, ScoringStrategy, DEFAULT_CONFIG
from .components import (
    ActivityScorer,
    TicketScorer,
    RevenueScorer,
    SegmentScorer,
    ACTIVITY_VALID,
    ACTIVITY_INVALID,
    ACTIVITY_MISSING,
)
from .records import CustomerRecord, parse_revenue, parse_tickets
from .schemas import SCORING_INPUT_SCHEMA, SCORING_OUTPUT_SCHEMA


def utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz="UTC")


def as_utc(now: Optional[Union[datetime, pd.Timestamp, str]]) -> pd.Timestamp:
    """Normalize a reference time to a UTC timestamp (None means now)."""
    if now is None:
        return utc_now()
    stamp = pd.Timestamp(now)
    if stamp.tzinfo is None:
        return stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC")


def days_since(dates: pd.Series, now: pd.Timestamp) -> tuple[pd.Series, pd.Series]:
    """
    Whole days elapsed since each date, with a parse status per row.

    Blank values are "missing", values that are not dates are "invalid".
    Text without any digit ("today", "now") is never a date.
    Days are floored, so a date 30.9 days ago counts as 30.

    Returns:
        (days, status) Series aligned with dates
    """
    text = dates.where(dates.notna(), "").astype(str).str.strip()
    missing = text == ""
    has_digit = text.str.contains(r"\d", regex=True)
    parsed = pd.to_datetime(
        text.where(has_digit), errors="coerce", utc=True, format="mixed"
    )
    days = np.floor((now - parsed) / pd.Timedelta(days=1))
    status = np.select(
        [missing, parsed.isna()],
        [ACTIVITY_MISSING, ACTIVITY_INVALID],
        default=ACTIVITY_VALID,
    )
    return (
        pd.Series(days, index=dates.index, dtype=float),
        pd.Series(status, index=dates.index, dtype=object),
    )


@dataclass
class ScoringResult:
    """
    Container for scoring results with component breakdown.

    Attributes:
        df: Original DataFrame with scores added
        component_columns: List of component score column names
    """

    df: pd.DataFrame
    component_columns: list[str]

    def get_high_risk(self, min_level: str = "high") -> pd.DataFrame:
        """
        Get customers at or above a risk level.

        Args:
            min_level: Minimum risk level ("low", "medium", "high", "critical")

        Returns:
            DataFrame filtered to customers at or above the specified level
        """
        mask = self.df["RISK_LEVEL"].map(lambda level: at_or_above(level, min_level))
        return self.df[mask.astype(bool)]

    def summary(self) -> pd.DataFrame:
        """
        Generate summary statistics by segment and risk level.

        Returns:
            DataFrame with counts and average scores
        """
        df = self.df.assign(SEGMENT=self.df["SEGMENT"].fillna("unknown"))
        return (
            df.groupby(["SEGMENT", "RISK_LEVEL"])
            .agg(
                count=("CHURN_SCORE", "count"),
                avg_score=("CHURN_SCORE", "mean"),
            )
            .round(1)
        )

    def component_breakdown(self) -> pd.DataFrame:
        """
        Show average contribution of each component.

        Returns:
            DataFrame with component statistics
        """
        stats = {}
        for col in self.component_columns:
            component_name = col.replace("_score", "")
            stats[component_name] = {
                "mean": self.df[col].mean(),
                "max": self.df[col].max(),
                "min": self.df[col].min(),
            }
        return pd.DataFrame(stats).T.round(1)


class ChurnScorer:
    """
    Vectorized churn risk scoring engine.

    Calculates component scores independently using pandas operations,
    sums them, clamps the total to [0, 100] and classifies it.

    Components:
    - Activity: days since last activity, or missing/invalid date
    - Tickets: support ticket volume
    - Revenue: zero, low or high-value revenue
    - Segment: weighted segments (bulk re-analysis only)
    """

    REQUIRED_COLUMNS = [
        "LAST_ACTIVITY_DATE",
        "TOTAL_REVENUE",
        "SUPPORT_TICKETS",
        "SEGMENT",
    ]

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize scorer with configuration.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
        """
        self.config = config or DEFAULT_CONFIG
        self._init_components()

    @classmethod
    def for_strategy(cls, strategy: ScoringStrategy | str) -> "ChurnScorer":
        """Scorer for one of the named heuristics."""
        return cls(ScoringStrategy(strategy).config)

    def _init_components(self) -> None:
        """Initialize all scoring components, in factor order."""
        self.components = {
            "activity": ActivityScorer(self.config),
            "tickets": TicketScorer(self.config),
            "revenue": RevenueScorer(self.config),
            "segment": SegmentScorer(self.config),
        }

    def validate_input(self, df: pd.DataFrame) -> None:
        """
        Validate required columns exist.

        Args:
            df: Input DataFrame

        Raises:
            ValueError: If required columns are missing
        """
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def prepare(self, df: pd.DataFrame, now=None) -> pd.DataFrame:
        """
        Derive the columns the components read.

        Revenue and tickets are parsed leniently (unparsable -> 0) and the
        last activity date becomes DAYS_INACTIVE plus ACTIVITY_STATUS.
        """
        self.validate_input(df)
        result = df.copy()
        result["TOTAL_REVENUE"] = result["TOTAL_REVENUE"].map(parse_revenue).astype(float)
        result["SUPPORT_TICKETS"] = result["SUPPORT_TICKETS"].map(parse_tickets).astype(int)
        result["DAYS_INACTIVE"], result["ACTIVITY_STATUS"] = days_since(
            result["LAST_ACTIVITY_DATE"], as_utc(now)
        )
        return SCORING_INPUT_SCHEMA.validate(result)

    def score(self, df: pd.DataFrame, now=None) -> ScoringResult:
        """
        Calculate churn risk scores for all customers.

        Args:
            df: DataFrame with required columns
            now: Reference time for inactivity (default: current UTC time)

        Returns:
            ScoringResult with scores and component breakdown

        Example:
            >>> scorer = ChurnScorer()
            >>> result = scorer.score(customer_df)
            >>> at_risk = result.get_high_risk("high")
        """
        result = self.prepare(df, now)

        # Calculate all component scores (vectorized)
        component_cols = []
        factor_texts = []
        for name, component in self.components.items():
            col_name = f"{name}_score"
            result[col_name] = component.score(result)
            component_cols.append(col_name)
            factor_texts.append(component.explain(result).tolist())

        # Sum all components, clamped to the score range
        result["CHURN_SCORE"] = (
            result[component_cols]
            .sum(axis=1)
            .clip(self.config.min_score, self.config.max_score)
            .astype(int)
        )

        result["RISK_LEVEL"] = (
            result["CHURN_SCORE"].map(self.config.get_risk_level).astype(object)
        )

        result["RISK_FACTORS"] = pd.Series(
            [
                [text for text in row if text] or [self.config.no_factors_text]
                for row in zip(*factor_texts)
            ],
            index=result.index,
            dtype=object,
        )

        SCORING_OUTPUT_SCHEMA.validate(result)
        return ScoringResult(df=result, component_columns=component_cols)

    def score_single(
        self,
        customer: Union[CustomerRecord, Mapping[str, Any]],
        now=None,
    ) -> dict:
        """
        Score a single customer (convenience method).

        Args:
            customer: CustomerRecord, or dictionary with required columns
            now: Reference time for inactivity

        Returns:
            Dictionary with score, risk level, factors and components
        """
        if isinstance(customer, CustomerRecord):
            customer = customer.to_scoring_row()
        df = pd.DataFrame([dict(customer)])
        result = self.score(df, now=now)
        row = result.df.iloc[0]
        return {
            "CHURN_SCORE": int(row["CHURN_SCORE"]),
            "RISK_LEVEL": row["RISK_LEVEL"],
            "RISK_FACTORS": list(row["RISK_FACTORS"]),
            "components": {
                col.replace("_score", ""): int(row[col])
                for col in result.component_columns
            },
        }


def generate_sample_data(n_customers: int = 100, seed: int = 42, now=None) -> pd.DataFrame:
    """
    Generate realistic sample customers for testing.

    - Segment: smb 50%, mid-market 30%, enterprise 20%
    - Activity: ~10% never active, ~3% garbled dates, the rest spread over a year
    - Revenue: log-normal around $2k, ~8% zero
    - Tickets: Poisson, mean 3
    """
    np.random.seed(seed)
    now = as_utc(now)

    segments = np.random.choice(
        ["smb", "mid-market", "enterprise"],
        size=n_customers,
        p=[0.50, 0.30, 0.20],
    )

    days_ago = np.random.randint(0, 400, size=n_customers)
    dates = [(now - pd.Timedelta(days=int(d))).strftime("%Y-%m-%d") for d in days_ago]
    activity_roll = np.random.random(n_customers)
    last_activity = [
        "" if roll < 0.10 else "n/a" if roll < 0.13 else date
        for roll, date in zip(activity_roll, dates)
    ]

    revenue = np.where(
        np.random.random(n_customers) < 0.08,
        0.0,
        np.random.lognormal(mean=7.5, sigma=1.2, size=n_customers),
    )

    tickets = np.random.poisson(lam=3, size=n_customers)

    return pd.DataFrame(
        {
            "CUSTOMER_ID": [f"CUST_{i:04d}" for i in range(n_customers)],
            "NAME": [f"Customer {i:04d}" for i in range(n_customers)],
            "SEGMENT": segments,
            "LAST_ACTIVITY_DATE": last_activity,
            "TOTAL_REVENUE": revenue.round(2),
            "SUPPORT_TICKETS": tickets,
        }
    )
