"""Inactivity scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer

ACTIVITY_VALID = "valid"
ACTIVITY_INVALID = "invalid"
ACTIVITY_MISSING = "missing"


class ActivityScorer(BaseScorer):
    """
    Score based on days since the customer's last activity.

    Long silences are the strongest churn signal we have. A customer
    with no recorded activity at all is treated almost as badly as one
    gone for a quarter; an unreadable date gets a small penalty.

    Points (import-time):
    - no date: 35
    - unparseable date: 10
    - >90 days: 40
    - 61-90 days: 25
    - 31-60 days: 15
    - <=30 days: 0
    """

    name = "activity"

    @property
    def required_columns(self) -> list[str]:
        return ["DAYS_INACTIVE", "ACTIVITY_STATUS"]

    def _conditions(self, df: pd.DataFrame) -> list[pd.Series]:
        status = df["ACTIVITY_STATUS"]
        days = df["DAYS_INACTIVE"]

        conditions = [status == ACTIVITY_MISSING, status == ACTIVITY_INVALID]
        for threshold, _ in self.config.inactivity_thresholds:
            conditions.append((status == ACTIVITY_VALID) & (days > threshold))
        return conditions

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Calculate inactivity score."""
        self.validate(df)

        choices = [
            self.config.missing_activity_points,
            self.config.invalid_activity_points,
        ]
        choices += [points for _, points in self.config.inactivity_thresholds]

        return pd.Series(
            np.select(self._conditions(df), choices, default=self.config.inactivity_default),
            index=df.index,
            dtype=int,
        )

    def explain(self, df: pd.DataFrame) -> pd.Series:
        """Factor text for inactivity."""
        self.validate(df)
        days_text = df["DAYS_INACTIVE"].map(
            lambda days: self.config.inactivity_factor.format(days=int(days))
            if pd.notna(days) else ""
        )

        choices = [
            self.config.missing_activity_factor,
            self.config.invalid_activity_factor,
        ]
        choices += [days_text] * len(self.config.inactivity_thresholds)
        return self.select_text(df, self._conditions(df), choices)
