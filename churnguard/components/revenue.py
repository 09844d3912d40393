"""Revenue scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer


class RevenueScorer(BaseScorer):
    """
    Score based on total revenue from the customer.

    Customers who never paid, or paid very little, have the least
    invested in staying. High-value thresholds carry negative points
    and pull the score of large accounts down.

    Points (import-time):
    - 0 revenue: 15
    - under $100: 10
    - $100 and above: 0
    """

    name = "revenue"

    @property
    def required_columns(self) -> list[str]:
        return ["TOTAL_REVENUE"]

    def _conditions(self, df: pd.DataFrame) -> list[pd.Series]:
        revenue = df["TOTAL_REVENUE"]
        conditions = [revenue == 0]
        conditions += [revenue < limit for limit, _, _ in self.config.low_revenue_thresholds]
        conditions += [revenue >= floor for floor, _ in self.config.high_value_thresholds]
        return conditions

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Calculate revenue score."""
        self.validate(df)

        choices = [self.config.zero_revenue_points]
        choices += [points for _, points, _ in self.config.low_revenue_thresholds]
        choices += [points for _, points in self.config.high_value_thresholds]

        return pd.Series(
            np.select(self._conditions(df), choices, default=self.config.revenue_default),
            index=df.index,
            dtype=int,
        )

    def explain(self, df: pd.DataFrame) -> pd.Series:
        """Factor text for revenue."""
        self.validate(df)
        revenue = df["TOTAL_REVENUE"]

        choices = [self.config.zero_revenue_factor]
        for _, _, template in self.config.low_revenue_thresholds:
            if template is None:
                choices.append(None)
            else:
                choices.append(revenue.map(lambda r, t=template: t.format(revenue=r)))
        choices += [None] * len(self.config.high_value_thresholds)
        return self.select_text(df, self._conditions(df), choices)
