"""Support ticket volume scoring component."""

import numpy as np
import pandas as pd

from .base import BaseScorer


class TicketScorer(BaseScorer):
    """
    Score based on the number of support tickets raised.

    Customers who keep running into problems are more likely to leave.

    Points (import-time):
    - >10 tickets: 30
    - 6-10 tickets: 20
    - 1-5 tickets: 10 (no factor text)
    - 0 tickets: 0
    """

    name = "tickets"

    @property
    def required_columns(self) -> list[str]:
        return ["SUPPORT_TICKETS"]

    def _conditions(self, df: pd.DataFrame) -> list[pd.Series]:
        tickets = df["SUPPORT_TICKETS"]
        return [tickets > threshold for threshold, _, _ in self.config.ticket_thresholds]

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Calculate support ticket score."""
        self.validate(df)
        choices = [points for _, points, _ in self.config.ticket_thresholds]

        return pd.Series(
            np.select(self._conditions(df), choices, default=self.config.ticket_default),
            index=df.index,
            dtype=int,
        )

    def explain(self, df: pd.DataFrame) -> pd.Series:
        """Factor text for support tickets."""
        self.validate(df)
        tickets = df["SUPPORT_TICKETS"]

        choices = []
        for _, _, template in self.config.ticket_thresholds:
            if template is None:
                choices.append(None)
            else:
                choices.append(tickets.map(lambda n, t=template: t.format(n=int(n))))
        return self.select_text(df, self._conditions(df), choices)
