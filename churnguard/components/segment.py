"""Customer segment scoring component."""

import pandas as pd

from .base import BaseScorer


class SegmentScorer(BaseScorer):
    """
    Score based on customer segment.

    Only the bulk re-analysis heuristic weights segments: losing an
    enterprise account costs the most, so it gets +10. The import-time
    heuristic has no segment points and this component scores 0.
    """

    name = "segment"

    @property
    def required_columns(self) -> list[str]:
        return ["SEGMENT"]

    def _segments(self, df: pd.DataFrame) -> pd.Series:
        return df["SEGMENT"].fillna("").astype(str).str.strip().str.lower()

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Map segments to risk points."""
        self.validate(df)
        return (
            self._segments(df)
            .map(self.config.segment_points)
            .fillna(self.config.segment_default)
            .astype(int)
        )

    def explain(self, df: pd.DataFrame) -> pd.Series:
        """Factor text for weighted segments."""
        self.validate(df)
        segments = self._segments(df)
        weighted = segments.map(self.config.segment_points).fillna(0) != 0
        texts = segments.map(
            lambda s: self.config.segment_factor.format(segment=s.capitalize())
        )
        return self.select_text(df, [weighted], [texts])
