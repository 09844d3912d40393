"""Base class for scoring components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import pandas as pd

if TYPE_CHECKING:
    from ..config import ScoringConfig


class BaseScorer(ABC):
    """
    Abstract base class for scoring components.

    Each component calculates a single aspect of churn risk using
    vectorized pandas operations, and explains its contribution with
    one factor text per row ("" when it has nothing to report).
    """

    name: str = "base"

    def __init__(self, config: "ScoringConfig"):
        """
        Initialize scorer with configuration.

        Args:
            config: ScoringConfig instance with thresholds and points
        """
        self.config = config

    @abstractmethod
    def score(self, df: pd.DataFrame) -> pd.Series:
        """
        Calculate component score for all rows.

        Args:
            df: Prepared DataFrame with required columns

        Returns:
            Series of integer scores
        """
        pass

    @abstractmethod
    def explain(self, df: pd.DataFrame) -> pd.Series:
        """
        Describe the component's contribution for all rows.

        Returns:
            Series of factor texts, "" where no factor applies
        """
        pass

    @property
    @abstractmethod
    def required_columns(self) -> list[str]:
        """List of columns required by this scorer."""
        pass

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required columns exist."""
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} requires columns: {missing}"
            )

    @staticmethod
    def select_text(
        df: pd.DataFrame,
        conditions: Sequence[pd.Series],
        choices: Sequence,
    ) -> pd.Series:
        """Pick the text of the first matching condition per row."""
        result = pd.Series("", index=df.index, dtype=object)
        for condition, choice in reversed(list(zip(conditions, choices))):
            if choice is None:
                choice = ""
            result = result.where(~condition, choice)
        return result
