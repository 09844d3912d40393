"""Risk tier classification."""

from .config import RISK_LEVEL_ORDER, ScoringStrategy


def classify(score: int, strategy: ScoringStrategy = ScoringStrategy.IMPORT_TIME) -> str:
    """
    Map a churn score to a risk tier using the strategy's threshold table.

    Import-time:     >=70 critical, >=50 high, >=30 medium, else low
    Bulk re-analysis: >=80 critical, >=60 high, >=30 medium, else low
    """
    return ScoringStrategy(strategy).config.get_risk_level(score)


def at_or_above(level: str, min_level: str) -> bool:
    """Whether a risk tier is at least as severe as min_level."""
    return RISK_LEVEL_ORDER.index(level) >= RISK_LEVEL_ORDER.index(min_level)
