"""
Bulk churn re-analysis of persisted customers.

Customers are sent in small batches to a chain of analysis providers
(hosted AI models wrapped as callables). Each provider either answers,
fails, or is skipped while it is cooling down after a rate-limit or
quota error. When every provider fails, the bulk re-analysis heuristic
answers instead, so a re-analysis always produces a result.

Usage:
    chain = AnalysisProviderChain([("openai", openai_analyzer)])
    reanalyzer = BulkReanalyzer(repository, chain)
    stats = reanalyzer.reanalyze(owner_id="user_123")
"""

import json
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .config import ScoringStrategy
from .exceptions import AnalysisResponseError, NoCustomersError
from .log import get_logger
from .records import CustomerRecord
from .repository import CustomerRepository
from .schemas import ANALYSIS_RESULT_SCHEMA, SchemaError
from .scorer import ChurnScorer

logger = get_logger(__name__)

# A provider takes customer payloads and returns result dicts, or the raw
# JSON text of a model response
Analyzer = Callable[[List[dict]], Union[List[dict], str]]

RATE_LIMIT_MARKERS = ("rate", "quota")

RECOMMENDED_ACTIONS = {
    "critical": "Urgent: CSM call + retention offer",
    "high": "Schedule CSM call this week",
    "medium": "Send re-engagement email",
    "low": "Continue normal engagement",
}

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def customer_payload(record: CustomerRecord) -> dict:
    """Provider-facing view of a persisted customer."""
    return {
        "id": record.customer_id,
        "name": record.name,
        "email": record.email or "",
        "lastActivityDate": record.last_activity_date,
        "totalRevenue": record.total_revenue,
        "supportTickets": record.support_tickets,
        "segment": record.segment or "unknown",
    }


def parse_analysis_response(text: str) -> List[dict]:
    """
    Parse a model response into a list of result dicts.

    Markdown code fences around the JSON are tolerated.

    Raises:
        AnalysisResponseError: If the text is not a JSON array
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AnalysisResponseError(f"Analysis response is not valid JSON: {e}") from e
    if not isinstance(parsed, list):
        raise AnalysisResponseError("Analysis response must be a JSON array")
    return parsed


def validate_analysis_results(results: Sequence[dict]) -> List[dict]:
    """
    Check provider results and fill in optional fields.

    riskLevel is lower-cased, missing riskFactors become the no-factor
    sentinel and missing recommendedAction is derived from the tier.

    Raises:
        AnalysisResponseError: If any result violates ANALYSIS_RESULT_SCHEMA
    """
    if not results:
        return []
    df = pd.DataFrame(list(results))
    if "riskLevel" in df.columns:
        df["riskLevel"] = df["riskLevel"].astype(str).str.strip().str.lower()
    try:
        df = ANALYSIS_RESULT_SCHEMA.validate(df)
    except SchemaError as e:
        raise AnalysisResponseError(f"Analysis results failed validation: {e}") from e

    no_factors = ScoringStrategy.BULK_REANALYSIS.config.no_factors_text
    validated = []
    for row in df.to_dict(orient="records"):
        factors = row.get("riskFactors")
        if not isinstance(factors, list) or not factors:
            factors = [no_factors]
        action = row.get("recommendedAction")
        if not isinstance(action, str) or not action:
            action = RECOMMENDED_ACTIONS[row["riskLevel"]]
        validated.append({
            "customerId": row["customerId"],
            "churnScore": int(row["churnScore"]),
            "riskLevel": row["riskLevel"],
            "riskFactors": [str(f) for f in factors],
            "recommendedAction": action,
        })
    return validated


class HeuristicAnalyzer:
    """Rule-based analyzer; the last link of every provider chain."""

    def __init__(self, strategy: ScoringStrategy = ScoringStrategy.BULK_REANALYSIS, now=None):
        self.scorer = ChurnScorer.for_strategy(strategy)
        self.now = now

    def __call__(self, customers: List[dict]) -> List[dict]:
        if not customers:
            return []
        df = pd.DataFrame(
            {
                "CUSTOMER_ID": [c.get("id") for c in customers],
                "LAST_ACTIVITY_DATE": [c.get("lastActivityDate") for c in customers],
                "TOTAL_REVENUE": [c.get("totalRevenue") for c in customers],
                "SUPPORT_TICKETS": [c.get("supportTickets") for c in customers],
                "SEGMENT": [c.get("segment") for c in customers],
            }
        )
        result = self.scorer.score(df, now=self.now)
        return [
            {
                "customerId": row["CUSTOMER_ID"],
                "churnScore": int(row["CHURN_SCORE"]),
                "riskLevel": row["RISK_LEVEL"],
                "riskFactors": list(row["RISK_FACTORS"]),
                "recommendedAction": RECOMMENDED_ACTIONS[row["RISK_LEVEL"]],
            }
            for _, row in result.df.iterrows()
        ]


@dataclass
class ProviderStatus:
    """
    Availability of one provider.

    Available while unavailable_until is None or in the past;
    mark_down() makes it unavailable until the cooldown ends.
    """

    name: str
    unavailable_until: Optional[float] = None
    last_error: Optional[str] = None

    def is_available(self, now: float) -> bool:
        if self.unavailable_until is not None and now >= self.unavailable_until:
            logger.info("Provider available again", extra={"provider": self.name})
            self.unavailable_until = None
        return self.unavailable_until is None

    def mark_down(self, error: Exception, now: float, cooldown_seconds: float) -> None:
        self.unavailable_until = now + cooldown_seconds
        self.last_error = str(error)
        logger.warning(
            "Provider marked as down",
            extra={"provider": self.name, "error": str(error), "cooldown": cooldown_seconds},
        )


def is_rate_limited(error: Exception) -> bool:
    """Whether an error looks like a rate-limit or quota rejection."""
    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class AnalysisProviderChain:
    """
    Ordered analysis providers with a heuristic fallback.

    Providers are tried in order; the first valid answer wins.
    """

    def __init__(
        self,
        providers: Sequence[Tuple[str, Analyzer]] = (),
        fallback: Optional[Analyzer] = None,
        cooldown_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            providers: (name, analyzer) pairs, most preferred first
            fallback: Used when no provider answers (default: bulk heuristic)
            cooldown_seconds: How long a rate-limited provider is skipped
            clock: Monotonic time source
        """
        self.providers = list(providers)
        self.fallback = fallback or HeuristicAnalyzer()
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self.status: Dict[str, ProviderStatus] = {
            name: ProviderStatus(name) for name, _ in self.providers
        }

    def analyze(self, customers: List[dict]) -> List[dict]:
        """Analyze one batch of customer payloads."""
        for name, analyzer in self.providers:
            status = self.status[name]
            if not status.is_available(self.clock()):
                continue
            try:
                response = analyzer(customers)
                if isinstance(response, str):
                    response = parse_analysis_response(response)
                results = validate_analysis_results(response)
            except Exception as e:
                logger.warning(
                    "Analysis provider failed",
                    extra={"provider": name, "error": str(e)},
                )
                if is_rate_limited(e):
                    status.mark_down(e, self.clock(), self.cooldown_seconds)
                continue
            logger.info("Analysis provider answered", extra={"provider": name})
            return results

        if self.providers:
            logger.error("All analysis providers failed, using heuristic fallback")
        return validate_analysis_results(self.fallback(customers))


@dataclass
class ReanalysisReport:
    """Statistics of one bulk re-analysis."""

    total_analyzed: int
    high_risk_count: int
    average_churn_score: int
    results: List[dict]

    def to_dict(self) -> dict:
        return {
            "total_analyzed": self.total_analyzed,
            "high_risk_count": self.high_risk_count,
            "average_churn_score": self.average_churn_score,
            "results": self.results,
        }


class BulkReanalyzer:
    """Re-scores every customer of an owner and writes the scores back."""

    def __init__(
        self,
        repository: CustomerRepository,
        chain: Optional[AnalysisProviderChain] = None,
        batch_size: int = 10,
        pause_seconds: float = 0.5,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.repository = repository
        self.chain = chain or AnalysisProviderChain()
        self.batch_size = batch_size
        self.pause_seconds = pause_seconds
        self.sleep = sleep

    def reanalyze(self, owner_id: str) -> ReanalysisReport:
        """
        Raises:
            NoCustomersError: If the owner has no customers
        """
        customers = self.repository.list_customers(owner_id)
        if not customers:
            raise NoCustomersError()

        payloads = [customer_payload(record) for record in customers]
        results: List[dict] = []
        for start in range(0, len(payloads), self.batch_size):
            batch = payloads[start:start + self.batch_size]
            known_ids = {payload["id"] for payload in batch}
            for result in self.chain.analyze(batch):
                if result["customerId"] not in known_ids:
                    logger.warning(
                        "Ignoring result for unknown customer",
                        extra={"customer_id": result["customerId"]},
                    )
                    continue
                results.append(result)

            # Keep clear of provider rate limits
            if start + self.batch_size < len(payloads):
                self.sleep(self.pause_seconds)

        for result in results:
            self.repository.update_score(
                result["customerId"],
                result["churnScore"],
                result["riskLevel"],
                result["riskFactors"],
            )

        high_risk = sum(1 for r in results if r["riskLevel"] in ("high", "critical"))
        average = (
            round(sum(r["churnScore"] for r in results) / len(results)) if results else 0
        )
        logger.info(
            "Re-analysis finished",
            extra={"owner_id": owner_id, "analyzed": len(results), "high_risk": high_risk},
        )
        return ReanalysisReport(
            total_analyzed=len(results),
            high_risk_count=high_risk,
            average_churn_score=average,
            results=results,
        )
