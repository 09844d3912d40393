"""
Batch ingestion of uploaded customer rows.

Every row is normalized, parsed, scored with the import-time heuristic
and handed to the repository. A bad row is recorded and skipped; it
never aborts the batch.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import ScoringStrategy
from .log import get_logger
from .normalizer import normalize_row
from .records import CustomerRecord
from .repository import CustomerRepository
from .scorer import ChurnScorer, as_utc

logger = get_logger(__name__)

# Row numbers are 1-indexed and the header occupies the first line
HEADER_OFFSET = 2

DEFAULT_ERROR_DISPLAY_LIMIT = 10


@dataclass
class RowError:
    """A row that could not be imported."""

    row: int
    error: str

    def to_dict(self) -> dict:
        return {"row": self.row, "error": self.error}


@dataclass
class IngestionResult:
    """
    Outcome of one ingestion batch.

    errors keeps every failure in original row order; truncation for
    display happens in to_dict().
    """

    total: int = 0
    imported: int = 0
    failed: int = 0
    errors: List[RowError] = field(default_factory=list)
    records: List[CustomerRecord] = field(default_factory=list)

    @property
    def message(self) -> str:
        message = f"Successfully imported {self.imported} customers"
        if self.failed > 0:
            message += f", {self.failed} failed"
        return message

    def to_dict(self, max_errors: Optional[int] = DEFAULT_ERROR_DISPLAY_LIMIT) -> dict:
        """Summary for API responses, with at most max_errors errors."""
        errors = self.errors if max_errors is None else self.errors[:max_errors]
        return {
            "total": self.total,
            "imported": self.imported,
            "failed": self.failed,
            "errors": [error.to_dict() for error in errors],
        }


class IngestionOrchestrator:
    """
    Drives normalize -> parse -> score -> persist over a batch of rows.

    Usage:
        orchestrator = IngestionOrchestrator(repository=repo)
        result = orchestrator.ingest(rows, owner_id="user_123")
        print(result.message)
    """

    def __init__(
        self,
        scorer: Optional[ChurnScorer] = None,
        repository: Optional[CustomerRepository] = None,
    ):
        """
        Args:
            scorer: Defaults to the import-time heuristic
            repository: Receives every imported record; None keeps
                records in the result only
        """
        self.scorer = scorer or ChurnScorer.for_strategy(ScoringStrategy.IMPORT_TIME)
        self.repository = repository

    def ingest(
        self,
        rows: Iterable[Mapping[str, Any]],
        owner_id: str,
        now=None,
    ) -> IngestionResult:
        """
        Import a batch of raw rows for one owner.

        Rows are parsed one by one, scored together in a single vectorized
        pass and then persisted one by one.

        Args:
            rows: Header -> value mappings, raw or already normalized
            owner_id: Account the customers are created under
            now: Reference time for inactivity (default: current UTC time)

        Returns:
            IngestionResult with counts, row errors and created records
        """
        now = as_utc(now)
        result = IngestionResult()

        parsed: List[Tuple[int, CustomerRecord]] = []
        for position, raw in enumerate(rows):
            row_number = position + HEADER_OFFSET
            result.total += 1
            try:
                parsed.append((row_number, self.parse_row(raw, owner_id)))
            except Exception as e:
                self._record_failure(result, row_number, e, owner_id)

        outcomes = self.score_records([record for _, record in parsed], now)
        for (row_number, record), scored in zip(parsed, outcomes):
            if isinstance(scored, Exception):
                self._record_failure(result, row_number, scored, owner_id)
                continue
            try:
                record.apply_score(
                    scored["CHURN_SCORE"],
                    scored["RISK_LEVEL"],
                    scored["RISK_FACTORS"],
                )
                if self.repository is not None:
                    record.customer_id = self.repository.create(record, owner_id)
            except Exception as e:
                self._record_failure(result, row_number, e, owner_id)
                continue

            result.records.append(record)
            result.imported += 1

        result.errors.sort(key=lambda error: error.row)
        logger.info(
            "Ingestion finished",
            extra={
                "owner_id": owner_id,
                "total": result.total,
                "imported": result.imported,
                "failed": result.failed,
            },
        )
        return result

    def parse_row(self, raw: Mapping[str, Any], owner_id: str) -> CustomerRecord:
        """
        Normalize and parse a single row.

        Raises:
            MissingFieldError: If the row has no name
        """
        record = CustomerRecord.from_row(normalize_row(raw))
        record.owner_id = owner_id
        return record

    def score_records(
        self, records: List[CustomerRecord], now
    ) -> List[Union[dict, Exception]]:
        """
        Score parsed records in one pass.

        When the batch raises, every record is scored on its own and a
        failing record gets its exception in place of a score.
        """
        if not records:
            return []
        frame = pd.DataFrame([record.to_scoring_row() for record in records])
        try:
            scored = self.scorer.score(frame, now=now).df
        except Exception as e:
            logger.warning("Batch scoring failed, scoring rows one by one", extra={"error": str(e)})
            return [self._score_one(record, now) for record in records]
        return [
            {
                "CHURN_SCORE": int(score),
                "RISK_LEVEL": level,
                "RISK_FACTORS": list(factors),
            }
            for score, level, factors in zip(
                scored["CHURN_SCORE"], scored["RISK_LEVEL"], scored["RISK_FACTORS"]
            )
        ]

    def _score_one(self, record: CustomerRecord, now) -> Union[dict, Exception]:
        try:
            return self.scorer.score_single(record, now=now)
        except Exception as e:
            return e

    def _record_failure(
        self, result: IngestionResult, row_number: int, error: Exception, owner_id: str
    ) -> None:
        message = str(error) or "Failed to import row"
        logger.warning(
            "Row import failed",
            extra={"owner_id": owner_id, "row": row_number, "error": message},
        )
        result.errors.append(RowError(row=row_number, error=message))
        result.failed += 1
