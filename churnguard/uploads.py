"""
CSV upload runner.

Single entry point for importing an uploaded customer file.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
import uuid

from .exceptions import UnsupportedFileError, EmptyUploadError
from .csv_source import read_customer_csv
from .ingestion import IngestionOrchestrator, IngestionResult
from .log import get_logger
from .repository import CustomerRepository, InMemoryCustomerRepository
from .scorer import ChurnScorer
from .upload_log import UploadLogger

logger = get_logger(__name__)


@dataclass
class UploadReport:
    """Container for one processed upload."""

    upload_id: str
    owner_id: str
    filename: str
    file_size_bytes: int
    result: IngestionResult
    created_at: datetime
    processed_at: datetime

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"[{self.upload_id}] {self.filename}",
            f"  {self.result.message}",
            f"  Total: {self.result.total}, Imported: {self.result.imported}, "
            f"Failed: {self.result.failed}",
        ]
        for error in self.result.to_dict()["errors"]:
            lines.append(f"  Row {error['row']}: {error['error']}")
        return "\n".join(lines)


class CsvImporter:
    """
    Imports customer CSV files for an owner.

    Usage:
        importer = CsvImporter(logs_dir="logs")
        report = importer.run("customers.csv", owner_id="user_123")
        print(report.summary())
    """

    def __init__(
        self,
        repository: Optional[CustomerRepository] = None,
        scorer: Optional[ChurnScorer] = None,
        logs_dir: Path | str = "logs",
    ):
        """
        Initialize importer.

        Args:
            repository: Destination for imported customers
            scorer: Defaults to the import-time heuristic
            logs_dir: Directory for upload audit logs
        """
        self.repository = repository if repository is not None else InMemoryCustomerRepository()
        self.orchestrator = IngestionOrchestrator(scorer=scorer, repository=self.repository)
        self.upload_logger = UploadLogger(Path(logs_dir))

    def generate_upload_id(self) -> str:
        """Generate unique upload ID: upload_YYYYMMDD_XXXXXXXX"""
        date_str = datetime.now().strftime("%Y%m%d")
        short_uuid = uuid.uuid4().hex[:8]
        return f"upload_{date_str}_{short_uuid}"

    def run(self, path: Path | str | None, owner_id: str, now=None) -> UploadReport:
        """
        Import one CSV file.

        Args:
            path: CSV file to import
            owner_id: Account the customers are created under
            now: Reference time for inactivity

        Returns:
            UploadReport with the ingestion result

        Raises:
            EmptyUploadError: If no file is given
            UnsupportedFileError: If the file is not a .csv
        """
        if path is None or str(path) == "":
            raise EmptyUploadError()
        path = Path(path)
        if path.suffix.lower() != ".csv":
            raise UnsupportedFileError()

        upload_id = self.generate_upload_id()
        created_at = datetime.now()

        try:
            rows = read_customer_csv(path)
        except Exception as e:
            # Batch-level failure: nothing was imported
            self.upload_logger.log_failure(upload_id, owner_id, path.name, str(e))
            logger.error(
                "Upload could not be read",
                extra={"upload_id": upload_id, "filename": path.name, "error": str(e)},
            )
            raise

        result = self.orchestrator.ingest(rows, owner_id, now=now)

        report = UploadReport(
            upload_id=upload_id,
            owner_id=owner_id,
            filename=path.name,
            file_size_bytes=path.stat().st_size,
            result=result,
            created_at=created_at,
            processed_at=datetime.now(),
        )
        self.upload_logger.log_upload(report)
        return report

    def list_uploads(self):
        """
        Get summary of all past uploads.

        Returns:
            DataFrame with upload history
        """
        return self.upload_logger.get_summary_dataframe()
