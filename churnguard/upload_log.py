"""
Upload audit logging.

Writes one JSON document per CSV upload (completed or errored).
"""

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from .uploads import UploadReport


class UploadLogger:
    """Structured JSON logging for uploads."""

    def __init__(self, logs_dir: Path):
        """
        Initialize logger.

        Args:
            logs_dir: Directory to write log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def log_upload(self, report: "UploadReport") -> Path:
        """
        Log a processed upload to a JSON file.

        Args:
            report: UploadReport from CsvImporter

        Returns:
            Path to log file
        """
        log_entry = {
            "upload_id": report.upload_id,
            "owner_id": report.owner_id,
            "filename": report.filename,
            "file_size_bytes": report.file_size_bytes,
            "created_at": report.created_at.isoformat(),
            "processed_at": report.processed_at.isoformat(),
            "status": "completed",
            "records_imported": report.result.imported,
            "records_failed": report.result.failed,
            "total": report.result.total,
            # Full list; display truncation is the caller's concern
            "validation_results": [error.to_dict() for error in report.result.errors],
        }

        log_path = self.logs_dir / f"{report.upload_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2, default=str)

        return log_path

    def log_failure(
        self,
        upload_id: str,
        owner_id: str,
        filename: str,
        error: str,
    ) -> Path:
        """
        Log an upload that could not be read at all.

        Returns:
            Path to log file
        """
        log_entry = {
            "upload_id": upload_id,
            "owner_id": owner_id,
            "filename": filename,
            "created_at": datetime.now().isoformat(),
            "status": "error",
            "error": error,
        }

        log_path = self.logs_dir / f"{upload_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2)

        return log_path

    def get_all_logs(self) -> list[dict]:
        """
        Load all upload logs.

        Returns:
            List of log dictionaries, sorted by file name
        """
        logs = []
        for log_file in sorted(self.logs_dir.glob("upload_*.json")):
            with open(log_file) as f:
                logs.append(json.load(f))
        return logs

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all uploads as DataFrame, newest first.
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            summary.append({
                "upload_id": log["upload_id"],
                "owner_id": log.get("owner_id"),
                "filename": log.get("filename"),
                "created_at": log["created_at"],
                "status": log["status"],
                "imported": log.get("records_imported"),
                "failed": log.get("records_failed"),
            })

        df = pd.DataFrame(summary)
        return df.sort_values("created_at", ascending=False)
