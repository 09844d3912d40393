#!/usr/bin/env python3
"""
CLI entry point for ChurnGuard scoring.

Usage:
    # Import a CSV upload for an owner
    python -m churnguard.run import customers.csv --owner user_123

    # Score a CSV without importing it
    python -m churnguard.run score customers.csv --strategy bulk_reanalysis

    # List past uploads
    python -m churnguard.run --list
"""

import argparse
import sys

from .config import ScoringConfig, ScoringStrategy
from .csv_source import read_customer_csv
from .exceptions import ChurnGuardError
from .ingestion import IngestionOrchestrator
from .scorer import ChurnScorer
from .uploads import CsvImporter


def build_scorer(args) -> ChurnScorer:
    if args.config:
        return ChurnScorer(ScoringConfig.from_yaml(args.config))
    return ChurnScorer.for_strategy(args.strategy)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="ChurnGuard churn risk scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m churnguard.run import customers.csv --owner user_123
  python -m churnguard.run score customers.csv --strategy bulk_reanalysis
  python -m churnguard.run --list
        """,
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=["import", "score"],
        help="import: create and score customers; score: print scores only",
    )
    parser.add_argument("file", nargs="?", help="Path to CSV file")
    parser.add_argument("--owner", default="local", help="Owner id for imported customers")
    parser.add_argument(
        "--strategy",
        default=ScoringStrategy.IMPORT_TIME.value,
        choices=[s.value for s in ScoringStrategy],
        help="Scoring heuristic (score command)",
    )
    parser.add_argument("--config", help="YAML scoring config overriding --strategy")
    parser.add_argument("--logs-dir", default="logs", help="Directory for upload logs")
    parser.add_argument(
        "--list",
        action="store_true",
        help="List all past uploads",
    )

    args = parser.parse_args(argv)

    # List uploads
    if args.list:
        df = CsvImporter(logs_dir=args.logs_dir).list_uploads()
        if df.empty:
            print("No uploads found.")
        else:
            print(df.to_string(index=False))
        return 0

    if not args.command or not args.file:
        parser.print_help()
        return 1

    try:
        if args.command == "import":
            # Uploads always use the import-time heuristic unless a config is given
            scorer = ChurnScorer(ScoringConfig.from_yaml(args.config)) if args.config else None
            importer = CsvImporter(scorer=scorer, logs_dir=args.logs_dir)
            report = importer.run(args.file, owner_id=args.owner)
            print(report.summary())
            return 0 if report.result.failed == 0 else 2

        scorer = build_scorer(args)
        orchestrator = IngestionOrchestrator(scorer=scorer)
        result = orchestrator.ingest(read_customer_csv(args.file), owner_id=args.owner)
        for record in result.records:
            factors = "; ".join(record.risk_factors)
            print(f"{record.churn_score:>3}  {record.risk_level:<8}  {record.name}  ({factors})")
        for error in result.errors:
            print(f"Row {error.row}: {error.error}")
        return 0

    except ChurnGuardError as e:
        print(f"ERROR: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
