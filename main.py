"""
Main Entry Point
=================
Runs the data cleaning pipeline over a CSV file and writes the cleaned
dataset plus the cleaning log.

Usage:
    python main.py
    python main.py --input data/raw.csv --output data/cleaned.csv
    python main.py --config stages.json           # Custom stage list
    python main.py --list-stages                  # Show available stages
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from cleaning_pipeline.config import (
    CLEANED_CSV,
    CLEANING_LOG,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    LOG_LEVEL,
    RAW_CSV,
)
from cleaning_pipeline.exceptions import CleaningError
from cleaning_pipeline.pipeline import STAGE_REGISTRY, Pipeline


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure structured logging for the pipeline."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Tabular data cleaning pipeline",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=str(RAW_CSV),
        help=f"Path to raw CSV file (default: {RAW_CSV})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=str(CLEANED_CSV),
        help=f"Path for the cleaned CSV (default: {CLEANED_CSV})",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON file listing the stages to run (default: built-in pipeline)",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=str(CLEANING_LOG),
        help=f"Path for the cleaning log (default: {CLEANING_LOG})",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=LOG_LEVEL,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--list-stages",
        action="store_true",
        help="List all registered stages and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the pipeline."""
    args = parse_args(argv)
    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.list_stages:
        print(f"\n{'='*60}")
        print("  AVAILABLE STAGES")
        print(f"{'='*60}")
        for name, func in sorted(STAGE_REGISTRY.items()):
            doc = (func.__doc__ or "").strip().splitlines()
            print(f"  {name:<30} {doc[0] if doc else ''}")
        print()
        return

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input file not found: %s", input_path)
        sys.exit(1)

    try:
        pipeline = Pipeline.from_json(args.config) if args.config else Pipeline.default()
        raw = pd.read_csv(input_path)
        logger.info("Loaded %s: %d rows, %d columns", input_path.name, *raw.shape)

        cleaned, report = pipeline.run(raw)

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cleaned.to_csv(output_path, index=False)
        logger.info("Cleaned data saved to %s", output_path)

        report.generate_report(args.report)
        logger.info("Pipeline complete. Cleaning log saved to %s", args.report)
    except FileNotFoundError as exc:
        logger.error("File not found: %s", exc)
        sys.exit(1)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        logger.error("Could not read %s: %s", input_path, exc)
        sys.exit(1)
    except CleaningError as exc:
        logger.error("Pipeline failed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
