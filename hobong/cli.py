# hobong/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
from pydantic import ValidationError

from hobong.config.loaders import ConfigLoadError, load_engine_config
from hobong.config.models import EngineConfig
from hobong.data.readers import DataReadError, read_employee_records
from hobong.data.writers import DataWriteError, write_rank_table
from hobong.engines.batch import normalize_batch
from hobong.engines.service import RankService
from hobong.errors import DateInvalid, RemoteAuthError
from hobong.reporting.rank_table import build_rank_frame, status_counts, summarize_rank_distribution
from hobong.utils.date_utils import resolve_target_date
from logging_config import DEFAULT_LOG_DIR, ERROR_LOGGER, setup_logging

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="hobong-rank",
        description="Compute current pay steps and next upgrade dates for a set of employees.",
    )
    parser.add_argument(
        "--census",
        type=str,
        required=True,
        help="Path to the employee records file (.json, .yaml or .csv).",
    )
    parser.add_argument(
        "--as-of",
        type=str,
        default=None,
        help="Reference date YYYY-MM-DD (default: today).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the YAML engine configuration file.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the rank table here (.csv or .parquet) instead of printing it.",
    )
    parser.add_argument(
        "--mode",
        choices=["local", "remote"],
        default=None,
        help="Override the calculation mode from the configuration.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(DEFAULT_LOG_DIR),
        help=f"Directory to store log files (default: {DEFAULT_LOG_DIR})",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the rank CLI; returns the process exit code."""
    args = parse_arguments(argv)
    setup_logging(Path(args.log_dir), debug=args.debug)
    err_logger = logging.getLogger(ERROR_LOGGER)
    logger.info(f"Starting rank run with arguments: {vars(args)}")

    try:
        config = load_engine_config(args.config)
        if args.mode:
            data = config.model_dump()
            data["remote"]["mode"] = args.mode
            config = EngineConfig.model_validate(data)
        target = resolve_target_date(args.as_of)
        records = read_employee_records(args.census)
    except (ConfigLoadError, DataReadError, DateInvalid, ValidationError) as e:
        err_logger.error(f"Could not start rank run: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    service = RankService(config)
    try:
        results = service.compute(records, target)
    except RemoteAuthError as e:
        err_logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    employees = {key: r.value for key, r in normalize_batch(records).items() if r.ok}
    rank_df = build_rank_frame(results, employees)
    summary_df = summarize_rank_distribution(rank_df)
    counts = status_counts(rank_df)
    logger.info(f"Rank run as of {target} finished: {counts}")

    if args.output:
        try:
            path = write_rank_table(rank_df, args.output, summary_df)
        except DataWriteError as e:
            err_logger.error(str(e))
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Wrote {len(rank_df)} row(s) to {path}")
    else:
        with pd.option_context("display.max_rows", None, "display.width", 200):
            print(rank_df.to_string(index=False))
            print()
            print(summary_df.to_string(index=False))

    print(
        f"As of {target}: {counts['ok']} computed, {counts['not_applicable']} not on the "
        f"stepped track, {counts['error']} failed"
    )
    return 0 if counts["error"] == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
