# hobong/data/writers.py
"""
Functions for writing rank tables and step distribution summaries.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from hobong.constants import DATE_FORMAT

logger = logging.getLogger(__name__)


class DataWriteError(Exception):
    """Custom exception for errors during data writing."""

    pass


def write_rank_table(
    rank_df: pd.DataFrame,
    output_path: Union[str, Path],
    summary_df: Optional[pd.DataFrame] = None,
) -> Path:
    """
    Write a rank table to CSV (``.csv``) or Parquet (``.parquet``).

    When ``summary_df`` is given it is written next to the table as
    ``<stem>_summary<suffix>``.

    Args:
        rank_df: Frame built by :func:`hobong.reporting.build_rank_frame`.
        output_path: Destination file.
        summary_df: Optional step distribution.

    Returns:
        The path written.

    Raises:
        DataWriteError: If the format is unsupported or writing fails.
    """
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()
    if suffix not in (".csv", ".parquet"):
        raise DataWriteError(f"Unsupported rank table format: {output_path.suffix}")

    logger.info(f"Writing rank table ({len(rank_df)} rows) to {output_path}")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _write_frame(rank_df, output_path)
        if summary_df is not None:
            summary_path = output_path.with_name(f"{output_path.stem}_summary{output_path.suffix}")
            _write_frame(summary_df, summary_path)
            logger.info(f"Wrote step distribution to {summary_path}")
    except (OSError, ValueError, ImportError) as e:
        logger.error(f"Error writing rank table to {output_path}: {e}")
        raise DataWriteError(f"Error writing rank table to {output_path}") from e
    return output_path


def _write_frame(df: pd.DataFrame, path: Path) -> None:
    if path.suffix.lower() == ".parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False, date_format=DATE_FORMAT)


__all__ = ["DataWriteError", "write_rank_table"]
