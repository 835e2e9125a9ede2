# hobong/data/readers.py
"""
Functions for reading employee record files (JSON, YAML, CSV).

Records are returned raw; :func:`hobong.schema.migration.normalize_employee`
turns them into :class:`~hobong.schema.employee.Employee` objects.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd
import yaml

logger = logging.getLogger(__name__)


class DataReadError(Exception):
    """Custom exception for errors during data reading."""

    pass


def _unwrap_records(data: Any, file_path: Path) -> List[Dict[str, Any]]:
    # Either a bare list or {"employees": [...]}
    if isinstance(data, dict) and "employees" in data:
        data = data["employees"]
    if not isinstance(data, list):
        raise DataReadError(
            f"Expected a list of employee records in {file_path}, got {type(data).__name__}"
        )
    bad = [i for i, item in enumerate(data) if not isinstance(item, dict)]
    if bad:
        raise DataReadError(f"Non-object employee record(s) at position(s) {bad} in {file_path}")
    return data


def _unflatten(row: Dict[str, Any]) -> Dict[str, Any]:
    """``{"rank.startRank": 3}`` -> ``{"rank": {"startRank": 3}}``; blank cells dropped."""
    nested: Dict[str, Any] = {}
    for key, value in row.items():
        if value is None or (isinstance(value, float) and pd.isna(value)):
            continue
        node = nested
        parts = str(key).split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return nested


def read_csv_records(file_path: Path) -> List[Dict[str, Any]]:
    """
    One employee per row; dotted column names (``rank.startRank``,
    ``employment.entryDate``) become nested fields.
    """
    df = pd.read_csv(file_path, dtype=str, keep_default_na=True)
    logger.info(f"Loaded {len(df)} rows from CSV: {file_path}")
    records = []
    for row in df.to_dict(orient="records"):
        record = _unflatten(row)
        rank = record.get("rank")
        if isinstance(rank, dict) and "startRank" in rank:
            try:
                rank["startRank"] = int(rank["startRank"])
            except ValueError:
                # Left as text; normalisation reports it per record
                pass
        records.append(record)
    return records


def read_employee_records(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read raw employee records from a JSON, YAML or CSV file.

    Args:
        file_path: Path of the file to read.

    Returns:
        The list of raw records (possibly empty).

    Raises:
        DataReadError: If the file cannot be found, read or parsed, or does
            not contain a list of records.
    """
    file_path = Path(file_path)
    logger.info(f"Attempting to read employee records from: {file_path}")

    if not file_path.exists():
        logger.error(f"Employee file not found: {file_path}")
        raise DataReadError(f"Employee file not found: {file_path}")

    suffix = file_path.suffix.lower()
    try:
        if suffix == ".json":
            with open(file_path, "r", encoding="utf-8") as f:
                records = _unwrap_records(json.load(f), file_path)
        elif suffix in (".yaml", ".yml"):
            with open(file_path, "r", encoding="utf-8") as f:
                records = _unwrap_records(yaml.safe_load(f) or [], file_path)
        elif suffix == ".csv":
            records = read_csv_records(file_path)
        else:
            raise DataReadError(f"Unsupported employee file format: {file_path.suffix}")
    except DataReadError:
        raise
    except (OSError, ValueError, yaml.YAMLError, pd.errors.ParserError) as e:
        logger.error(f"Error reading employee file {file_path}: {e}")
        raise DataReadError(f"Error reading employee file {file_path}") from e

    if not records:
        logger.warning(f"No employee records in {file_path}")
    else:
        logger.info(f"Read {len(records)} employee record(s) from {file_path}")
    return records


__all__ = ["DataReadError", "read_employee_records", "read_csv_records"]
