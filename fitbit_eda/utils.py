"""
Utility functions shared across the Fitbit EDA pipeline.

This module contains helper functions for CSV loading, column-name
normalization, schema checks and console summaries used throughout the pipeline.
"""

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List
import pandas as pd

from .errors import SchemaError


def ensure_dir(path: Path) -> None:
    """
    Create directory if it doesn't exist.

    Args:
        path: Directory path to create
    """
    path.mkdir(parents=True, exist_ok=True)


def normalize_column_names(columns: Iterable[str]) -> pd.Index:
    """
    Normalize column names to lowercase, underscore-separated form.

    Examples:
        "ActivityDate" -> "activity_date"
        "TotalMinutesAsleep" -> "total_minutes_asleep"
        "Very Active Minutes" -> "very_active_minutes"
        "Id" -> "id"

    Args:
        columns: Column names as found in the source

    Returns:
        Index of normalized column names
    """
    # Vectorized approach, same as the other string helpers
    cols = pd.Index([str(c) for c in columns]).str.strip()

    # Split camelCase / PascalCase words: "TotalSteps" -> "Total_Steps"
    cols = cols.str.replace(r"(?<=[a-z0-9])(?=[A-Z])", "_", regex=True)
    # Split acronyms followed by a word: "BMIValue" -> "BMI_Value"
    cols = cols.str.replace(r"(?<=[A-Z])(?=[A-Z][a-z])", "_", regex=True)

    # Any run of separators becomes a single underscore
    cols = cols.str.replace(r"[^0-9A-Za-z]+", "_", regex=True)
    cols = cols.str.strip("_").str.lower()

    return cols


def load_csv_safe(csv_path: Path, dtype: str = "str") -> pd.DataFrame:
    """
    Load CSV file with safe defaults.

    Args:
        csv_path: Path to CSV file
        dtype: Default dtype for columns (default: 'str')

    Returns:
        DataFrame with normalized column names

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        SchemaError: If two columns normalize to the same name
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=dtype)
    df.columns = normalize_column_names(df.columns)

    duplicated = sorted(set(df.columns[df.columns.duplicated()]))
    if duplicated:
        raise SchemaError(f"{csv_path} has columns that collide after normalization: {duplicated}")

    return df


def validate_required_columns(df: pd.DataFrame, required_cols: List[str], file_name: str = "Input") -> None:
    """
    Validate that DataFrame contains all required columns.

    Args:
        df: DataFrame to validate
        required_cols: List of required column names
        file_name: Name of file for error message

    Raises:
        SchemaError: If any required columns are missing
    """
    missing = set(required_cols) - set(df.columns)
    if missing:
        raise SchemaError(f"{file_name} missing required columns: {sorted(missing)}")


def save_dataframe(df: pd.DataFrame, output_path: Path) -> None:
    """
    Save DataFrame to CSV with UTF-8-sig encoding for Excel compatibility.

    Args:
        df: DataFrame to save
        output_path: Path to output CSV file
    """
    ensure_dir(output_path.parent)
    df.to_csv(output_path, index=False, encoding="utf-8-sig")
    print(f"  Saved: {output_path}")


def print_summary_stats(label: str, total: int, count: int) -> None:
    """
    Print summary statistics with percentage.

    Args:
        label: Label for the statistic
        total: Total count
        count: Specific count
    """
    pct = (count / total * 100) if total > 0 else 0
    print(f"  {label}: {count:,} / {total:,} ({pct:.2f}%)")
