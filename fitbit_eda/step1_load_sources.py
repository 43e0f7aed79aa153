"""
Step 1: Load Sources

This module reads the daily activity, sleep day and daily calories extracts,
normalizes their column names and checks each one against an explicit schema.
Values are never silently coerced: a declared numeric column that holds
non-numeric text fails the load with SchemaError.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
import pandas as pd

from .config import (
    LoadConfig,
    ACTIVITY_SCHEMA,
    ACTIVITY_OPTIONAL_SCHEMA,
    SLEEP_SCHEMA,
    SLEEP_OPTIONAL_SCHEMA,
    CALORIES_SCHEMA,
    CALORIES_OPTIONAL_SCHEMA,
    TYPE_ID,
    TYPE_TEXT,
    TYPE_INT,
    TYPE_FLOAT,
)
from .errors import SchemaError
from .utils import load_csv_safe, validate_required_columns


@dataclass(frozen=True)
class RawSources:
    """The three loaded extracts, schema-checked but otherwise untouched."""

    activity: pd.DataFrame
    sleep: pd.DataFrame
    calories: pd.DataFrame


def _blank_to_na(s: pd.Series) -> pd.Series:
    """Strip text cells and turn empty strings into missing values."""
    if pd.api.types.is_numeric_dtype(s):
        return s
    return s.astype("string").str.strip().replace("", pd.NA)


def _sample(values: pd.Series, n: int = 5) -> list:
    return values.head(n).tolist()


def coerce_column(s: pd.Series, kind: str, source_name: str, column: str) -> pd.Series:
    """
    Convert one column to its declared semantic type.

    Args:
        s: Raw column
        kind: One of the TYPE_* constants
        source_name: Source label for error messages
        column: Column name for error messages

    Returns:
        Converted column (string, Int64 or Float64 dtype)

    Raises:
        SchemaError: If a non-empty value does not fit the declared type
    """
    raw = _blank_to_na(s)

    if kind == TYPE_ID:
        ids = raw.astype("string")
        if ids.isna().any():
            raise SchemaError(
                f"{source_name}: column '{column}' has {int(ids.isna().sum()):,} empty identifier(s)"
            )
        return ids

    if kind == TYPE_TEXT:
        return raw.astype("string")

    if kind not in (TYPE_INT, TYPE_FLOAT):
        raise ValueError(f"Unknown column type '{kind}' for {source_name}.{column}")

    numeric = pd.to_numeric(raw, errors="coerce")
    bad = numeric.isna() & raw.notna()
    if bad.any():
        raise SchemaError(
            f"{source_name}: column '{column}' expects {kind} values, "
            f"found {int(bad.sum()):,} non-numeric value(s), e.g. {_sample(raw[bad])}"
        )

    if kind == TYPE_INT:
        if pd.api.types.is_numeric_dtype(raw):
            fractional = numeric.notna() & (numeric % 1 != 0)
        else:
            # "4000.0" or "1e3" are not integer literals
            literal = raw.str.fullmatch(r"[+-]?\d+").fillna(True).astype(bool)
            fractional = raw.notna() & ~literal
        if fractional.any():
            raise SchemaError(
                f"{source_name}: column '{column}' expects whole numbers, "
                f"found {_sample(raw[fractional])}"
            )
        return numeric.astype("Int64")

    return numeric.astype("Float64")


def apply_schema(
    df: pd.DataFrame,
    schema: Dict[str, str],
    source_name: str,
    optional_schema: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Check a frame against its declared schema and convert declared columns.

    Required columns must be present. Optional columns are converted only
    when present. Undeclared columns pass through untouched.

    Args:
        df: Frame with normalized column names
        schema: Required column -> semantic type
        source_name: Source label for error messages
        optional_schema: Optional column -> semantic type

    Returns:
        New DataFrame with converted columns

    Raises:
        SchemaError: If a required column is missing or a value has the wrong type
    """
    validate_required_columns(df, list(schema), source_name)

    declared = dict(schema)
    for col, kind in (optional_schema or {}).items():
        if col in df.columns:
            declared[col] = kind

    out = df.copy()
    for col, kind in declared.items():
        out[col] = coerce_column(df[col], kind, source_name, col)

    return out.reset_index(drop=True)


def load_source(
    csv_path: Path,
    schema: Dict[str, str],
    source_name: str,
    optional_schema: Optional[Dict[str, str]] = None
) -> pd.DataFrame:
    """
    Load one CSV extract and apply its schema.

    Raises:
        FileNotFoundError: If the file doesn't exist
        SchemaError: If the content doesn't match the schema
    """
    df = load_csv_safe(Path(csv_path), dtype="str")
    return apply_schema(df, schema, source_name, optional_schema)


def load_sources(activity_csv: Path, sleep_csv: Path, calories_csv: Path) -> RawSources:
    """Load the activity, sleep and calories extracts."""
    activity = load_source(activity_csv, ACTIVITY_SCHEMA, "activity", ACTIVITY_OPTIONAL_SCHEMA)
    sleep = load_source(sleep_csv, SLEEP_SCHEMA, "sleep", SLEEP_OPTIONAL_SCHEMA)
    calories = load_source(calories_csv, CALORIES_SCHEMA, "calories", CALORIES_OPTIONAL_SCHEMA)
    return RawSources(activity=activity, sleep=sleep, calories=calories)


def run_step1(cfg: LoadConfig) -> RawSources:
    """
    Execute Step 1: Load and schema-check the three source extracts.

    Args:
        cfg: LoadConfig with the input paths

    Returns:
        RawSources holding the activity, sleep and calories frames
    """
    print("\n" + "=" * 70)
    print("STEP 1: Load Sources")
    print("=" * 70)

    print(f"\nLoading activity: {cfg.activity_csv}")
    print(f"Loading sleep: {cfg.sleep_csv}")
    print(f"Loading calories: {cfg.calories_csv}")
    raw = load_sources(cfg.activity_csv, cfg.sleep_csv, cfg.calories_csv)

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print(f"  Activity rows: {len(raw.activity):,} ({raw.activity['id'].nunique():,} users)")
    print(f"  Sleep rows: {len(raw.sleep):,} ({raw.sleep['id'].nunique():,} users)")
    print(f"  Calories rows: {len(raw.calories):,} (loaded, not used downstream)")

    print("\n" + "=" * 70)
    print("STEP 1 COMPLETED")
    print("=" * 70)

    return raw
