"""
Step 2: Clean Records

This module parses activity dates and sleep timestamps into canonical
calendar dates and removes duplicate sleep records.
Duplicates are identified by (id, date) key; the first row in source order wins.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Tuple
import pandas as pd

from .config import (
    ACTIVITY_DATE_FORMATS,
    SLEEP_TIMESTAMP_FORMATS,
    JOIN_KEY,
    SLEEP_KEEP_POLICY,
)
from .errors import ParseError
from .step1_load_sources import RawSources
from .utils import print_summary_stats


@dataclass(frozen=True)
class CleanedSources:
    """Date-parsed sources with one sleep row per (id, date)."""

    activity: pd.DataFrame
    sleep: pd.DataFrame
    calories: pd.DataFrame
    removed_sleep_duplicates: int = 0


def parse_dates(series: pd.Series, formats: Sequence[str], field: str) -> pd.Series:
    """
    Parse date or timestamp strings into midnight-normalized datetimes.

    Each format is tried in order on the values that are still unparsed.

    Examples:
        "4/12/2016" -> 2016-04-12
        "4/12/2016 12:00:00 AM" -> 2016-04-12
        "2016-04-12 23:10:00" -> 2016-04-12

    Args:
        series: Series of date strings
        formats: Accepted strptime formats, in priority order
        field: Column name for error messages

    Returns:
        Series of datetime64 values with the time of day dropped

    Raises:
        ParseError: If a value is empty or matches none of the formats
    """
    s_str = series.astype("string").str.strip().replace("", pd.NA)

    parsed = pd.Series(pd.NaT, index=series.index, dtype="datetime64[ns]")
    for fmt in formats:
        remaining = parsed.isna() & s_str.notna()
        if not remaining.any():
            break
        parsed[remaining] = pd.to_datetime(s_str[remaining].astype(str), format=fmt, errors="coerce")

    bad = parsed.isna()
    if bad.any():
        examples = s_str[bad].head(5).tolist()
        raise ParseError(
            f"Column '{field}': {int(bad.sum()):,} value(s) match none of the accepted "
            f"formats {list(formats)}, e.g. {examples}"
        )

    return parsed.dt.normalize()


def clean_activity(activity: pd.DataFrame) -> pd.DataFrame:
    """Add the canonical `date` column parsed from `activity_date`."""
    out = activity.copy()
    out["date"] = parse_dates(activity["activity_date"], ACTIVITY_DATE_FORMATS, "activity_date")
    return out


def clean_sleep(sleep: pd.DataFrame) -> pd.DataFrame:
    """Add the canonical `date` column parsed from `sleep_day` (time of day dropped)."""
    out = sleep.copy()
    out["date"] = parse_dates(sleep["sleep_day"], SLEEP_TIMESTAMP_FORMATS, "sleep_day")
    return out


def dedupe_sleep(sleep: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
    """
    Keep exactly one sleep record per (id, date).

    The first row in source order is kept. Rows are never re-sorted before
    the check, so the result depends only on the order of the input file.

    Args:
        sleep: Cleaned sleep frame (must carry `id` and `date`)

    Returns:
        Tuple of (deduplicated frame, number of rows removed)
    """
    dup_removed = sleep.duplicated(subset=JOIN_KEY, keep=SLEEP_KEEP_POLICY)
    deduped = sleep[~dup_removed].reset_index(drop=True)
    return deduped, int(dup_removed.sum())


def run_step2(raw: RawSources) -> CleanedSources:
    """
    Execute Step 2: Parse dates and remove duplicate sleep records.

    Args:
        raw: Output of Step 1

    Returns:
        CleanedSources with parsed `date` columns and deduplicated sleep
    """
    print("\n" + "=" * 70)
    print("STEP 2: Clean Records")
    print("=" * 70)

    print("\nParsing activity dates...")
    activity = clean_activity(raw.activity)
    if len(activity):
        print(f"  Date range: {activity['date'].min():%Y-%m-%d} .. {activity['date'].max():%Y-%m-%d}")
    print(f"  Activity rows: {len(activity):,}")

    print("\nParsing sleep timestamps...")
    sleep = clean_sleep(raw.sleep)

    print(f"\nRemoving duplicate sleep records by {JOIN_KEY} (keeping {SLEEP_KEEP_POLICY})...")
    sleep, n_removed = dedupe_sleep(sleep)
    print(f"  Removed: {n_removed:,} duplicate records")
    print_summary_stats("Remaining sleep records", len(raw.sleep), len(sleep))

    print("\n" + "=" * 70)
    print("STEP 2 COMPLETED")
    print("=" * 70)

    return CleanedSources(
        activity=activity,
        sleep=sleep,
        calories=raw.calories,
        removed_sleep_duplicates=n_removed
    )
