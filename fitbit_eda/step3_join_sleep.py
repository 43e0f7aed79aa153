"""
Step 3: Join Sleep onto Activity

This module left-joins the deduplicated sleep records onto the daily activity
records by (id, date). Every activity day is kept exactly once; days without a
sleep record carry missing sleep fields (never zero).
"""

from __future__ import annotations
import pandas as pd

from .config import JOIN_KEY
from .errors import InvalidInputError
from .step2_clean_records import CleanedSources
from .utils import validate_required_columns, print_summary_stats


def join_activity_sleep(activity: pd.DataFrame, sleep: pd.DataFrame) -> pd.DataFrame:
    """
    Left-join sleep records onto activity records.

    Args:
        activity: Cleaned activity frame (left side, order preserved)
        sleep: Cleaned, deduplicated sleep frame

    Returns:
        Joined frame with one row per activity row

    Raises:
        SchemaError: If either side lacks the join key columns
        InvalidInputError: If the sleep side still has duplicate keys
    """
    validate_required_columns(activity, JOIN_KEY, "activity")
    validate_required_columns(sleep, JOIN_KEY, "sleep")

    dup = sleep.duplicated(subset=JOIN_KEY, keep=False)
    if dup.any():
        raise InvalidInputError(
            f"Sleep records must be unique per {JOIN_KEY} before joining; "
            f"found {int(dup.sum()):,} rows sharing a key"
        )

    joined = activity.merge(
        sleep,
        on=JOIN_KEY,
        how="left",
        suffixes=("", "_sleep"),
        validate="many_to_one"
    )

    return joined.reset_index(drop=True)


def run_step3(cleaned: CleanedSources) -> pd.DataFrame:
    """
    Execute Step 3: Join sleep onto activity.

    Args:
        cleaned: Output of Step 2

    Returns:
        Joined DataFrame
    """
    print("\n" + "=" * 70)
    print("STEP 3: Join Sleep onto Activity")
    print("=" * 70)

    print(f"\nJoining on {JOIN_KEY} (left join, activity kept)...")
    joined = join_activity_sleep(cleaned.activity, cleaned.sleep)

    n_matched = int(joined["total_minutes_asleep"].notna().sum())
    print(f"  Joined rows: {len(joined):,}")
    print_summary_stats("Days with a sleep record", len(joined), n_matched)

    print("\n" + "=" * 70)
    print("STEP 3 COMPLETED")
    print("=" * 70)

    return joined
