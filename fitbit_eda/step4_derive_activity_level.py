"""
Step 4: Derive Activity Level

This module buckets each day into an ordered activity level from its step count:

    Sedentary          < 5000 steps
    Lightly Active     5000 - 7499
    Moderately Active  7500 - 9999
    Very Active        >= 10000
"""

from __future__ import annotations
import pandas as pd

from .config import ACTIVITY_LEVELS, ACTIVITY_LEVEL_BINS
from .errors import InvalidInputError
from .utils import print_summary_stats


ACTIVITY_LEVEL_DTYPE = pd.CategoricalDtype(categories=ACTIVITY_LEVELS, ordered=True)


def classify_steps(steps: pd.Series) -> pd.Series:
    """
    Map step counts onto the four activity-level bands.

    Args:
        steps: Series of daily step counts

    Returns:
        Ordered categorical Series aligned with `steps`

    Raises:
        InvalidInputError: If any step count is missing, non-numeric or negative
    """
    numeric = pd.to_numeric(steps, errors="coerce")

    missing = numeric.isna()
    if missing.any():
        raise InvalidInputError(
            f"total_steps is missing or non-numeric for {int(missing.sum()):,} record(s)"
        )

    negative = numeric < 0
    if negative.any():
        raise InvalidInputError(
            f"total_steps must be non-negative, found {numeric[negative].head(5).tolist()}"
        )

    levels = pd.cut(
        numeric.astype("float64"),
        bins=ACTIVITY_LEVEL_BINS,
        labels=ACTIVITY_LEVELS,
        right=False
    )
    return levels.astype(ACTIVITY_LEVEL_DTYPE)


def activity_level_for(steps: int) -> str:
    """Activity level for a single step count."""
    if steps is None:
        raise InvalidInputError("total_steps is missing")
    return str(classify_steps(pd.Series([steps])).iloc[0])


def add_activity_level(joined: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of the joined frame with an `activity_level` column.

    Raises:
        InvalidInputError: If `total_steps` is absent, missing or negative
    """
    if "total_steps" not in joined.columns:
        raise InvalidInputError("Cannot derive activity_level: column 'total_steps' is absent")

    out = joined.copy()
    out["activity_level"] = classify_steps(joined["total_steps"])
    return out


def run_step4(joined: pd.DataFrame) -> pd.DataFrame:
    """
    Execute Step 4: Derive the activity level of every joined record.

    Args:
        joined: Output of Step 3

    Returns:
        Joined DataFrame with `activity_level`
    """
    print("\n" + "=" * 70)
    print("STEP 4: Derive Activity Level")
    print("=" * 70)

    print("\nBucketing days by total steps...")
    featured = add_activity_level(joined)

    counts = featured["activity_level"].value_counts(sort=False)
    for level in ACTIVITY_LEVELS:
        print_summary_stats(level, len(featured), int(counts.get(level, 0)))

    print("\n" + "=" * 70)
    print("STEP 4 COMPLETED")
    print("=" * 70)

    return featured
