"""
Step 5: Aggregate

This module computes the descriptive statistics reported for the joined
activity & sleep records: means, the steps/calories correlation, activity-level
counts and grouped means. Every query is read-only; the input frame is never
modified.
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Optional
import pandas as pd

from .config import ACTIVITY_LEVELS, WEEKDAY_ORDER, MINUTES_PER_HOUR
from .errors import AggregationError, InsufficientData, InvalidInputError, NoData
from .utils import ensure_dir, save_dataframe


@dataclass(frozen=True)
class AggregateSummary:
    """All aggregates consumed by the report."""

    n_records: int
    n_users: int
    n_with_sleep: int
    mean_steps: Optional[float]
    mean_calories: Optional[float]
    mean_sleep_hours: Optional[float]
    steps_calories_correlation: Optional[float]
    activity_level_counts: Dict[str, int]
    calories_by_activity_level: Dict[str, float]
    steps_by_weekday: Dict[str, float]
    sleep_hours_by_weekday: Dict[str, float]


def _numeric(df: pd.DataFrame, field: str) -> pd.Series:
    """Column as float64 with missing values as NaN."""
    return pd.to_numeric(df[field], errors="coerce").astype("float64")


def mean_of(df: pd.DataFrame, field: str) -> float:
    """
    Arithmetic mean of a field over the records where it is present.

    Missing values are excluded, not counted as zero.

    Raises:
        NoData: If the frame is empty, lacks the column, or no value is present
    """
    if field not in df.columns:
        raise NoData(f"No column '{field}' to average")

    values = _numeric(df, field).dropna()
    if values.empty:
        raise NoData(f"No record has a value for '{field}'")

    return float(values.mean())


def mean_steps(df: pd.DataFrame) -> float:
    return mean_of(df, "total_steps")


def mean_calories(df: pd.DataFrame) -> float:
    return mean_of(df, "calories")


def mean_sleep_hours(df: pd.DataFrame) -> float:
    """Mean minutes asleep, in hours, over days with a sleep record."""
    return mean_of(df, "total_minutes_asleep") / MINUTES_PER_HOUR


def correlation_steps_calories(df: pd.DataFrame) -> float:
    """
    Pearson correlation between total steps and calories.

    Only records with both fields present are used.

    Raises:
        InsufficientData: If fewer than 2 such records exist, or either
            field is constant (the coefficient is undefined)
    """
    cols = ["total_steps", "calories"]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise InsufficientData(f"Cannot correlate steps and calories: missing columns {missing}")

    pair = pd.DataFrame({c: _numeric(df, c) for c in cols}).dropna()
    if len(pair) < 2:
        raise InsufficientData(
            f"Correlation needs at least 2 records with steps and calories, found {len(pair)}"
        )

    if (pair.nunique() < 2).any():
        raise InsufficientData("Correlation is undefined when steps or calories are constant")

    return float(pair["total_steps"].corr(pair["calories"]))


def count_by_activity_level(df: pd.DataFrame) -> Dict[str, int]:
    """
    Number of records per activity level.

    All four levels are always present, in band order, with 0 for empty levels.

    Raises:
        InvalidInputError: If the frame has no `activity_level` column
    """
    if "activity_level" not in df.columns:
        raise InvalidInputError("Frame has no 'activity_level' column; derive it first")

    counts = df["activity_level"].value_counts()
    return {level: int(counts.get(level, 0)) for level in ACTIVITY_LEVELS}


def _group_keys(df: pd.DataFrame, group_key: str):
    """Grouping values and their display order (None = sorted)."""
    if group_key == "weekday":
        if "date" not in df.columns:
            raise InvalidInputError("Grouping by weekday needs a 'date' column")
        return pd.to_datetime(df["date"]).dt.day_name(), WEEKDAY_ORDER

    if group_key not in df.columns:
        raise InvalidInputError(f"Frame has no '{group_key}' column to group by")

    order = ACTIVITY_LEVELS if group_key == "activity_level" else None
    return df[group_key].astype(object), order


def mean_by_group(df: pd.DataFrame, field: str, group_key: str) -> Dict[str, float]:
    """
    Mean of `field` per group.

    Args:
        df: Joined (and featured) frame
        field: Numeric column to average
        group_key: "weekday" (derived from `date`), "activity_level", or any column

    Returns:
        Mapping of group -> mean. Weekdays are ordered Monday..Sunday and
        activity levels in band order; groups with no present value are omitted.

    Raises:
        NoData: If the frame lacks `field`
        InvalidInputError: If the grouping column is absent
    """
    if field not in df.columns:
        raise NoData(f"No column '{field}' to average")

    keys, order = _group_keys(df, group_key)
    frame = pd.DataFrame({"key": keys, "value": _numeric(df, field)}).dropna()
    means = frame.groupby("key", sort=True)["value"].mean()

    if order is None:
        return {k: float(v) for k, v in means.items()}
    return {k: float(means[k]) for k in order if k in means.index}


def _or_none(label: str, func: Callable[[], float]) -> Optional[float]:
    """Evaluate an aggregate for the summary, recording unavailability as None."""
    try:
        return func()
    except AggregationError as e:
        print(f"  Note: {label} unavailable ({e})")
        return None


def summarize(df: pd.DataFrame) -> AggregateSummary:
    """
    Compute every aggregate the report uses.

    Aggregates that cannot be computed (NoData / InsufficientData) are
    recorded as None so the report can say so.
    """
    sleep_by_weekday = {}
    if "total_minutes_asleep" in df.columns:
        sleep_by_weekday = {
            k: v / MINUTES_PER_HOUR
            for k, v in mean_by_group(df, "total_minutes_asleep", "weekday").items()
        }

    n_with_sleep = 0
    if "total_minutes_asleep" in df.columns:
        n_with_sleep = int(df["total_minutes_asleep"].notna().sum())

    return AggregateSummary(
        n_records=len(df),
        n_users=int(df["id"].nunique()) if "id" in df.columns else 0,
        n_with_sleep=n_with_sleep,
        mean_steps=_or_none("mean steps", lambda: mean_steps(df)),
        mean_calories=_or_none("mean calories", lambda: mean_calories(df)),
        mean_sleep_hours=_or_none("mean sleep hours", lambda: mean_sleep_hours(df)),
        steps_calories_correlation=_or_none(
            "steps/calories correlation", lambda: correlation_steps_calories(df)
        ),
        activity_level_counts=count_by_activity_level(df),
        calories_by_activity_level=mean_by_group(df, "calories", "activity_level"),
        steps_by_weekday=mean_by_group(df, "total_steps", "weekday"),
        sleep_hours_by_weekday=sleep_by_weekday,
    )


def summary_to_frame(summary: AggregateSummary) -> pd.DataFrame:
    """Flatten the scalar aggregates into a (metric, value) table."""
    rows = [
        {"metric": f.name, "value": getattr(summary, f.name)}
        for f in fields(summary)
        if not isinstance(getattr(summary, f.name), dict)
    ]
    return pd.DataFrame(rows)


def grouped_means_to_frame(summary: AggregateSummary) -> pd.DataFrame:
    """Long-format table of every grouped mean in the summary."""
    groupings = [
        ("activity_level", "calories", summary.calories_by_activity_level),
        ("weekday", "total_steps", summary.steps_by_weekday),
        ("weekday", "sleep_hours", summary.sleep_hours_by_weekday),
    ]
    rows: List[dict] = []
    for grouping, metric, means in groupings:
        for group, value in means.items():
            rows.append({"grouping": grouping, "group": group, "metric": metric, "value": value})
    return pd.DataFrame(rows, columns=["grouping", "group", "metric", "value"])


def run_step5(featured: pd.DataFrame, outdir: Optional[Path] = None) -> AggregateSummary:
    """
    Execute Step 5: Compute the descriptive aggregates.

    Args:
        featured: Output of Step 4
        outdir: If given, aggregate tables are saved there as CSV

    Returns:
        AggregateSummary
    """
    print("\n" + "=" * 70)
    print("STEP 5: Aggregate")
    print("=" * 70)

    print("\nComputing aggregates...")
    summary = summarize(featured)

    print("\n" + "-" * 70)
    print("Summary Statistics:")
    print("-" * 70)
    print(f"  Records: {summary.n_records:,} ({summary.n_users:,} users)")
    print(f"  Days with sleep: {summary.n_with_sleep:,}")
    for label, value in [
        ("Mean steps", summary.mean_steps),
        ("Mean calories", summary.mean_calories),
        ("Mean sleep hours", summary.mean_sleep_hours),
        ("Steps/calories r", summary.steps_calories_correlation),
    ]:
        print(f"  {label}: {'n/a' if value is None else f'{value:,.2f}'}")
    for level, count in summary.activity_level_counts.items():
        print(f"  {level:20s}: {count:,}")

    if outdir is not None:
        print("\nSaving outputs...")
        ensure_dir(outdir)
        counts = pd.DataFrame(
            list(summary.activity_level_counts.items()), columns=["activity_level", "count"]
        )
        save_dataframe(summary_to_frame(summary), outdir / "summary_metrics.csv")
        save_dataframe(counts, outdir / "activity_level_counts.csv")
        save_dataframe(grouped_means_to_frame(summary), outdir / "grouped_means.csv")

    print("\n" + "=" * 70)
    print("STEP 5 COMPLETED")
    print("=" * 70)

    return summary
