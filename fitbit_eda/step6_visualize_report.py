"""
Step 6: Charts and Report

This module renders the eight descriptive charts of the analysis and writes a
Markdown report combining them with commentary derived from the aggregates.
"""

from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
import pandas as pd
import numpy as np

try:
    import matplotlib
    matplotlib.use("Agg")  # headless save
    import matplotlib.pyplot as plt
    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False

from .config import ReportConfig, ACTIVITY_LEVELS, MINUTES_PER_HOUR
from .step5_aggregate import AggregateSummary
from .utils import ensure_dir


# (slug, title) in report order
CHARTS: List[Tuple[str, str]] = [
    ("steps_vs_calories", "Calories vs. Total Steps"),
    ("sleep_vs_steps", "Sleep Hours vs. Total Steps"),
    ("activity_level_distribution", "Days per Activity Level"),
    ("calories_by_activity_level", "Mean Calories by Activity Level"),
    ("steps_by_weekday", "Mean Steps by Weekday"),
    ("sleep_distribution", "Distribution of Sleep Hours"),
    ("steps_over_time", "Mean Daily Steps over Time"),
    ("sedentary_vs_sleep", "Sedentary Minutes vs. Sleep Hours"),
]

LEVEL_COLORS = ["#9e9e9e", "#90caf9", "#42a5f5", "#1565c0"]


# ============================================================================
# Smoothing helpers (pure, no plotting)
# ============================================================================

def linear_fit(x: pd.Series, y: pd.Series) -> Optional[Tuple[float, float]]:
    """
    Least-squares line through the points with both coordinates present.

    Returns:
        (slope, intercept), or None when fewer than 2 points or constant x
    """
    pts = pd.DataFrame({"x": x, "y": y}).astype("float64").dropna()
    if len(pts) < 2 or pts["x"].nunique() < 2:
        return None
    slope, intercept = np.polyfit(pts["x"].to_numpy(), pts["y"].to_numpy(), 1)
    return float(slope), float(intercept)


def moving_average_smoother(x: pd.Series, y: pd.Series, window: int) -> pd.DataFrame:
    """
    Centered moving average of y, ordered by x.

    Drawn as the sleep/steps trend line; it is a rolling mean, not a local
    regression, and the chart legend and commentary call it a moving average.

    Returns:
        DataFrame with columns x, y_smooth (empty if no complete points)
    """
    pts = pd.DataFrame({"x": x, "y": y}).astype("float64").dropna()
    pts = pts.sort_values("x", kind="mergesort").reset_index(drop=True)
    pts["y_smooth"] = pts["y"].rolling(window=max(window, 1), center=True, min_periods=1).mean()
    return pts[["x", "y_smooth"]]


def daily_mean_steps(featured: pd.DataFrame) -> pd.Series:
    """Mean steps across users per calendar date, sorted by date."""
    steps = pd.to_numeric(featured["total_steps"], errors="coerce").astype("float64")
    return steps.groupby(featured["date"]).mean().sort_index()


def _sleep_hours(featured: pd.DataFrame) -> pd.Series:
    minutes = pd.to_numeric(featured["total_minutes_asleep"], errors="coerce").astype("float64")
    return minutes / MINUTES_PER_HOUR


def _steps(featured: pd.DataFrame) -> pd.Series:
    return pd.to_numeric(featured["total_steps"], errors="coerce").astype("float64")


# ============================================================================
# Charts
# ============================================================================

def set_report_mpl_style() -> None:
    """Simple report-friendly matplotlib styling."""
    if not MATPLOTLIB_AVAILABLE:
        return

    plt.rcParams.update({
        "font.size": 11,
        "axes.titlesize": 12,
        "axes.labelsize": 11,
        "xtick.labelsize": 10,
        "ytick.labelsize": 10,
        "legend.fontsize": 10,

        "axes.linewidth": 1.0,
        "lines.linewidth": 2.0,
        "axes.grid": True,
        "grid.alpha": 0.3,

        "figure.dpi": 120,
    })


def _scatter(ax, x: pd.Series, y: pd.Series) -> None:
    ax.scatter(x, y, s=12, alpha=0.35, edgecolors="none")


def _draw_linear_fit(ax, x: pd.Series, y: pd.Series) -> None:
    fit = linear_fit(x, y)
    if fit is None:
        return
    slope, intercept = fit
    xs = np.linspace(float(x.min()), float(x.max()), 100)
    ax.plot(xs, slope * xs + intercept, color="red", label="Linear fit")
    ax.legend(frameon=False)


def _plot_steps_vs_calories(ax, featured, summary, cfg) -> bool:
    pts = pd.DataFrame({
        "x": _steps(featured),
        "y": pd.to_numeric(featured["calories"], errors="coerce").astype("float64"),
    }).dropna()
    if pts.empty:
        return False
    _scatter(ax, pts["x"], pts["y"])
    _draw_linear_fit(ax, pts["x"], pts["y"])
    ax.set_xlabel("Total steps")
    ax.set_ylabel("Calories")
    return True


def _plot_sleep_vs_steps(ax, featured, summary, cfg) -> bool:
    pts = pd.DataFrame({"x": _steps(featured), "y": _sleep_hours(featured)}).dropna()
    if pts.empty:
        return False
    _scatter(ax, pts["x"], pts["y"])
    smooth = moving_average_smoother(pts["x"], pts["y"], max(len(pts) // 10, cfg.smoothing_window))
    ax.plot(smooth["x"], smooth["y_smooth"], color="red", label="Moving average")
    ax.legend(frameon=False)
    ax.set_xlabel("Total steps")
    ax.set_ylabel("Sleep (hours)")
    return True


def _plot_activity_level_distribution(ax, featured, summary, cfg) -> bool:
    counts = summary.activity_level_counts
    ax.bar(ACTIVITY_LEVELS, [counts[level] for level in ACTIVITY_LEVELS], color=LEVEL_COLORS)
    ax.set_ylabel("Days")
    ax.tick_params(axis="x", rotation=15)
    return True


def _plot_calories_by_activity_level(ax, featured, summary, cfg) -> bool:
    means = summary.calories_by_activity_level
    if not means:
        return False
    colors = [LEVEL_COLORS[ACTIVITY_LEVELS.index(level)] for level in means]
    ax.bar(list(means), list(means.values()), color=colors)
    ax.set_ylabel("Mean calories")
    ax.tick_params(axis="x", rotation=15)
    return True


def _plot_steps_by_weekday(ax, featured, summary, cfg) -> bool:
    means = summary.steps_by_weekday
    if not means:
        return False
    ax.bar(list(means), list(means.values()), color="#1f77b4")
    ax.set_ylabel("Mean steps")
    ax.tick_params(axis="x", rotation=30)
    return True


def _plot_sleep_distribution(ax, featured, summary, cfg) -> bool:
    hours = _sleep_hours(featured).dropna()
    if hours.empty:
        return False
    ax.hist(hours, bins=30, alpha=0.6, color="#2ca02c", edgecolor="black", linewidth=0.6)
    ax.axvline(cfg.sleep_target_hours, color="red", linestyle="--",
               label=f"{cfg.sleep_target_hours:g}h target")
    ax.legend(frameon=False)
    ax.set_xlabel("Sleep (hours)")
    ax.set_ylabel("Days")
    return True


def _plot_steps_over_time(ax, featured, summary, cfg) -> bool:
    daily = daily_mean_steps(featured).dropna()
    if daily.empty:
        return False
    smooth = daily.rolling(window=cfg.smoothing_window, center=True, min_periods=1).mean()
    ax.plot(daily.index, daily.values, color="#1f77b4", alpha=0.5, label="Daily mean")
    ax.plot(smooth.index, smooth.values, color="red",
            label=f"{cfg.smoothing_window}-day rolling mean")
    ax.legend(frameon=False)
    ax.set_xlabel("Date")
    ax.set_ylabel("Steps")
    ax.tick_params(axis="x", rotation=30)
    return True


def _plot_sedentary_vs_sleep(ax, featured, summary, cfg) -> bool:
    if "sedentary_minutes" not in featured.columns:
        return False
    pts = pd.DataFrame({
        "x": pd.to_numeric(featured["sedentary_minutes"], errors="coerce").astype("float64"),
        "y": _sleep_hours(featured),
    }).dropna()
    if pts.empty:
        return False
    _scatter(ax, pts["x"], pts["y"])
    _draw_linear_fit(ax, pts["x"], pts["y"])
    ax.set_xlabel("Sedentary minutes")
    ax.set_ylabel("Sleep (hours)")
    return True


PLOTTERS: Dict[str, Callable] = {
    "steps_vs_calories": _plot_steps_vs_calories,
    "sleep_vs_steps": _plot_sleep_vs_steps,
    "activity_level_distribution": _plot_activity_level_distribution,
    "calories_by_activity_level": _plot_calories_by_activity_level,
    "steps_by_weekday": _plot_steps_by_weekday,
    "sleep_distribution": _plot_sleep_distribution,
    "steps_over_time": _plot_steps_over_time,
    "sedentary_vs_sleep": _plot_sedentary_vs_sleep,
}


def render_charts(
    featured: pd.DataFrame,
    summary: AggregateSummary,
    cfg: ReportConfig
) -> Dict[str, Optional[Path]]:
    """
    Render every chart as PNG.

    Returns:
        Mapping slug -> saved path (None when skipped for lack of data)
    """
    paths: Dict[str, Optional[Path]] = {slug: None for slug, _ in CHARTS}
    if not MATPLOTLIB_AVAILABLE:
        print("Warning: matplotlib not available. Skipping charts.")
        return paths

    plot_dir = cfg.outdir / cfg.plot_dir_name
    ensure_dir(plot_dir)
    set_report_mpl_style()

    for slug, title in CHARTS:
        fig, ax = plt.subplots(figsize=(7.0, 4.5))
        drawn = PLOTTERS[slug](ax, featured, summary, cfg)
        if not drawn:
            plt.close(fig)
            print(f"[warn] no data for plot: {slug}")
            continue

        ax.set_title(title)
        fig.tight_layout()
        out_path = plot_dir / f"{slug}.png"
        fig.savefig(out_path, dpi=cfg.dpi)
        plt.close(fig)
        paths[slug] = out_path
        print(f"[ok] saved: {out_path}")

    return paths


# ============================================================================
# Commentary and report
# ============================================================================

def describe_correlation(r: Optional[float]) -> str:
    """Plain-language strength and direction of a correlation coefficient."""
    if r is None:
        return "undetermined"
    strength = abs(r)
    if strength < 0.1:
        return "negligible"
    label = "weak" if strength < 0.3 else "moderate" if strength < 0.5 else "strong"
    direction = "positive" if r > 0 else "negative"
    return f"{label} {direction}"


def _fmt(value: Optional[float], fmt: str = ",.0f") -> str:
    return "n/a" if value is None else format(value, fmt)


def build_commentary(summary: AggregateSummary, cfg: ReportConfig) -> Dict[str, str]:
    """
    Prose paragraphs keyed by chart slug, plus "overview".

    Pure function of the aggregates; needs no plotting library.
    """
    n = summary.n_records
    r = summary.steps_calories_correlation
    sleep_share = summary.n_with_sleep / n * 100 if n else 0.0
    text: Dict[str, str] = {}

    text["overview"] = (
        f"The joined table holds {n:,} user-days from {summary.n_users:,} users. "
        f"{summary.n_with_sleep:,} of them ({sleep_share:.1f}%) have a sleep record. "
        f"On average users walked {_fmt(summary.mean_steps)} steps and burned "
        f"{_fmt(summary.mean_calories)} calories per day, and slept "
        f"{_fmt(summary.mean_sleep_hours, '.2f')} hours on nights that were tracked."
    )

    if r is None:
        text["steps_vs_calories"] = (
            "There are too few complete days to estimate how calories move with steps."
        )
    else:
        text["steps_vs_calories"] = (
            f"Steps and calories show a {describe_correlation(r)} relationship "
            f"(Pearson r = {r:.2f}). The red line is a least-squares fit drawn for reference."
        )

    text["sleep_vs_steps"] = (
        f"Only days with a sleep record appear here ({summary.n_with_sleep:,} of {n:,}). "
        "The red line is a centered moving average of sleep hours, taken over days "
        "ordered by step count. It is a visual guide, not a fitted regression."
    )

    counts = summary.activity_level_counts
    if n:
        top = max(ACTIVITY_LEVELS, key=lambda level: counts[level])
        text["activity_level_distribution"] = (
            f"{top} is the most common level, covering {counts[top]:,} days "
            f"({counts[top] / n * 100:.1f}%). "
            + ", ".join(f"{level}: {counts[level]:,}" for level in ACTIVITY_LEVELS) + "."
        )
    else:
        text["activity_level_distribution"] = "No days to classify."

    cal = summary.calories_by_activity_level
    if cal:
        hi = max(cal, key=cal.get)
        lo = min(cal, key=cal.get)
        text["calories_by_activity_level"] = (
            f"{hi} days burn the most calories on average ({cal[hi]:,.0f}), "
            f"{lo} days the fewest ({cal[lo]:,.0f})."
        )
    else:
        text["calories_by_activity_level"] = "No calorie data to compare across levels."

    wk = summary.steps_by_weekday
    if wk:
        hi = max(wk, key=wk.get)
        lo = min(wk, key=wk.get)
        text["steps_by_weekday"] = (
            f"{hi} is the most active day of the week ({wk[hi]:,.0f} steps on average) "
            f"and {lo} the least active ({wk[lo]:,.0f})."
        )
    else:
        text["steps_by_weekday"] = "No step data to compare across weekdays."

    if summary.mean_sleep_hours is None:
        text["sleep_distribution"] = "No sleep records were available."
    else:
        side = "below" if summary.mean_sleep_hours < cfg.sleep_target_hours else "at or above"
        text["sleep_distribution"] = (
            f"Mean sleep of {summary.mean_sleep_hours:.2f} hours is {side} the "
            f"{cfg.sleep_target_hours:g}-hour reference line."
        )

    text["steps_over_time"] = (
        f"Daily mean steps across users, with a {cfg.smoothing_window}-day rolling mean "
        "to show the trend through the tracking period."
    )

    text["sedentary_vs_sleep"] = (
        "Sedentary minutes against sleep hours on tracked nights, with a least-squares "
        "line drawn for reference."
    )

    return text


def write_report(
    summary: AggregateSummary,
    chart_paths: Dict[str, Optional[Path]],
    cfg: ReportConfig
) -> Path:
    """
    Write the Markdown report.

    Args:
        summary: Aggregates from Step 5
        chart_paths: Output of render_charts
        cfg: ReportConfig

    Returns:
        Path of the written report
    """
    ensure_dir(cfg.outdir)
    commentary = build_commentary(summary, cfg)

    lines = [f"# {cfg.title}", "", "## Overview", "", commentary["overview"], ""]

    lines += ["## Key figures", "", "| Metric | Value |", "|---|---|"]
    lines += [
        f"| User-days | {summary.n_records:,} |",
        f"| Users | {summary.n_users:,} |",
        f"| Mean steps | {_fmt(summary.mean_steps)} |",
        f"| Mean calories | {_fmt(summary.mean_calories)} |",
        f"| Mean sleep (hours) | {_fmt(summary.mean_sleep_hours, '.2f')} |",
        f"| Steps/calories r | {_fmt(summary.steps_calories_correlation, '.2f')} |",
        "",
    ]

    for i, (slug, title) in enumerate(CHARTS, start=1):
        lines += [f"## {i}. {title}", ""]
        path = chart_paths.get(slug)
        if path is not None:
            lines += [f"![{title}]({cfg.plot_dir_name}/{path.name})", ""]
        else:
            lines += ["_Chart not rendered._", ""]
        lines += [commentary[slug], ""]

    out_path = cfg.outdir / cfg.report_name
    out_path.write_text("\n".join(lines), encoding="utf-8")
    print(f"  Saved: {out_path}")
    return out_path


def run_step6(featured: pd.DataFrame, summary: AggregateSummary, cfg: ReportConfig) -> Dict[str, object]:
    """
    Execute Step 6: Render charts and write the report.

    Args:
        featured: Output of Step 4
        summary: Output of Step 5
        cfg: ReportConfig

    Returns:
        Dict with "charts" (slug -> path or None) and "report" (path)
    """
    print("\n" + "=" * 70)
    print("STEP 6: Charts and Report")
    print("=" * 70)

    if not MATPLOTLIB_AVAILABLE:
        print("\nWarning: matplotlib is not installed. Skipping charts.")
        print("Install with: pip install matplotlib")
        print("Only the Markdown report will be generated.\n")

    print("\nRendering charts...")
    chart_paths = render_charts(featured, summary, cfg)

    print("\nWriting report...")
    report_path = write_report(summary, chart_paths, cfg)

    print("\n" + "=" * 70)
    print("STEP 6 COMPLETED")
    print("=" * 70)

    return {"charts": chart_paths, "report": report_path}
