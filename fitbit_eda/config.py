"""
Configuration classes and constants for the Fitbit activity & sleep EDA pipeline.

This module contains the source schemas, accepted date formats, activity-level
thresholds and the configuration dataclasses used across the pipeline.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple


# ============================================================================
# Constants
# ============================================================================

# Semantic column types understood by the loader
TYPE_ID = "id"        # identifier, kept as a stripped string
TYPE_TEXT = "text"    # free text (dates are parsed later by the cleaner)
TYPE_INT = "int"      # whole number -> nullable Int64
TYPE_FLOAT = "float"  # real number -> nullable Float64

# Source schemas: required columns (after name normalization)
ACTIVITY_SCHEMA: Dict[str, str] = {
    "id": TYPE_ID,
    "activity_date": TYPE_TEXT,
    "total_steps": TYPE_INT,
    "calories": TYPE_FLOAT,
}

SLEEP_SCHEMA: Dict[str, str] = {
    "id": TYPE_ID,
    "sleep_day": TYPE_TEXT,
    "total_minutes_asleep": TYPE_INT,
}

CALORIES_SCHEMA: Dict[str, str] = {
    "id": TYPE_ID,
}

# Optional columns: type-checked only when present
ACTIVITY_OPTIONAL_SCHEMA: Dict[str, str] = {
    "total_distance": TYPE_FLOAT,
    "tracker_distance": TYPE_FLOAT,
    "logged_activities_distance": TYPE_FLOAT,
    "very_active_distance": TYPE_FLOAT,
    "moderately_active_distance": TYPE_FLOAT,
    "light_active_distance": TYPE_FLOAT,
    "sedentary_active_distance": TYPE_FLOAT,
    "very_active_minutes": TYPE_INT,
    "fairly_active_minutes": TYPE_INT,
    "lightly_active_minutes": TYPE_INT,
    "sedentary_minutes": TYPE_INT,
}

SLEEP_OPTIONAL_SCHEMA: Dict[str, str] = {
    "total_sleep_records": TYPE_INT,
    "total_time_in_bed": TYPE_INT,
}

CALORIES_OPTIONAL_SCHEMA: Dict[str, str] = {
    "activity_day": TYPE_TEXT,
    "calories": TYPE_FLOAT,
}

# Date parsing (tried in order)
ACTIVITY_DATE_FORMATS: Tuple[str, ...] = ("%m/%d/%Y", "%Y-%m-%d")
SLEEP_TIMESTAMP_FORMATS: Tuple[str, ...] = (
    "%m/%d/%Y %I:%M:%S %p",  # Fitbit export: 4/12/2016 12:00:00 AM
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%Y-%m-%d",
)

# Join / duplicate handling
JOIN_KEY = ["id", "date"]
SLEEP_KEEP_POLICY = "first"  # Keep first sleep row per (id, date) in source order

# Activity level bands (lower bound inclusive, upper bound exclusive)
SEDENTARY = "Sedentary"
LIGHTLY_ACTIVE = "Lightly Active"
MODERATELY_ACTIVE = "Moderately Active"
VERY_ACTIVE = "Very Active"

ACTIVITY_LEVELS = [SEDENTARY, LIGHTLY_ACTIVE, MODERATELY_ACTIVE, VERY_ACTIVE]
ACTIVITY_LEVEL_BINS = [0, 5000, 7500, 10000, float("inf")]

WEEKDAY_ORDER = [
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
]

MINUTES_PER_HOUR = 60
SLEEP_TARGET_HOURS = 7.0  # Reference line for the sleep distribution chart


# ============================================================================
# Configuration Classes
# ============================================================================

@dataclass(frozen=True)
class LoadConfig:
    """Configuration for Step 1: Load the three source extracts."""

    activity_csv: Path
    sleep_csv: Path
    calories_csv: Path


@dataclass(frozen=True)
class ReportConfig:
    """Configuration for Step 6: Charts and Markdown report."""

    outdir: Path
    title: str = "Fitbit Activity & Sleep: Exploratory Analysis"
    report_name: str = "report.md"
    plot_dir_name: str = "plots"
    smoothing_window: int = 7
    dpi: int = 150
    sleep_target_hours: float = SLEEP_TARGET_HOURS


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the complete pipeline."""

    # Input data paths
    activity_csv: Path
    sleep_csv: Path
    calories_csv: Path

    # Output directory
    output_base_dir: Path

    # Report parameters
    render_report: bool = True
    title: Optional[str] = None
    smoothing_window: int = 7

    def load_config(self) -> LoadConfig:
        return LoadConfig(
            activity_csv=self.activity_csv,
            sleep_csv=self.sleep_csv,
            calories_csv=self.calories_csv,
        )

    def report_config(self) -> ReportConfig:
        """Build the report configuration, keeping the default title unless overridden."""
        kwargs = {
            "outdir": self.output_base_dir,
            "smoothing_window": self.smoothing_window,
        }
        if self.title:
            kwargs["title"] = self.title
        return ReportConfig(**kwargs)
