"""
Fitbit Activity & Sleep EDA Pipeline

A small batch pipeline that loads Fitbit daily activity, sleep and calories
extracts, cleans and joins them, and reports descriptive statistics and charts.

Modules:
    - config: Configuration classes and constants
    - errors: Exception types
    - utils: Shared utility functions
    - step1_load_sources: Load and schema-check the source extracts
    - step2_clean_records: Parse dates and remove duplicate sleep records
    - step3_join_sleep: Left-join sleep onto activity
    - step4_derive_activity_level: Bucket days into activity levels
    - step5_aggregate: Means, correlation, counts and grouped means
    - step6_visualize_report: Charts and Markdown report
    - run_pipeline: Full run and command-line interface
"""

__version__ = "1.0.0"
__author__ = "Fitbit EDA Pipeline Team"

from .config import (
    LoadConfig,
    ReportConfig,
    PipelineConfig,
    ACTIVITY_LEVELS,
)

from .errors import (
    PipelineError,
    SchemaError,
    ParseError,
    InvalidInputError,
    AggregationError,
    NoData,
    InsufficientData,
)

from .step1_load_sources import RawSources, load_sources, run_step1
from .step2_clean_records import CleanedSources, run_step2
from .step3_join_sleep import join_activity_sleep, run_step3
from .step4_derive_activity_level import add_activity_level, run_step4
from .step5_aggregate import (
    AggregateSummary,
    mean_steps,
    mean_calories,
    mean_sleep_hours,
    correlation_steps_calories,
    count_by_activity_level,
    mean_by_group,
    summarize,
    run_step5,
)
from .step6_visualize_report import run_step6
from .run_pipeline import PipelineResult, run_pipeline


__all__ = [
    # Config classes
    "LoadConfig",
    "ReportConfig",
    "PipelineConfig",
    "ACTIVITY_LEVELS",
    # Errors
    "PipelineError",
    "SchemaError",
    "ParseError",
    "InvalidInputError",
    "AggregationError",
    "NoData",
    "InsufficientData",
    # Containers
    "RawSources",
    "CleanedSources",
    "AggregateSummary",
    "PipelineResult",
    # Operations
    "load_sources",
    "join_activity_sleep",
    "add_activity_level",
    "mean_steps",
    "mean_calories",
    "mean_sleep_hours",
    "correlation_steps_calories",
    "count_by_activity_level",
    "mean_by_group",
    "summarize",
    # Step functions
    "run_step1",
    "run_step2",
    "run_step3",
    "run_step4",
    "run_step5",
    "run_step6",
    "run_pipeline",
]
