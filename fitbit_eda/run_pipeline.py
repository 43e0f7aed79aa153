"""
Pipeline runner and command-line interface.

Runs the steps in order: load -> clean -> join -> derive activity level ->
aggregate -> charts and report.
"""

from __future__ import annotations
import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config import PipelineConfig
from .errors import PipelineError, SchemaError, ParseError, InvalidInputError, AggregationError
from .step1_load_sources import run_step1
from .step2_clean_records import run_step2
from .step3_join_sleep import run_step3
from .step4_derive_activity_level import run_step4
from .step5_aggregate import AggregateSummary, run_step5
from .step6_visualize_report import run_step6
from .utils import ensure_dir, save_dataframe


@dataclass(frozen=True)
class PipelineResult:
    """Everything a run produces, for callers that use the pipeline in-process."""

    joined: pd.DataFrame
    summary: AggregateSummary
    removed_sleep_duplicates: int
    report_path: Optional[Path] = None
    chart_paths: Dict[str, Optional[Path]] = field(default_factory=dict)


def run_pipeline(cfg: PipelineConfig) -> PipelineResult:
    """
    Execute the complete pipeline.

    Args:
        cfg: PipelineConfig with input paths, output directory and report options

    Returns:
        PipelineResult with the joined records and the aggregates
    """
    ensure_dir(cfg.output_base_dir)

    raw = run_step1(cfg.load_config())
    cleaned = run_step2(raw)
    joined = run_step3(cleaned)
    featured = run_step4(joined)
    summary = run_step5(featured, cfg.output_base_dir)

    print("\nSaving joined records...")
    save_dataframe(featured, cfg.output_base_dir / "joined_daily_activity_sleep.csv")

    report_path = None
    chart_paths: Dict[str, Optional[Path]] = {}
    if cfg.render_report:
        outputs = run_step6(featured, summary, cfg.report_config())
        report_path = outputs["report"]
        chart_paths = outputs["charts"]

    return PipelineResult(
        joined=featured,
        summary=summary,
        removed_sleep_duplicates=cleaned.removed_sleep_duplicates,
        report_path=report_path,
        chart_paths=chart_paths
    )


# =============================================================================
# CLI INTERFACE
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='fitbit-eda',
        description='Exploratory analysis of Fitbit daily activity and sleep extracts.',
        epilog='Example: fitbit-eda --activity data/dailyActivity_merged.csv '
               '--sleep data/sleepDay_merged.csv --calories data/dailyCalories_merged.csv '
               '--outdir output',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--activity',
        type=Path,
        default=Path('data/dailyActivity_merged.csv'),
        help='Path to daily activity CSV (default: data/dailyActivity_merged.csv)'
    )

    parser.add_argument(
        '--sleep',
        type=Path,
        default=Path('data/sleepDay_merged.csv'),
        help='Path to sleep day CSV (default: data/sleepDay_merged.csv)'
    )

    parser.add_argument(
        '--calories',
        type=Path,
        default=Path('data/dailyCalories_merged.csv'),
        help='Path to daily calories CSV (default: data/dailyCalories_merged.csv)'
    )

    parser.add_argument(
        '--outdir',
        type=Path,
        default=Path('output'),
        help='Output directory for tables, charts and report (default: output)'
    )

    parser.add_argument(
        '--title',
        type=str,
        default=None,
        help='Report title'
    )

    parser.add_argument(
        '--smoothing-window',
        type=int,
        default=7,
        help='Window (days) of the rolling mean in time-series charts (default: 7)'
    )

    parser.add_argument(
        '--no-report',
        action='store_true',
        help='Only compute tables; skip charts and the Markdown report'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cfg = PipelineConfig(
        activity_csv=args.activity,
        sleep_csv=args.sleep,
        calories_csv=args.calories,
        output_base_dir=args.outdir,
        render_report=not args.no_report,
        title=args.title,
        smoothing_window=args.smoothing_window
    )

    try:
        run_pipeline(cfg)
    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", flush=True)
        print("   Check that the input files exist and paths are correct.\n", flush=True)
        return 1
    except SchemaError as e:
        print(f"\nSchema Error: {e}", flush=True)
        print("   An input file is missing a column or holds values of the wrong type.\n", flush=True)
        return 1
    except ParseError as e:
        print(f"\nDate Parse Error: {e}", flush=True)
        print("   Check the date / timestamp columns of the input files.\n", flush=True)
        return 1
    except InvalidInputError as e:
        print(f"\nInvalid Input: {e}", flush=True)
        return 1
    except AggregationError as e:
        print(f"\nAggregation Error: {e}", flush=True)
        return 1
    except PipelineError as e:
        print(f"\nPipeline Error: {e}", flush=True)
        return 1

    print("\n" + "=" * 70)
    print("Analysis complete!")
    print("=" * 70 + "\n")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
