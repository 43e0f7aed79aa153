import sys
from pathlib import Path

import pandas as pd
import pytest

# Ensure repository root is on sys.path so tests can import local modules
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fitbit_eda.config import (  # noqa: E402
    ACTIVITY_SCHEMA,
    ACTIVITY_OPTIONAL_SCHEMA,
    SLEEP_SCHEMA,
    SLEEP_OPTIONAL_SCHEMA,
)
from fitbit_eda.step1_load_sources import apply_schema  # noqa: E402
from fitbit_eda.step2_clean_records import clean_activity, clean_sleep, dedupe_sleep  # noqa: E402
from fitbit_eda.step3_join_sleep import join_activity_sleep  # noqa: E402
from fitbit_eda.step4_derive_activity_level import add_activity_level  # noqa: E402
from fitbit_eda.utils import normalize_column_names  # noqa: E402


USER = "1503960366"

# Two activity days for one user; the first sleep day is recorded twice.
SCENARIO_ACTIVITY = pd.DataFrame({
    "Id": [USER, USER],
    "ActivityDate": ["4/12/2016", "4/13/2016"],
    "TotalSteps": ["4000", "9000"],
    "TotalDistance": ["2.61", "5.87"],
    "SedentaryMinutes": ["700", "600"],
    "Calories": ["1800", "2400"],
})

SCENARIO_SLEEP = pd.DataFrame({
    "Id": [USER, USER, USER],
    "SleepDay": ["4/12/2016 12:00:00 AM", "4/12/2016 12:00:00 AM", "4/13/2016 12:00:00 AM"],
    "TotalSleepRecords": ["1", "1", "1"],
    "TotalMinutesAsleep": ["420", "300", "600"],
    "TotalTimeInBed": ["450", "320", "630"],
})

SCENARIO_CALORIES = pd.DataFrame({
    "Id": [USER, USER],
    "ActivityDay": ["4/12/2016", "4/13/2016"],
    "Calories": ["1800", "2400"],
})


def activity_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Raw Fitbit-shaped activity rows -> schema-checked, date-parsed frame."""
    df = df.copy()
    df.columns = normalize_column_names(df.columns)
    return clean_activity(apply_schema(df, ACTIVITY_SCHEMA, "activity", ACTIVITY_OPTIONAL_SCHEMA))


def sleep_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Raw Fitbit-shaped sleep rows -> schema-checked, date-parsed frame (not deduplicated)."""
    df = df.copy()
    df.columns = normalize_column_names(df.columns)
    return clean_sleep(apply_schema(df, SLEEP_SCHEMA, "sleep", SLEEP_OPTIONAL_SCHEMA))


@pytest.fixture
def scenario_activity():
    return activity_frame(SCENARIO_ACTIVITY)


@pytest.fixture
def scenario_sleep():
    return sleep_frame(SCENARIO_SLEEP)


@pytest.fixture
def scenario_joined(scenario_activity, scenario_sleep):
    deduped, _ = dedupe_sleep(scenario_sleep)
    return add_activity_level(join_activity_sleep(scenario_activity, deduped))


@pytest.fixture
def scenario_csvs(tmp_path):
    """Write the scenario extracts as CSV files; returns (activity, sleep, calories) paths."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    paths = (
        data_dir / "dailyActivity_merged.csv",
        data_dir / "sleepDay_merged.csv",
        data_dir / "dailyCalories_merged.csv",
    )
    for frame, path in zip((SCENARIO_ACTIVITY, SCENARIO_SLEEP, SCENARIO_CALORIES), paths):
        frame.to_csv(path, index=False)
    return paths
