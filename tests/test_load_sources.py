import pandas as pd
import pytest

from fitbit_eda.config import ACTIVITY_SCHEMA, ACTIVITY_OPTIONAL_SCHEMA
from fitbit_eda.errors import SchemaError
from fitbit_eda.step1_load_sources import apply_schema, load_source, load_sources
from fitbit_eda.utils import normalize_column_names

from conftest import SCENARIO_ACTIVITY


def _activity(**overrides):
    df = SCENARIO_ACTIVITY.copy()
    for col, values in overrides.items():
        df[col] = values
    df.columns = normalize_column_names(df.columns)
    return df


def test_normalize_column_names():
    cols = normalize_column_names(
        ["Id", "ActivityDate", "TotalMinutesAsleep", "Very Active Minutes", " SleepDay ", "BMIValue"]
    )
    assert list(cols) == [
        "id", "activity_date", "total_minutes_asleep", "very_active_minutes", "sleep_day", "bmi_value"
    ]


def test_load_sources_applies_declared_types(scenario_csvs):
    raw = load_sources(*scenario_csvs)

    assert {"id", "activity_date", "total_steps", "calories"} <= set(raw.activity.columns)
    assert str(raw.activity["total_steps"].dtype) == "Int64"
    assert str(raw.activity["calories"].dtype) == "Float64"
    assert str(raw.activity["sedentary_minutes"].dtype) == "Int64"
    assert raw.activity["id"].tolist() == ["1503960366", "1503960366"]

    assert len(raw.sleep) == 3
    assert str(raw.sleep["total_minutes_asleep"].dtype) == "Int64"

    # calories extract is loaded as-is for reference
    assert len(raw.calories) == 2
    assert "activity_day" in raw.calories.columns


def test_missing_required_column_raises(tmp_path):
    path = tmp_path / "activity.csv"
    SCENARIO_ACTIVITY.drop(columns=["TotalSteps"]).to_csv(path, index=False)

    with pytest.raises(SchemaError, match="total_steps"):
        load_source(path, ACTIVITY_SCHEMA, "activity")


def test_non_numeric_value_is_not_coerced():
    df = _activity(TotalSteps=["4000", "lots"])
    with pytest.raises(SchemaError, match="non-numeric"):
        apply_schema(df, ACTIVITY_SCHEMA, "activity")


def test_fractional_value_in_integer_column_raises():
    df = _activity(TotalSteps=["4000", "12.5"])
    with pytest.raises(SchemaError, match="whole numbers"):
        apply_schema(df, ACTIVITY_SCHEMA, "activity")


@pytest.mark.parametrize("value", ["4000.0", "1e3", "+4000.", "0x10"])
def test_integer_column_requires_integer_literals(value):
    df = _activity(TotalSteps=["4000", value])
    with pytest.raises(SchemaError):
        apply_schema(df, ACTIVITY_SCHEMA, "activity")


def test_signed_integer_literals_are_accepted():
    df = _activity(TotalSteps=[" +4000 ", "-5"])
    out = apply_schema(df, ACTIVITY_SCHEMA, "activity")
    assert out["total_steps"].tolist() == [4000, -5]


def test_optional_columns_are_checked_when_present():
    df = _activity(SedentaryMinutes=["700", "most of the day"])
    with pytest.raises(SchemaError, match="sedentary_minutes"):
        apply_schema(df, ACTIVITY_SCHEMA, "activity", ACTIVITY_OPTIONAL_SCHEMA)


def test_blank_numeric_cells_become_missing():
    df = _activity(Calories=["1800", "  "])
    out = apply_schema(df, ACTIVITY_SCHEMA, "activity")
    assert out.loc[0, "calories"] == 1800
    assert pd.isna(out.loc[1, "calories"])


def test_empty_identifier_raises():
    df = _activity(Id=["1503960366", ""])
    with pytest.raises(SchemaError, match="identifier"):
        apply_schema(df, ACTIVITY_SCHEMA, "activity")


def test_undeclared_columns_pass_through():
    df = _activity(Notes=["rest day", "long walk"])
    out = apply_schema(df, ACTIVITY_SCHEMA, "activity")
    assert out["notes"].tolist() == ["rest day", "long walk"]


def test_apply_schema_does_not_modify_input():
    df = _activity()
    before = df.copy()
    apply_schema(df, ACTIVITY_SCHEMA, "activity", ACTIVITY_OPTIONAL_SCHEMA)
    pd.testing.assert_frame_equal(df, before)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_source(tmp_path / "nope.csv", ACTIVITY_SCHEMA, "activity")


def test_colliding_column_names_raise(tmp_path):
    path = tmp_path / "activity.csv"
    path.write_text("Id,ActivityDate,TotalSteps,Total Steps,Calories\n1,4/12/2016,1,1,1\n")
    with pytest.raises(SchemaError, match="collide"):
        load_source(path, ACTIVITY_SCHEMA, "activity")
