import pandas as pd
import pytest

from fitbit_eda.config import ReportConfig
from fitbit_eda.step5_aggregate import summarize
from fitbit_eda.step6_visualize_report import (
    CHARTS,
    build_commentary,
    daily_mean_steps,
    describe_correlation,
    linear_fit,
    moving_average_smoother,
    render_charts,
    run_step6,
    write_report,
)


def test_linear_fit_recovers_line():
    x = pd.Series([0.0, 1.0, 2.0, 3.0])
    slope, intercept = linear_fit(x, 2 * x + 1)
    assert slope == pytest.approx(2.0)
    assert intercept == pytest.approx(1.0)


def test_linear_fit_needs_spread_in_x():
    assert linear_fit(pd.Series([1.0, 1.0, 1.0]), pd.Series([1.0, 2.0, 3.0])) is None
    assert linear_fit(pd.Series([1.0]), pd.Series([1.0])) is None


def test_moving_average_smoother_sorts_by_x():
    smooth = moving_average_smoother(
        pd.Series([3.0, 1.0, 2.0, None]), pd.Series([30.0, 10.0, 20.0, 99.0]), window=3
    )
    assert smooth["x"].tolist() == [1.0, 2.0, 3.0]
    assert smooth["y_smooth"].tolist() == pytest.approx([15.0, 20.0, 25.0])


def test_daily_mean_steps(scenario_joined):
    daily = daily_mean_steps(scenario_joined)
    assert daily.tolist() == [4000.0, 9000.0]
    assert daily.index.is_monotonic_increasing


@pytest.mark.parametrize("r, text", [
    (None, "undetermined"),
    (0.05, "negligible"),
    (0.2, "weak positive"),
    (-0.45, "moderate negative"),
    (0.8, "strong positive"),
])
def test_describe_correlation(r, text):
    assert describe_correlation(r) == text


def test_build_commentary_covers_every_chart(scenario_joined, tmp_path):
    text = build_commentary(summarize(scenario_joined), ReportConfig(outdir=tmp_path))

    assert set(text) == {"overview"} | {slug for slug, _ in CHARTS}
    assert "2 user-days from 1 users" in text["overview"]
    assert "r = 1.00" in text["steps_vs_calories"]
    assert text["steps_by_weekday"].startswith("Wednesday is the most active day")
    assert "Tuesday the least active" in text["steps_by_weekday"]


def test_sleep_trend_is_described_as_moving_average(scenario_joined, tmp_path):
    text = build_commentary(summarize(scenario_joined), ReportConfig(outdir=tmp_path))

    assert "moving average" in text["sleep_vs_steps"]
    assert "not a fitted regression" in text["sleep_vs_steps"]


def test_build_commentary_on_empty_data(scenario_joined, tmp_path):
    summary = summarize(scenario_joined.iloc[0:0])
    text = build_commentary(summary, ReportConfig(outdir=tmp_path))

    assert "n/a" in text["overview"]
    assert text["activity_level_distribution"] == "No days to classify."
    assert text["sleep_distribution"] == "No sleep records were available."


def test_write_report_without_charts(scenario_joined, tmp_path):
    cfg = ReportConfig(outdir=tmp_path, title="Test Report")
    path = write_report(summarize(scenario_joined), {}, cfg)

    content = path.read_text(encoding="utf-8")
    assert content.startswith("# Test Report")
    assert content.count("_Chart not rendered._") == len(CHARTS)
    assert "| Mean steps | 6,500 |" in content


def test_render_charts_writes_all_eight(scenario_joined, tmp_path):
    pytest.importorskip("matplotlib")
    cfg = ReportConfig(outdir=tmp_path)

    paths = render_charts(scenario_joined, summarize(scenario_joined), cfg)

    assert len(paths) == 8
    for slug, path in paths.items():
        assert path is not None, slug
        assert path.exists()
        assert path.parent == tmp_path / "plots"


def test_render_charts_skips_sedentary_chart_without_column(scenario_joined, tmp_path):
    pytest.importorskip("matplotlib")
    df = scenario_joined.drop(columns=["sedentary_minutes"])

    paths = render_charts(df, summarize(df), ReportConfig(outdir=tmp_path))

    assert paths["sedentary_vs_sleep"] is None
    assert paths["steps_vs_calories"].exists()


def test_run_step6_links_charts_in_report(scenario_joined, tmp_path):
    pytest.importorskip("matplotlib")
    outputs = run_step6(scenario_joined, summarize(scenario_joined), ReportConfig(outdir=tmp_path))

    content = outputs["report"].read_text(encoding="utf-8")
    assert "![Calories vs. Total Steps](plots/steps_vs_calories.png)" in content
    assert "_Chart not rendered._" not in content
