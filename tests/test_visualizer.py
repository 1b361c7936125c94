# tests/test_visualizer.py
from datetime import date
from decimal import Decimal

import matplotlib.pyplot as plt
import pandas as pd

from backend.logic.aggregation import TrendPoint, profit_trend
from backend.visualizer import status_pie, trend_frame


def test_trend_frame_columns_and_values():
    points = [
        TrendPoint("Sep", date(2026, 9, 1), date(2026, 9, 30), Decimal("100.00"), Decimal("40.00")),
        TrendPoint("Oct", date(2026, 10, 1), date(2026, 10, 31), Decimal("0.00"), Decimal("10.00")),
    ]
    df = trend_frame(points)
    assert list(df.columns) == ["Revenue", "Costs", "Profit"]
    assert df.index.name == "Period"
    assert df.loc[pd.Timestamp(2026, 10, 1), "Profit"] == -10.0
    assert df.loc[pd.Timestamp(2026, 9, 1), "Profit"] == 60.0


def test_trend_frame_keeps_chronological_order_across_year_end():
    # labels Oct..Mar would sort alphabetically as Dec, Feb, Jan, Mar, Nov, Oct
    points = profit_trend([], [], [], "monthly", date(2026, 3, 31))
    df = trend_frame(points)

    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.is_monotonic_increasing
    assert list(df.index) == [pd.Timestamp(p.start) for p in points]
    assert df.index[0] == pd.Timestamp(2025, 10, 1)
    assert df.index[-1] == pd.Timestamp(2026, 3, 1)


def test_trend_frame_weekly_buckets_stay_in_order():
    points = profit_trend([], [], [], "weekly", date(2026, 1, 2))
    df = trend_frame(points)
    assert df.index.is_monotonic_increasing
    assert len(df) == 7


def test_status_pie_handles_empty_and_counts():
    for tally in ({"pending": 0, "completed": 0}, {"pending": 2, "completed": 3}):
        fig = status_pie(tally)
        assert fig.axes
        plt.close(fig)
