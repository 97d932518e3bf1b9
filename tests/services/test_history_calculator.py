# tests/services/test_history_calculator.py
"""
Tests for the TimeSeriesAggregator.

Test Coverage:
- Bucket keys and labels for each period
- ISO week edge cases around New Year
- Last write wins within a bucket
- Bucket limits (day 8, week 5, month 4, year 5)
- Input normalization (dicts, tuples, ISO strings, unsorted input)
- Invalid periods
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from projectdollar.services.exceptions import InvalidPeriodError
from projectdollar.services.valuation.history_calculator import (
    TimeSeriesAggregator,
    parse_period,
)
from projectdollar.services.valuation.types import HistoryPoint, Period


@pytest.fixture
def aggregator() -> TimeSeriesAggregator:
    return TimeSeriesAggregator()


def _daily(start: date, values: list[str]) -> list[HistoryPoint]:
    return [
        HistoryPoint(date=start + timedelta(days=i), value=Decimal(v))
        for i, v in enumerate(values)
    ]


# =============================================================================
# KEYS AND LABELS
# =============================================================================

class TestBucketKeys:
    """Tests for bucket keys and labels."""

    def test_day(self):
        day = date(2024, 5, 2)
        assert TimeSeriesAggregator.bucket_key(day, Period.DAY) == "2024-05-02"
        assert TimeSeriesAggregator.bucket_label(day, Period.DAY) == "02/05"

    def test_week_label_spans_monday_to_sunday(self):
        # Thursday 2 May 2024 is in ISO week 18 (Mon 29 Apr - Sun 5 May)
        day = date(2024, 5, 2)
        assert TimeSeriesAggregator.bucket_key(day, Period.WEEK) == "2024-W18"
        assert TimeSeriesAggregator.bucket_label(day, Period.WEEK) == "29-05/05"

    def test_week_uses_iso_year_at_year_end(self):
        # Monday 30 Dec 2024 belongs to ISO week 1 of 2025
        assert TimeSeriesAggregator.bucket_key(date(2024, 12, 30), Period.WEEK) == "2025-W01"

    def test_week_zero_padded(self):
        assert TimeSeriesAggregator.bucket_key(date(2024, 1, 3), Period.WEEK) == "2024-W01"

    def test_week_53(self):
        # 31 Dec 2020 (Thursday) is in ISO week 53 of 2020
        assert TimeSeriesAggregator.bucket_key(date(2020, 12, 31), Period.WEEK) == "2020-W53"

    def test_month(self):
        day = date(2024, 5, 17)
        assert TimeSeriesAggregator.bucket_key(day, Period.MONTH) == "2024-05"
        assert TimeSeriesAggregator.bucket_label(day, Period.MONTH) == "May '24"

    def test_year(self):
        day = date(2023, 8, 1)
        assert TimeSeriesAggregator.bucket_key(day, Period.YEAR) == "2023"
        assert TimeSeriesAggregator.bucket_label(day, Period.YEAR) == "2023"


# =============================================================================
# AGGREGATION
# =============================================================================

class TestAggregate:
    """Tests for bucketing and limits."""

    def test_ten_days_keeps_last_eight(self, aggregator):
        points = _daily(date(2024, 5, 1), [str(i) for i in range(1, 11)])

        result = aggregator.aggregate(points, "day")

        assert len(result) == 8
        assert result[0].date == date(2024, 5, 3)
        assert result[-1].date == date(2024, 5, 10)
        assert [p.value for p in result] == [Decimal(str(i)) for i in range(3, 11)]

    def test_last_write_wins_within_bucket(self, aggregator):
        points = [
            HistoryPoint(date(2024, 5, 1), Decimal("100")),
            HistoryPoint(date(2024, 5, 1), Decimal("150")),
        ]

        result = aggregator.aggregate(points, "day")

        assert len(result) == 1
        assert result[0].value == Decimal("150")

    def test_week_takes_latest_point_of_week(self, aggregator):
        # Mon 29 Apr → Sun 5 May 2024, one ISO week
        points = _daily(date(2024, 4, 29), ["1", "2", "3", "4", "5", "6", "7"])

        result = aggregator.aggregate(points, Period.WEEK)

        assert len(result) == 1
        assert result[0].key == "2024-W18"
        assert result[0].value == Decimal("7")
        assert result[0].date == date(2024, 5, 5)

    def test_month_limit_is_four(self, aggregator):
        points = [HistoryPoint(date(2024, m, 15), Decimal(m)) for m in range(1, 7)]

        result = aggregator.aggregate(points, "month")

        assert [p.key for p in result] == ["2024-03", "2024-04", "2024-05", "2024-06"]

    def test_year_limit_is_five(self, aggregator):
        points = [HistoryPoint(date(y, 1, 1), Decimal(y)) for y in range(2017, 2025)]

        result = aggregator.aggregate(points, "year")

        assert [p.key for p in result] == ["2020", "2021", "2022", "2023", "2024"]

    def test_unsorted_input_is_ordered(self, aggregator):
        points = [
            HistoryPoint(date(2024, 5, 3), Decimal("3")),
            HistoryPoint(date(2024, 5, 1), Decimal("1")),
            HistoryPoint(date(2024, 5, 2), Decimal("2")),
        ]

        result = aggregator.aggregate(points, "day")

        assert [p.value for p in result] == [Decimal("1"), Decimal("2"), Decimal("3")]

    def test_accepts_dicts_and_tuples(self, aggregator):
        points = [
            {"date": "2024-05-01", "value": "10.50"},
            (date(2024, 5, 2), 11),
        ]

        result = aggregator.aggregate(points, "day")

        assert [p.value for p in result] == [Decimal("10.50"), Decimal("11")]

    def test_empty_history(self, aggregator):
        assert aggregator.aggregate([], "week") == []

    def test_custom_limits(self):
        aggregator = TimeSeriesAggregator(limits={"day": 2})
        points = _daily(date(2024, 5, 1), ["1", "2", "3"])

        result = aggregator.aggregate(points, "day")

        assert [p.value for p in result] == [Decimal("2"), Decimal("3")]


# =============================================================================
# PERIOD PARSING
# =============================================================================

class TestParsePeriod:
    """Tests for period validation."""

    @pytest.mark.parametrize("raw,expected", [
        ("day", Period.DAY),
        ("WEEK", Period.WEEK),
        (" month ", Period.MONTH),
        (Period.YEAR, Period.YEAR),
    ])
    def test_valid(self, raw, expected):
        assert parse_period(raw) == expected

    @pytest.mark.parametrize("raw", ["hour", "", None, 7])
    def test_invalid(self, raw):
        with pytest.raises(InvalidPeriodError) as exc_info:
            parse_period(raw)
        assert exc_info.value.field == "period"

    def test_aggregate_rejects_invalid_period(self, aggregator):
        with pytest.raises(InvalidPeriodError):
            aggregator.aggregate([], "quarter")
