# projectdollar/services/valuation/history_calculator.py
"""
Time-Series Aggregator for the portfolio value chart.

Groups recorded HistoryPoints into day, week, month or year buckets and
keeps the most recent few buckets for display.

Algorithm:
    1. Sort points by date, ascending (stable, so same-day points keep
       their recording order)
    2. Compute a bucket key per point
    3. Later points overwrite earlier ones in the same bucket (last write wins)
    4. Emit one ChartPoint per bucket, oldest first
    5. Keep only the newest N buckets (day 8, week 5, month 4, year 5)

Bucket keys and labels:
    day    "2024-05-02"   "02/05"
    week   "2024-W18"     "29-05/05"   (Monday-Sunday, month of the Sunday)
    month  "2024-05"      "May '24"
    year   "2024"         "2024"

Weeks follow ISO 8601 (date.isocalendar()): Monday start, week 1 is the week
containing the year's first Thursday, and the key uses the ISO year, so
2024-12-30 falls in "2025-W01".
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable

from projectdollar.services.constants import PERIOD_BUCKET_LIMITS
from projectdollar.services.exceptions import InvalidPeriodError
from projectdollar.services.valuation.types import ChartPoint, HistoryPoint, Period

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def parse_period(period: Period | str) -> Period:
    """
    Accept a Period or its string value.

    Raises:
        InvalidPeriodError: For anything else
    """
    if isinstance(period, Period):
        return period
    if isinstance(period, str):
        try:
            return Period(period.strip().lower())
        except ValueError:
            pass
    raise InvalidPeriodError(period)


class TimeSeriesAggregator:
    """
    Aggregates value history into chart buckets.

    Stateless; the limits can be overridden per instance for tests or
    other chart sizes.

    Example:
        aggregator = TimeSeriesAggregator()
        points = aggregator.aggregate(history.points(), "week")
    """

    def __init__(self, limits: dict[str, int] | None = None) -> None:
        self._limits = dict(PERIOD_BUCKET_LIMITS)
        if limits:
            self._limits.update(limits)

    def aggregate(
            self,
            points: Iterable[HistoryPoint | dict[str, Any] | tuple],
            period: Period | str,
    ) -> list[ChartPoint]:
        """
        Bucket points by period.

        Args:
            points: HistoryPoints, {"date", "value"} dicts or (date, value)
                pairs; dates may be ISO strings
            period: "day", "week", "month" or "year"

        Returns:
            ChartPoints in chronological order, at most the period's limit

        Raises:
            InvalidPeriodError: Unknown period
        """
        resolved = parse_period(period)
        normalized = sorted(
            (HistoryPoint.from_raw(p) for p in points),
            key=lambda p: p.date,
        )

        buckets: dict[str, ChartPoint] = {}
        for point in normalized:
            key = self.bucket_key(point.date, resolved)
            buckets[key] = ChartPoint(
                key=key,
                label=self.bucket_label(point.date, resolved),
                date=point.date,
                value=point.value,
            )

        aggregated = list(buckets.values())
        limit = self._limits[resolved.value]
        return aggregated[-limit:] if limit > 0 else []

    # =========================================================================
    # KEYS AND LABELS
    # =========================================================================

    @staticmethod
    def bucket_key(day: date, period: Period) -> str:
        if period == Period.DAY:
            return day.isoformat()
        if period == Period.WEEK:
            iso_year, iso_week, _ = day.isocalendar()
            return f"{iso_year}-W{iso_week:02d}"
        if period == Period.MONTH:
            return f"{day.year}-{day.month:02d}"
        return f"{day.year}"

    @staticmethod
    def bucket_label(day: date, period: Period) -> str:
        if period == Period.DAY:
            return f"{day.day:02d}/{day.month:02d}"
        if period == Period.WEEK:
            monday = day - timedelta(days=day.weekday())
            sunday = monday + timedelta(days=6)
            return f"{monday.day:02d}-{sunday.day:02d}/{sunday.month:02d}"
        if period == Period.MONTH:
            return f"{MONTH_ABBREVIATIONS[day.month - 1]} '{day.year % 100:02d}"
        return f"{day.year}"
