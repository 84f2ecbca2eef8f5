"""
Analytics aggregation for the dashboard.

Reduces flat per-day, per-post metric rows into:
- one bucket per date (counts summed, rate fields averaged over rows)
- a views time series in first-seen date order
- ranked geography (top 6) and referral tables
- grand totals and averages

Everything here is pure: rows are fetched by the caller.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from .schemas import (
    AggregatedDay,
    AnalyticsSummary,
    DevicePoint,
    MetricRow,
    RankedEntry,
    ViewsPoint,
)

GEOGRAPHY_TOP_N = 6
# Device split is an estimate; the backend does not record user agents.
MOBILE_SHARE = 0.6
DESKTOP_SHARE = 0.4

RowLike = Union[MetricRow, Mapping[str, Any]]


@dataclass
class _DayBucket:
    date: str
    page_views: int = 0
    unique_visitors: int = 0
    time_on_page_sum: float = 0.0
    bounce_rate_sum: float = 0.0
    row_count: int = 0
    geo_distribution: Dict[str, float] = field(default_factory=dict)
    referral_sources: Dict[str, float] = field(default_factory=dict)

    def add(self, row: MetricRow) -> None:
        self.page_views += row.page_views
        self.unique_visitors += row.unique_visitors
        self.time_on_page_sum += row.avg_time_on_page
        self.bounce_rate_sum += row.bounce_rate
        self.row_count += 1
        _merge_counts(self.geo_distribution, row.geo_distribution)
        _merge_counts(self.referral_sources, row.referral_sources)

    def finish(self) -> AggregatedDay:
        # row_count >= 1: a bucket only exists once a row has been added
        return AggregatedDay(
            date=self.date,
            page_views=self.page_views,
            unique_visitors=self.unique_visitors,
            avg_time_on_page=self.time_on_page_sum / self.row_count,
            bounce_rate=self.bounce_rate_sum / self.row_count,
            geo_distribution=dict(self.geo_distribution),
            referral_sources=dict(self.referral_sources),
            row_count=self.row_count,
        )


def _merge_counts(into: Dict[str, float], counts: Mapping[str, float]) -> None:
    for key, value in counts.items():
        into[key] = into.get(key, 0) + value


def aggregate_by_day(rows: Iterable[RowLike]) -> List[AggregatedDay]:
    """Group rows by date, in the order each date first appears.

    Raises InvalidRowError for a row without a usable date.
    """
    order: List[str] = []
    buckets: Dict[str, _DayBucket] = {}
    for raw in rows:
        row = MetricRow.from_record(raw)
        bucket = buckets.get(row.date)
        if bucket is None:
            bucket = _DayBucket(date=row.date)
            buckets[row.date] = bucket
            order.append(row.date)
        bucket.add(row)
    return [buckets[day].finish() for day in order]


def _rank(days: List[AggregatedDay], attr: str) -> List[RankedEntry]:
    totals: Dict[str, float] = {}
    for day in days:
        _merge_counts(totals, getattr(day, attr))
    # sorted() is stable, so ties keep first-seen order
    ranked: List[Tuple[str, float]] = sorted(totals.items(), key=lambda item: -item[1])
    return [RankedEntry(name=name, value=value) for name, value in ranked]


def _device_point(day: AggregatedDay) -> DevicePoint:
    return DevicePoint(
        date=day.date,
        mobile=round(day.unique_visitors * MOBILE_SHARE),
        desktop=round(day.unique_visitors * DESKTOP_SHARE),
    )


def summarize_days(days: List[AggregatedDay]) -> AnalyticsSummary:
    """Roll already-bucketed days up into the dashboard summary."""
    total_rows = sum(day.row_count for day in days)
    time_sum = sum(day.avg_time_on_page for day in days)
    bounce_sum = sum(day.bounce_rate for day in days)
    return AnalyticsSummary(
        views_series=[ViewsPoint(date=day.date, views=day.page_views) for day in days],
        geography_top=_rank(days, "geo_distribution")[:GEOGRAPHY_TOP_N],
        referral_ranked=_rank(days, "referral_sources"),
        device_series=[_device_point(day) for day in days],
        days=days,
        total_views=sum(day.page_views for day in days),
        total_visitors=sum(day.unique_visitors for day in days),
        avg_time_on_page=time_sum / total_rows if total_rows > 0 else 0.0,
        bounce_rate=bounce_sum / total_rows if total_rows > 0 else 0.0,
    )


def aggregate(rows: Iterable[RowLike]) -> AnalyticsSummary:
    """Aggregate metric rows into an AnalyticsSummary.

    Empty input gives an all-zero summary. A row without a date raises
    InvalidRowError and no partial summary is returned.
    """
    return summarize_days(aggregate_by_day(rows))
