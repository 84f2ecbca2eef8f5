"""
Pydantic schemas for post analytics rows and the dashboard summary.

Field names follow the columns of the Supabase ``analytics`` table.
"""
from datetime import date as _date
import math
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from apps.core.errors import InvalidRowError

Number = Union[int, float]


def as_number(value: Any) -> Number:
    """Coerce a loosely-typed numeric column to a number, 0 when unusable.

    NaN and infinities (including strings that overflow a float) count as
    unusable.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
        try:
            number = float(value)
        except ValueError:
            return 0
        return number if math.isfinite(number) else 0
    return 0


def as_int(value: Any) -> int:
    return int(as_number(value))


def as_float(value: Any) -> float:
    return float(as_number(value))


def _as_counts(value: Any) -> Dict[str, float]:
    if not isinstance(value, Mapping):
        return {}
    return {str(k): as_float(v) for k, v in value.items()}


def _as_day(value: Any) -> Optional[str]:
    if isinstance(value, _date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class MetricRow(BaseModel):
    """One per-day, per-post metrics row."""

    date: str
    page_views: int = 0
    unique_visitors: int = 0
    avg_time_on_page: float = 0.0
    bounce_rate: float = 0.0
    geo_distribution: Dict[str, float] = Field(default_factory=dict)
    referral_sources: Dict[str, float] = Field(default_factory=dict)
    id: Optional[str] = None
    blog_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Union["MetricRow", Mapping[str, Any]]) -> "MetricRow":
        """Build a row from a raw backend record.

        Missing or malformed numbers become 0; a missing date is rejected.
        """
        if isinstance(record, MetricRow):
            return record
        if not isinstance(record, Mapping):
            raise InvalidRowError(f"metric row must be a mapping, got {type(record).__name__}", row=record)
        day = _as_day(record.get("date"))
        if day is None:
            raise InvalidRowError("metric row has no usable date", row=record)
        row_id = record.get("id")
        blog_id = record.get("blog_id")
        return cls(
            date=day,
            page_views=as_int(record.get("page_views")),
            unique_visitors=as_int(record.get("unique_visitors")),
            avg_time_on_page=as_float(record.get("avg_time_on_page")),
            bounce_rate=as_float(record.get("bounce_rate")),
            geo_distribution=_as_counts(record.get("geo_distribution")),
            referral_sources=_as_counts(record.get("referral_sources")),
            id=None if row_id is None else str(row_id),
            blog_id=None if blog_id is None else str(blog_id),
        )


class AggregatedDay(BaseModel):
    date: str
    page_views: int = 0
    unique_visitors: int = 0
    avg_time_on_page: float = 0.0
    bounce_rate: float = 0.0
    geo_distribution: Dict[str, float] = Field(default_factory=dict)
    referral_sources: Dict[str, float] = Field(default_factory=dict)
    row_count: int = 0


class ViewsPoint(BaseModel):
    date: str
    views: int


class RankedEntry(BaseModel):
    name: str
    value: float


class DevicePoint(BaseModel):
    date: str
    mobile: int
    desktop: int


class AnalyticsSummary(BaseModel):
    """Dashboard-ready analytics for a date window."""

    views_series: List[ViewsPoint] = Field(default_factory=list)
    geography_top: List[RankedEntry] = Field(default_factory=list)
    referral_ranked: List[RankedEntry] = Field(default_factory=list)
    device_series: List[DevicePoint] = Field(default_factory=list)
    days: List[AggregatedDay] = Field(default_factory=list)
    total_views: int = 0
    total_visitors: int = 0
    avg_time_on_page: float = 0.0
    bounce_rate: float = 0.0

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "views_series": [{"date": "2024-01-01", "views": 17}],
                "geography_top": [{"name": "US", "value": 5}],
                "referral_ranked": [{"name": "google", "value": 3}],
                "device_series": [{"date": "2024-01-01", "mobile": 5, "desktop": 3}],
                "days": [],
                "total_views": 17,
                "total_visitors": 8,
                "avg_time_on_page": 0.0,
                "bounce_rate": 0.0,
            }
        }
    )
