"""
Per-day view counting for public post pages.

Each (post, day) pair owns one ``analytics`` row. A view bumps its page and
visitor counters, creating the row on the first view of the day, and also
bumps the post's lifetime ``views`` counter.
"""
from datetime import date
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from .schemas import as_int

logger = logging.getLogger(__name__)


class ViewGateway(Protocol):
    def get_metric_row(self, post_id: str, day: str) -> Optional[Mapping[str, Any]]:
        ...

    def insert_metric_row(self, row: Mapping[str, Any]) -> Mapping[str, Any]:
        ...

    def update_metric_row(self, row_id: str, fields: Mapping[str, Any]) -> None:
        ...

    def increment_post_views(self, post_id: str) -> None:
        ...


def new_day_row(post_id: str, day: str) -> Dict[str, Any]:
    return {
        "blog_id": post_id,
        "date": day,
        "page_views": 1,
        "unique_visitors": 1,
        "avg_time_on_page": 0,
        "bounce_rate": 0,
        "geo_distribution": {},
        "referral_sources": {},
    }


def bumped_fields(existing: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "page_views": as_int(existing.get("page_views")) + 1,
        "unique_visitors": as_int(existing.get("unique_visitors")) + 1,
        "avg_time_on_page": existing.get("avg_time_on_page") or 0,
        "bounce_rate": existing.get("bounce_rate") or 0,
        "geo_distribution": existing.get("geo_distribution") or {},
        "referral_sources": existing.get("referral_sources") or {},
    }


def record_post_view(gateway: ViewGateway, post_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    """Count one view of ``post_id`` for ``today`` (defaults to the current date).

    Returns the counters as written. GatewayError propagates.
    """
    day = (today or date.today()).isoformat()
    existing = gateway.get_metric_row(post_id, day)
    if existing:
        fields = bumped_fields(existing)
        gateway.update_metric_row(str(existing["id"]), fields)
        logger.debug("Updated analytics row %s for post %s", existing["id"], post_id)
    else:
        fields = new_day_row(post_id, day)
        gateway.insert_metric_row(fields)
        logger.debug("Created analytics row for post %s on %s", post_id, day)
    gateway.increment_post_views(post_id)
    return fields
