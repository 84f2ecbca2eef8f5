"""
Supabase adapter: the DataGateway for posts, categories and analytics.

Wraps a supabase-py ``Client`` (or anything exposing the same ``table``/``rpc``
query-builder surface, which is how tests inject a fake). Every backend
failure is re-raised as GatewayError.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from apps.analytics.periods import DateRange
from apps.analytics.schemas import MetricRow
from apps.content.schemas import UNCATEGORIZED, Category, Comment, MediaItem, Post
from apps.core.errors import GatewayError
from packages.utils.logging import get_logger

_log = get_logger("adapters.supabase")

T = TypeVar("T")

ALL_POSTS = "all"


def _rows(response: Any) -> List[Dict[str, Any]]:
    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


class SupabaseGateway:
    """Typed access to the blog tables of a Supabase project."""

    POSTS = "blogs"
    CATEGORIES = "categories"
    ANALYTICS = "analytics"
    MEDIA = "media_library"
    COMMENTS = "comments"

    def __init__(self, client: Any) -> None:
        self.client = client

    def _run(self, op: str, call: Callable[[], T], **context: Any) -> T:
        try:
            result = call()
        except GatewayError:
            raise
        except Exception as exc:
            _log.warning(f"supabase.{op}.failed", extra={"data": {**context, "error": str(exc)}})
            raise GatewayError(f"Supabase {op} failed: {exc}") from exc
        _log.debug(f"supabase.{op}", extra={"data": context})
        return result

    # Analytics
    def fetch_metric_rows(self, scope: str, date_range: DateRange) -> List[MetricRow]:
        """Rows between the range bounds (inclusive), oldest first.

        ``scope`` is a post id, or ``"all"`` for every post.
        """

        def call():
            query = (
                self.client.table(self.ANALYTICS)
                .select("*")
                .gte("date", date_range.start_iso)
                .lte("date", date_range.end_iso)
                .order("date")
            )
            if scope != ALL_POSTS:
                query = query.eq("blog_id", scope)
            return _rows(query.execute())

        rows = self._run("fetch_metric_rows", call, scope=scope, start=date_range.start_iso, end=date_range.end_iso)
        return [MetricRow.from_record(r) for r in rows]

    def get_metric_row(self, post_id: str, day: str) -> Optional[Dict[str, Any]]:
        rows = self._run(
            "get_metric_row",
            lambda: _rows(
                self.client.table(self.ANALYTICS).select("*").eq("blog_id", post_id).eq("date", day).limit(1).execute()
            ),
            post_id=post_id,
            day=day,
        )
        return rows[0] if rows else None

    def insert_metric_row(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        rows = self._run(
            "insert_metric_row",
            lambda: _rows(self.client.table(self.ANALYTICS).insert(dict(row)).execute()),
            post_id=row.get("blog_id"),
        )
        return rows[0] if rows else dict(row)

    def update_metric_row(self, row_id: str, fields: Mapping[str, Any]) -> None:
        self._run(
            "update_metric_row",
            lambda: self.client.table(self.ANALYTICS).update(dict(fields)).eq("id", row_id).execute(),
            row_id=row_id,
        )

    def increment_post_views(self, post_id: str) -> None:
        self._run(
            "increment_post_views",
            lambda: self.client.rpc("increment_blog_view", {"blog_id": post_id}).execute(),
            post_id=post_id,
        )

    # Posts
    def fetch_posts(self, status: Optional[str] = None) -> List[Post]:
        """Posts newest first, each labelled with its category name."""

        def call():
            query = self.client.table(self.POSTS).select("*")
            if status:
                query = query.eq("status", status)
            return _rows(query.order("created_at", desc=True).execute())

        rows = self._run("fetch_posts", call, status=status)
        names = {c.id: c.name for c in self.fetch_categories()}
        posts = []
        for row in rows:
            post = Post(**{**row, "id": str(row["id"])})
            post.category_name = names.get(post.category_id or "", UNCATEGORIZED)
            posts.append(post)
        return posts

    def get_post(self, post_id: str) -> Optional[Post]:
        rows = self._run(
            "get_post",
            lambda: _rows(self.client.table(self.POSTS).select("*").eq("id", post_id).limit(1).execute()),
            post_id=post_id,
        )
        if not rows:
            return None
        return Post(**{**rows[0], "id": str(rows[0]["id"])})

    def update_post_category(self, post_id: str, category_id: str) -> None:
        self._run(
            "update_post_category",
            lambda: self.client.table(self.POSTS).update({"category_id": category_id}).eq("id", post_id).execute(),
            post_id=post_id,
            category_id=category_id,
        )

    # Categories
    def fetch_categories(self) -> List[Category]:
        rows = self._run(
            "fetch_categories",
            lambda: _rows(self.client.table(self.CATEGORIES).select("*").order("name").execute()),
        )
        return [Category(**{**r, "id": str(r["id"])}) for r in rows]

    def find_category_by_name(self, name: str) -> Optional[Category]:
        rows = self._run(
            "find_category_by_name",
            lambda: _rows(self.client.table(self.CATEGORIES).select("*").ilike("name", name).limit(1).execute()),
            name=name,
        )
        if not rows:
            return None
        return Category(**{**rows[0], "id": str(rows[0]["id"])})

    def create_category(self, name: str) -> Optional[Category]:
        """Insert a category, or return the existing one with that name.

        Returns None when the backend accepts the insert but returns no row.
        """
        existing = self.find_category_by_name(name)
        if existing is not None:
            return existing
        rows = self._run(
            "create_category",
            lambda: _rows(self.client.table(self.CATEGORIES).insert({"name": name}).execute()),
            name=name,
        )
        if not rows or not rows[0].get("id"):
            _log.warning("supabase.create_category.empty", extra={"data": {"name": name}})
            return None
        _log.info("supabase.create_category", extra={"data": {"name": name, "id": rows[0]["id"]}})
        return Category(**{**rows[0], "id": str(rows[0]["id"])})

    def update_category(self, category_id: str, name: str) -> Optional[Category]:
        rows = self._run(
            "update_category",
            lambda: _rows(self.client.table(self.CATEGORIES).update({"name": name}).eq("id", category_id).execute()),
            category_id=category_id,
        )
        if not rows:
            return None
        return Category(**{**rows[0], "id": str(rows[0]["id"])})

    def delete_category(self, category_id: str) -> None:
        self._run(
            "delete_category",
            lambda: self.client.table(self.CATEGORIES).delete().eq("id", category_id).execute(),
            category_id=category_id,
        )

    # Media library / moderation
    def list_media(self) -> List[MediaItem]:
        rows = self._run(
            "list_media",
            lambda: _rows(self.client.table(self.MEDIA).select("*").order("created_at", desc=True).execute()),
        )
        return [MediaItem(**{**r, "id": str(r["id"]), "alt_text": r.get("alt_text") or ""}) for r in rows]

    def list_comments(self, post_id: str, status: Optional[str] = None) -> List[Comment]:
        def call():
            query = self.client.table(self.COMMENTS).select("*").eq("blog_id", post_id)
            if status:
                query = query.eq("status", status)
            return _rows(query.order("created_at", desc=True).execute())

        rows = self._run("list_comments", call, post_id=post_id, status=status)
        return [Comment(**{**r, "id": str(r["id"]), "blog_id": str(r["blog_id"])}) for r in rows]
