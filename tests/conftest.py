from typing import Any, Dict, List, Mapping, Optional

import pytest

from apps.analytics.schemas import MetricRow
from apps.content.schemas import UNCATEGORIZED, Category, Post
from apps.core.errors import GatewayError


class FakeGateway:
    """In-memory stand-in for SupabaseGateway."""

    def __init__(self) -> None:
        self.posts: List[Post] = []
        self.categories: List[Category] = []
        self.metric_rows: List[Dict[str, Any]] = []
        self.view_counts: Dict[str, int] = {}
        self.updates: List[tuple] = []
        self.fail_create: set = set()
        self.fail_update: set = set()
        self.fail_fetch = False
        self._next_id = 100

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    # analytics
    def fetch_metric_rows(self, scope, date_range):
        if self.fail_fetch:
            raise GatewayError("backend down")
        rows = [r for r in self.metric_rows if scope == "all" or r.get("blog_id") == scope]
        return [MetricRow.from_record(r) for r in rows]

    def get_metric_row(self, post_id: str, day: str) -> Optional[Dict[str, Any]]:
        for row in self.metric_rows:
            if row.get("blog_id") == post_id and row.get("date") == day:
                return row
        return None

    def insert_metric_row(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        stored = {**row, "id": self._new_id()}
        self.metric_rows.append(stored)
        return stored

    def update_metric_row(self, row_id: str, fields: Mapping[str, Any]) -> None:
        for row in self.metric_rows:
            if str(row.get("id")) == row_id:
                row.update(fields)

    def increment_post_views(self, post_id: str) -> None:
        self.view_counts[post_id] = self.view_counts.get(post_id, 0) + 1

    # posts
    def add_post(self, post_id: str, category_id: Optional[str] = None, status: str = "published") -> Post:
        post = Post(id=post_id, title=f"Post {post_id}", category_id=category_id, status=status)
        self.posts.append(post)
        return post

    def fetch_posts(self, status: Optional[str] = None) -> List[Post]:
        if self.fail_fetch:
            raise GatewayError("backend down")
        names = {c.id: c.name for c in self.categories}
        result = []
        for post in self.posts:
            if status and post.status != status:
                continue
            copy = post.model_copy()
            copy.category_name = names.get(post.category_id or "", UNCATEGORIZED)
            result.append(copy)
        return result

    def update_post_category(self, post_id: str, category_id: str) -> None:
        if post_id in self.fail_update:
            raise GatewayError(f"update of {post_id} rejected")
        self.updates.append((post_id, category_id))
        for post in self.posts:
            if post.id == post_id:
                post.category_id = category_id

    # categories
    def add_category(self, name: str, category_id: Optional[str] = None) -> Category:
        category = Category(id=category_id or self._new_id(), name=name)
        self.categories.append(category)
        return category

    def fetch_categories(self) -> List[Category]:
        return sorted(self.categories, key=lambda c: c.name)

    def find_category_by_name(self, name: str) -> Optional[Category]:
        for category in self.categories:
            if category.name.lower() == name.lower():
                return category
        return None

    def create_category(self, name: str) -> Optional[Category]:
        if name in self.fail_create:
            raise GatewayError(f"insert of {name} rejected")
        existing = self.find_category_by_name(name)
        if existing is not None:
            return existing
        return self.add_category(name)

    def delete_category(self, category_id: str) -> None:
        self.categories = [c for c in self.categories if c.id != category_id]


@pytest.fixture
def gateway():
    return FakeGateway()
