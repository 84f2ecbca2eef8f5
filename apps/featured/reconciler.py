"""
Featured content reconciliation.

The home page shows three curated sections, each backed by a category:

    trending   -> "Trending"
    highlights -> "Weekly Highlight"
    fun        -> "Weekly Fun"

Saving a curation is split into three steps so a failure can never leave
the sections half-applied:

1. resolve_featured_categories: find or create the three categories; any
   failure aborts with CategoryResolutionError before a plan exists.
2. plan_assignments: compute the minimal set of post category changes.
3. execute_plan: apply the plan through the DataGateway, collecting
   per-post failures without retrying.
"""
from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from apps.content.schemas import Category, Post
from apps.core.errors import CategoryResolutionError, GatewayError

logger = logging.getLogger(__name__)

# Bucket -> category name, in precedence order
FEATURED_SECTIONS: Dict[str, str] = {
    "trending": "Trending",
    "highlights": "Weekly Highlight",
    "fun": "Weekly Fun",
}


class FeaturedAssignment(BaseModel):
    """Desired post ids per featured section."""

    trending: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)
    fun: List[str] = Field(default_factory=list)

    def bucket(self, name: str) -> List[str]:
        return getattr(self, name)


class CategoryLookup(Protocol):
    def find_by_name(self, name: str) -> Optional[Category]:
        ...

    def create(self, name: str) -> Optional[Category]:
        ...


class CategoryGateway(Protocol):
    def find_category_by_name(self, name: str) -> Optional[Category]:
        ...

    def create_category(self, name: str) -> Optional[Category]:
        ...

    def update_post_category(self, post_id: str, category_id: str) -> None:
        ...


class GatewayCategoryLookup:
    """CategoryLookup backed by the DataGateway."""

    def __init__(self, gateway: CategoryGateway) -> None:
        self.gateway = gateway

    def find_by_name(self, name: str) -> Optional[Category]:
        return self.gateway.find_category_by_name(name)

    def create(self, name: str) -> Optional[Category]:
        return self.gateway.create_category(name)


@dataclass(frozen=True)
class PlanItem:
    post_id: str
    new_category_id: str
    previous_category_id: Optional[str] = None


@dataclass
class ReconcilePlan:
    items: List[PlanItem] = field(default_factory=list)
    category_ids: Dict[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[PlanItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass
class ExecutionReport:
    applied: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def resolve_featured_categories(lookup: CategoryLookup) -> Dict[str, str]:
    """Return bucket -> category id, creating missing categories.

    Every section is attempted so the error can name all failures at once.
    Categories created before a failure are kept.
    """
    resolved: Dict[str, str] = {}
    missing: List[str] = []
    for bucket, name in FEATURED_SECTIONS.items():
        try:
            category = lookup.find_by_name(name)
            if category is None:
                logger.info("Creating missing featured category %s", name)
                category = lookup.create(name)
        except GatewayError as exc:
            logger.warning("Failed to resolve category %s: %s", name, exc)
            category = None
        if category is None or not category.id:
            missing.append(name)
            continue
        resolved[bucket] = category.id
    if missing:
        raise CategoryResolutionError(missing)
    return resolved


def plan_assignments(
    posts: Iterable[Post],
    assignment: FeaturedAssignment,
    category_ids: Dict[str, str],
) -> ReconcilePlan:
    """Compute the category changes that realise ``assignment``.

    A post listed in several sections goes to the first one in
    FEATURED_SECTIONS order. Posts not listed keep their category, and
    posts already in their target category produce no item.
    """
    members = {bucket: set(assignment.bucket(bucket)) for bucket in FEATURED_SECTIONS}
    plan = ReconcilePlan(category_ids=dict(category_ids))
    for post in posts:
        target = post.category_id
        for bucket in FEATURED_SECTIONS:
            if post.id in members[bucket]:
                target = category_ids[bucket]
                break
        if target is not None and target != post.category_id:
            plan.items.append(
                PlanItem(post_id=post.id, new_category_id=target, previous_category_id=post.category_id)
            )
    return plan


def reconcile(
    posts: Sequence[Post],
    assignment: FeaturedAssignment,
    lookup: CategoryLookup,
) -> ReconcilePlan:
    """Resolve the featured categories and plan the post updates."""
    category_ids = resolve_featured_categories(lookup)
    plan = plan_assignments(posts, assignment, category_ids)
    logger.info("Featured plan: %d update(s) across %d post(s)", len(plan), len(posts))
    return plan


def current_assignment(posts: Iterable[Post], categories: Iterable[Category]) -> FeaturedAssignment:
    """Derive the featured sections as they stand from post categories."""
    names = {category.id: category.name for category in categories}
    sections = {name: bucket for bucket, name in FEATURED_SECTIONS.items()}
    assignment = FeaturedAssignment()
    for post in posts:
        name = post.category_name or names.get(post.category_id or "")
        bucket = sections.get(name or "")
        if bucket is not None:
            assignment.bucket(bucket).append(post.id)
    return assignment


def execute_plan(plan: ReconcilePlan, gateway: CategoryGateway) -> ExecutionReport:
    """Apply each plan item; failures are reported per post, not retried."""
    report = ExecutionReport()
    for item in plan:
        try:
            gateway.update_post_category(item.post_id, item.new_category_id)
        except GatewayError as exc:
            logger.warning("Failed to move post %s to %s: %s", item.post_id, item.new_category_id, exc)
            report.failed[item.post_id] = str(exc)
            continue
        report.applied.append(item.post_id)
    return report
