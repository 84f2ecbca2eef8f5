"""
Load and save the home page featured sections against the DataGateway.
"""
from dataclasses import dataclass
import logging
from typing import List, Optional, Protocol

from apps.content.schemas import Category, Post

from .reconciler import (
    CategoryGateway,
    ExecutionReport,
    FeaturedAssignment,
    GatewayCategoryLookup,
    ReconcilePlan,
    current_assignment,
    execute_plan,
    reconcile,
)

logger = logging.getLogger(__name__)

FEATURED_POST_STATUS = "published"


class FeaturedGateway(CategoryGateway, Protocol):
    def fetch_posts(self, status: Optional[str] = None) -> List[Post]:
        ...

    def fetch_categories(self) -> List[Category]:
        ...


@dataclass
class SaveResult:
    plan: ReconcilePlan
    report: ExecutionReport


class FeaturedContentService:
    def __init__(self, gateway: FeaturedGateway, *, status: str = FEATURED_POST_STATUS) -> None:
        self.gateway = gateway
        self.status = status

    def load(self) -> FeaturedAssignment:
        posts = self.gateway.fetch_posts(self.status)
        categories = self.gateway.fetch_categories()
        return current_assignment(posts, categories)

    def save(self, assignment: FeaturedAssignment) -> SaveResult:
        """Reconcile and apply ``assignment``.

        CategoryResolutionError propagates before any post is touched.
        """
        posts = self.gateway.fetch_posts(self.status)
        plan = reconcile(posts, assignment, GatewayCategoryLookup(self.gateway))
        report = execute_plan(plan, self.gateway)
        logger.info(
            "Featured save applied=%d failed=%d", len(report.applied), len(report.failed)
        )
        return SaveResult(plan=plan, report=report)
