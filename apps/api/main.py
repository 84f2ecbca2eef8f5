"""
FastAPI application for the Love&Pixels CMS.

Dashboard endpoints for analytics, featured-content curation, categories
and user invites. Storage and auth stay in Supabase; this service only
shapes data and talks to the backend through the adapters.
"""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.brevo_adapter import BrevoAdapter
from adapters.supabase_adapter import ALL_POSTS, SupabaseGateway
from adapters.wiring import build_email, build_gateway, load_env
from apps.analytics.aggregator import aggregate
from apps.analytics.periods import date_range_for_period, period_for_range
from apps.analytics.recorder import record_post_view
from apps.analytics.schemas import AnalyticsSummary
from apps.content.schemas import Category, Post
from apps.core.errors import CategoryResolutionError, GatewayError, InvalidRowError
from apps.featured.reconciler import FeaturedAssignment
from apps.featured.service import FeaturedContentService

from .config import get_settings
from .schemas import (
    CategoryCreateRequest,
    FeaturedSaveResponse,
    HealthResponse,
    PlanItemResponse,
    VersionResponse,
    ViewRecordedResponse,
)

# Configure logging
settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@lru_cache(maxsize=1)
def get_gateway() -> SupabaseGateway:
    return build_gateway(load_env())


@lru_cache(maxsize=1)
def get_email() -> BrevoAdapter:
    return build_email(load_env())


app = FastAPI(
    title="Love&Pixels CMS API",
    description="Dashboard backend: analytics, featured content and invites",
    version=API_VERSION,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/version", response_model=VersionResponse)
async def get_version():
    """Get API version."""
    return VersionResponse(version=API_VERSION)


@app.post("/api/send-email")
async def send_email(request: Request, email_adapter: BrevoAdapter = Depends(get_email)):
    """Send a user invite. Requires non-empty ``email`` and ``role`` strings."""
    try:
        body = await request.json()
    except ValueError:
        body = None
    email = body.get("email") if isinstance(body, dict) else None
    role = body.get("role") if isinstance(body, dict) else None
    if not isinstance(email, str) or not email.strip() or not isinstance(role, str) or not role.strip():
        logger.warning("send-email rejected: missing email or role")
        return JSONResponse({"error": "Email and role are required"}, status_code=status.HTTP_400_BAD_REQUEST)

    result = email_adapter.send_invite(email.strip(), role.strip())
    if not result.success:
        logger.error("Invite email failed: %s", result.error)
        return JSONResponse({"error": result.error}, status_code=500)
    return {"success": True}


@app.get("/analytics", response_model=AnalyticsSummary)
def get_analytics(
    post_id: str = ALL_POSTS,
    range: Optional[str] = None,
    gateway: SupabaseGateway = Depends(get_gateway),
):
    """Aggregated analytics for one post (or ``all``) over a dashboard range."""
    label = range or settings.default_range
    try:
        window = date_range_for_period(period_for_range(label))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    try:
        rows = gateway.fetch_metric_rows(post_id, window)
        return aggregate(rows)
    except (InvalidRowError, GatewayError) as exc:
        logger.warning("Analytics unavailable for %s (%s): %s", post_id, label, exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="analytics unavailable")


@app.post("/posts/{post_id}/views", response_model=ViewRecordedResponse)
def post_viewed(post_id: str, gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        fields = record_post_view(gateway, post_id)
    except GatewayError as exc:
        logger.warning("Failed to record view for %s: %s", post_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return ViewRecordedResponse(page_views=fields["page_views"], unique_visitors=fields["unique_visitors"])


@app.get("/posts", response_model=List[Post])
def list_posts(
    status_filter: Optional[str] = Query(None, alias="status"),
    gateway: SupabaseGateway = Depends(get_gateway),
):
    try:
        return gateway.fetch_posts(status_filter)
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@app.get("/categories", response_model=List[Category])
def list_categories(gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        return gateway.fetch_categories()
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@app.post("/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(request: CategoryCreateRequest, gateway: SupabaseGateway = Depends(get_gateway)):
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Category name cannot be empty")
    try:
        category = gateway.create_category(name)
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if category is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to create category")
    return category


@app.delete("/categories/{category_id}")
def delete_category(category_id: str, gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        gateway.delete_category(category_id)
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return {"ok": True}


@app.get("/featured", response_model=FeaturedAssignment)
def get_featured(gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        return FeaturedContentService(gateway).load()
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@app.put("/featured", response_model=FeaturedSaveResponse)
def save_featured(assignment: FeaturedAssignment, gateway: SupabaseGateway = Depends(get_gateway)):
    """Reassign post categories so the featured sections match ``assignment``."""
    try:
        result = FeaturedContentService(gateway).save(assignment)
    except CategoryResolutionError as exc:
        logger.warning("Featured save aborted: %s", exc)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except GatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))

    return FeaturedSaveResponse(
        ok=result.report.ok,
        assignment=assignment,
        category_ids=result.plan.category_ids,
        planned=[
            PlanItemResponse(
                post_id=item.post_id,
                new_category_id=item.new_category_id,
                previous_category_id=item.previous_category_id,
            )
            for item in result.plan
        ],
        applied=result.report.applied,
        failed=result.report.failed,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
