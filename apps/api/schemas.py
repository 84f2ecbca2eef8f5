"""
Pydantic schemas for the Love&Pixels CMS API.

Defines request/response models for API endpoints with validation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from apps.featured.reconciler import FeaturedAssignment


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Service health status")

    model_config = ConfigDict(json_schema_extra={"example": {"status": "ok"}})


class VersionResponse(BaseModel):
    """Response model for version endpoint."""

    version: str = Field(..., description="API version")

    model_config = ConfigDict(json_schema_extra={"example": {"version": "0.1.0"}})


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., description="Category name", min_length=1)


class ViewRecordedResponse(BaseModel):
    ok: bool = True
    page_views: int
    unique_visitors: int


class PlanItemResponse(BaseModel):
    post_id: str
    new_category_id: str
    previous_category_id: Optional[str] = None


class FeaturedSaveResponse(BaseModel):
    """Outcome of saving the featured sections."""

    ok: bool = Field(..., description="True when every planned update was applied")
    assignment: FeaturedAssignment
    category_ids: Dict[str, str] = Field(default_factory=dict)
    planned: List[PlanItemResponse] = Field(default_factory=list)
    applied: List[str] = Field(default_factory=list)
    failed: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "assignment": {"trending": ["p1"], "highlights": [], "fun": ["p2"]},
                "category_ids": {"trending": "c1", "highlights": "c2", "fun": "c3"},
                "planned": [{"post_id": "p1", "new_category_id": "c1", "previous_category_id": "c9"}],
                "applied": ["p1"],
                "failed": {},
            }
        }
    )
