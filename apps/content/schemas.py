"""
Pydantic schemas for blog content read from Supabase.

Rows carry more columns than we model; extra columns are kept so callers
can pass them through untouched.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict

UNCATEGORIZED = "Uncategorized"


class Category(BaseModel):
    id: str
    name: str
    updated_at: Optional[str] = None


class Post(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    author_id: Optional[str] = None
    image_url: Optional[str] = None
    views: Optional[int] = 0
    is_featured: Optional[bool] = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MediaItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    storage_path: Optional[str] = None
    url: Optional[str] = None
    alt_text: str = ""
    uploaded_by: Optional[str] = None
    created_at: Optional[str] = None


class Comment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    blog_id: str
    content: str
    status: str = "pending"
    author_id: Optional[str] = None
    created_at: Optional[str] = None
