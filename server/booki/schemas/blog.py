"""Blog schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.agency import ApprovalStatus


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None


class CreateBlogRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=1000)
    featured_image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    category_id: Optional[int] = None


class UpdateBlogRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = Field(None, max_length=1000)
    featured_image: Optional[str] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    category_id: Optional[int] = None


class BlogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    author_id: Optional[int] = None
    category_id: Optional[int] = None
    title: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    images: List[str] = []
    tags: List[str] = []
    status: ApprovalStatus
    published: bool
    published_at: Optional[datetime] = None
    views: int
    read_time: int
    created_at: datetime
