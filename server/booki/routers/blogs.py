"""Blog router."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AdminUser, AgencyStaff, OptionalUser
from ..models.user import User
from ..schemas.blog import BlogOut, CategoryOut, CreateBlogRequest, CreateCategoryRequest, UpdateBlogRequest
from ..schemas.common import MessageResponse
from ..services.blog_service import BlogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/blogs", tags=["blogs"])


@router.get("/categories", response_model=List[CategoryOut])
async def list_categories(db: AsyncSession = DB_DEPENDENCY) -> List[CategoryOut]:
    categories = await BlogService(db).list_categories()
    return [CategoryOut.model_validate(c) for c in categories]


@router.post("/categories", response_model=CategoryOut, status_code=201)
async def create_category(
    request: CreateCategoryRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> CategoryOut:
    category = await BlogService(db).create_category(request)
    return CategoryOut.model_validate(category)


@router.get("", response_model=List[BlogOut])
async def list_blogs(
    category_id: Optional[int] = None,
    search: Optional[str] = Query(None, max_length=255),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = DB_DEPENDENCY,
) -> List[BlogOut]:
    """Published posts, newest first."""
    blogs = await BlogService(db).list_public(category_id, search, limit, offset)
    return [BlogOut.model_validate(b) for b in blogs]


@router.get("/mine", response_model=List[BlogOut])
async def list_my_blogs(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[BlogOut]:
    blogs = await BlogService(db).list_agency_blogs(user)
    return [BlogOut.model_validate(b) for b in blogs]


@router.get("/{blog_id}", response_model=BlogOut)
async def get_blog(
    blog_id: int,
    viewer: Optional[User] = OptionalUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> BlogOut:
    """Read a post; each public read counts as a view."""
    blog = await BlogService(db).view_blog(blog_id, viewer)
    return BlogOut.model_validate(blog)


@router.get("/{blog_id}/related", response_model=List[BlogOut])
async def related_blogs(
    blog_id: int,
    limit: int = Query(3, ge=1, le=10),
    db: AsyncSession = DB_DEPENDENCY,
) -> List[BlogOut]:
    blogs = await BlogService(db).related_blogs(blog_id, limit)
    return [BlogOut.model_validate(b) for b in blogs]


@router.post("", response_model=BlogOut, status_code=201)
async def create_blog(
    request: CreateBlogRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> BlogOut:
    blog = await BlogService(db).create_blog(user, request)
    return BlogOut.model_validate(blog)


@router.patch("/{blog_id}", response_model=BlogOut)
async def update_blog(
    blog_id: int,
    request: UpdateBlogRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> BlogOut:
    blog = await BlogService(db).update_blog(user, blog_id, request)
    return BlogOut.model_validate(blog)


@router.delete("/{blog_id}", response_model=MessageResponse)
async def delete_blog(blog_id: int, user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await BlogService(db).delete_blog(user, blog_id)
    return MessageResponse(message=f"Blog {blog_id} deleted")
