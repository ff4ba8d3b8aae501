"""Agency blog posts and categories."""

import logging
import math
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.blog import Blog, BlogCategory
from ..models.user import User
from ..schemas.blog import CreateBlogRequest, CreateCategoryRequest, UpdateBlogRequest
from .agency_service import AgencyService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200


def estimate_read_time(content: str) -> int:
    """Minutes needed to read ``content``, at least one."""
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


class BlogService:
    """Service for blog operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)
        self.notifications = NotificationService(db)

    # Categories

    async def create_category(self, request: CreateCategoryRequest) -> BlogCategory:
        existing = await self.db.scalar(
            select(BlogCategory.id).where(func.lower(BlogCategory.name) == request.name.lower())
        )
        if existing is not None:
            raise ConflictError(
                detail=f"Category '{request.name}' already exists",
                conflicting_resource={"type": "blog_category", "id": str(existing)},
            )
        category = BlogCategory(name=request.name, description=request.description)
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def list_categories(self) -> list[BlogCategory]:
        result = await self.db.execute(select(BlogCategory).order_by(BlogCategory.name))
        return list(result.scalars().all())

    async def _ensure_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and await self.db.get(BlogCategory, category_id) is None:
            raise ValidationError(f"Unknown blog category {category_id}")

    # Posts

    async def get_blog_or_raise(self, blog_id: int) -> Blog:
        blog = await self.db.get(Blog, blog_id)
        if blog is None:
            raise NotFoundError("blog", blog_id)
        return blog

    async def get_managed_blog(self, user: User, blog_id: int) -> Blog:
        blog = await self.get_blog_or_raise(blog_id)
        await self.agencies.ensure_staff_of(user, blog.agency_id)
        return blog

    async def create_blog(self, user: User, request: CreateBlogRequest) -> Blog:
        """Write a post for the caller's agency; it is hidden until approved."""
        agency = await self.agencies.get_agency_for_user(user)
        await self._ensure_category(request.category_id)

        blog = Blog(
            agency_id=agency.id,
            author_id=user.id,
            status=ApprovalStatus.PENDING,
            published=False,
            read_time=estimate_read_time(request.content),
            **request.model_dump(),
        )
        self.db.add(blog)
        await self.db.flush()

        await self.notifications.notify_admins(
            title="Blog awaiting approval",
            message=f"{agency.agency_name} submitted the post \"{blog.title}\"",
            related_item_type="blog",
            related_item_id=blog.id,
        )
        await self.db.commit()
        await self.db.refresh(blog)
        logger.info("Blog created", extra={"blog_id": blog.id, "agency_id": agency.id})
        return blog

    async def update_blog(self, user: User, blog_id: int, request: UpdateBlogRequest) -> Blog:
        """Edit a post; it is unpublished until approved again."""
        blog = await self.get_managed_blog(user, blog_id)
        data = request.model_dump(exclude_unset=True)
        if "category_id" in data:
            await self._ensure_category(data["category_id"])

        for field, value in data.items():
            setattr(blog, field, value)
        if "content" in data:
            blog.read_time = estimate_read_time(blog.content)

        blog.status = ApprovalStatus.PENDING
        blog.published = False
        await self.notifications.notify_admins(
            title="Blog updated",
            message=f"The post \"{blog.title}\" was edited and awaits approval",
            related_item_type="blog",
            related_item_id=blog.id,
        )
        await self.db.commit()
        await self.db.refresh(blog)
        return blog

    async def delete_blog(self, user: User, blog_id: int) -> None:
        blog = await self.get_managed_blog(user, blog_id)
        await self.db.delete(blog)
        await self.db.commit()
        logger.info("Blog deleted", extra={"blog_id": blog_id})

    async def list_public(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Blog]:
        query = select(Blog).where(Blog.status == ApprovalStatus.APPROVED, Blog.published.is_(True))
        if category_id is not None:
            query = query.where(Blog.category_id == category_id)
        if search:
            query = query.where(func.lower(Blog.title).like(f"%{search.lower()}%"))
        query = query.order_by(Blog.published_at.desc(), Blog.id.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_agency_blogs(self, user: User) -> list[Blog]:
        agency = await self.agencies.get_agency_for_user(user)
        result = await self.db.execute(
            select(Blog).where(Blog.agency_id == agency.id).order_by(Blog.created_at.desc(), Blog.id.desc())
        )
        return list(result.scalars().all())

    async def view_blog(self, blog_id: int, viewer: Optional[User] = None) -> Blog:
        """
        Read a post and count the view.

        Unpublished posts are only visible to their agency and admins, and
        those views are not counted.
        """
        blog = await self.get_blog_or_raise(blog_id)
        if blog.status == ApprovalStatus.APPROVED and blog.published:
            await self.db.execute(update(Blog).where(Blog.id == blog.id).values(views=Blog.views + 1))
            await self.db.commit()
            await self.db.refresh(blog)
            return blog

        if viewer is None:
            raise NotFoundError("blog", blog_id)
        try:
            await self.agencies.ensure_staff_of(viewer, blog.agency_id)
        except AuthorizationError:
            raise NotFoundError("blog", blog_id)
        return blog

    async def related_blogs(self, blog_id: int, limit: int = 3) -> list[Blog]:
        """Newest published posts of the same category."""
        blog = await self.get_blog_or_raise(blog_id)
        if blog.category_id is None:
            return []
        result = await self.db.execute(
            select(Blog)
            .where(
                Blog.category_id == blog.category_id,
                Blog.id != blog.id,
                Blog.status == ApprovalStatus.APPROVED,
                Blog.published.is_(True),
            )
            .order_by(Blog.published_at.desc(), Blog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
