"""Unit tests for admin approvals and the agency blog."""

import pytest
from sqlalchemy import select

from booki.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from booki.models import ApprovalStatus, Notification, UserRole
from booki.schemas.blog import CreateBlogRequest, CreateCategoryRequest, UpdateBlogRequest
from booki.services.approval_service import ApprovalService
from booki.services.blog_service import BlogService, estimate_read_time


@pytest.mark.parametrize(
    "words,minutes",
    [(0, 1), (1, 1), (200, 1), (201, 2), (1000, 5)],
)
def test_estimate_read_time(words, minutes):
    assert estimate_read_time(" ".join(["word"] * words)) == minutes


async def _write_post(session, author, **kwargs):
    request = CreateBlogRequest(
        title=kwargs.pop("title", "Ten days in the Sahara"),
        content=kwargs.pop("content", "dunes " * 450),
        **kwargs,
    )
    return await BlogService(session).create_blog(author, request)


# Approvals


@pytest.mark.asyncio
async def test_rejected_trip_is_taken_off_sale(test_session, trip, email_service, agency):
    item = await ApprovalService(test_session).decide("trip", trip.id, False, email_service, "Missing itinerary")

    assert item.status == ApprovalStatus.REJECTED
    assert item.is_available is False
    assert email_service.sent[0]["to"] == agency.contact_email


@pytest.mark.asyncio
async def test_approval_notifies_agency_owner(test_session, car, agency_owner, email_service):
    car.status = ApprovalStatus.PENDING
    await test_session.commit()

    item = await ApprovalService(test_session).decide("car", car.id, True, email_service)

    assert item.status == ApprovalStatus.APPROVED
    titles = (
        await test_session.execute(select(Notification.title).where(Notification.user_id == agency_owner.id))
    ).scalars().all()
    assert "Car approved" in titles


@pytest.mark.asyncio
async def test_pending_items_are_listed_oldest_first(test_session, trip, car):
    car.status = ApprovalStatus.PENDING
    await test_session.commit()
    service = ApprovalService(test_session)

    assert [c.id for c in await service.list_pending("car")] == [car.id]
    assert await service.list_pending("trip") == []


@pytest.mark.asyncio
async def test_unknown_item_is_not_found(test_session, email_service):
    with pytest.raises(NotFoundError):
        await ApprovalService(test_session).decide("hotel", 999, True, email_service)


@pytest.mark.asyncio
async def test_approvals_api_is_admin_only(test_client, agency_owner, admin, trip, login_headers):
    path = f"/v1/admin/approvals/trip/{trip.id}/reject"

    response = await test_client.post(path, json={"reason": "no"}, headers=await login_headers(agency_owner))
    assert response.status_code == 403

    response = await test_client.post(path, json={"reason": "Blurry photos"}, headers=await login_headers(admin))
    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    assert response.json()["is_available"] is False


# Blog


@pytest.mark.asyncio
async def test_new_post_awaits_approval(test_session, agency_owner, agency):
    blog = await _write_post(test_session, agency_owner)

    assert blog.status == ApprovalStatus.PENDING
    assert blog.published is False
    assert blog.read_time == 3
    assert blog.agency_id == agency.id
    assert await BlogService(test_session).list_public() == []


@pytest.mark.asyncio
async def test_approved_post_is_published(test_session, agency_owner, agency, email_service):
    blog = await _write_post(test_session, agency_owner)

    approved = await ApprovalService(test_session).decide("blog", blog.id, True, email_service)

    assert approved.published is True
    assert approved.published_at is not None
    assert [b.id for b in await BlogService(test_session).list_public()] == [blog.id]


@pytest.mark.asyncio
async def test_views_count_only_published_posts(test_session, agency_owner, agency, customer, email_service):
    blog = await _write_post(test_session, agency_owner)
    service = BlogService(test_session)

    staff_view = await service.view_blog(blog.id, agency_owner)
    assert staff_view.views == 0

    await ApprovalService(test_session).decide("blog", blog.id, True, email_service)
    await service.view_blog(blog.id)
    viewed = await service.view_blog(blog.id, customer)

    assert viewed.views == 2


@pytest.mark.asyncio
async def test_unpublished_post_is_hidden_from_outsiders(test_session, agency_owner, agency, customer):
    blog = await _write_post(test_session, agency_owner)
    service = BlogService(test_session)

    with pytest.raises(NotFoundError):
        await service.view_blog(blog.id)
    with pytest.raises(NotFoundError):
        await service.view_blog(blog.id, customer)


@pytest.mark.asyncio
async def test_unpublished_post_api_returns_404(test_client, test_session, agency_owner, agency):
    blog = await _write_post(test_session, agency_owner)

    response = await test_client.get(f"/v1/blogs/{blog.id}")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")


@pytest.mark.asyncio
async def test_edit_sends_post_back_to_review(test_session, agency_owner, agency, email_service):
    blog = await _write_post(test_session, agency_owner)
    await ApprovalService(test_session).decide("blog", blog.id, True, email_service)

    edited = await BlogService(test_session).update_blog(
        agency_owner, blog.id, UpdateBlogRequest(content="short and sweet")
    )

    assert edited.status == ApprovalStatus.PENDING
    assert edited.published is False
    assert edited.read_time == 1


@pytest.mark.asyncio
async def test_categories_are_unique(test_session):
    service = BlogService(test_session)
    await service.create_category(CreateCategoryRequest(name="Culture"))

    with pytest.raises(ConflictError):
        await service.create_category(CreateCategoryRequest(name="culture"))


@pytest.mark.asyncio
async def test_unknown_category_is_rejected(test_session, agency_owner, agency):
    with pytest.raises(ValidationError):
        await _write_post(test_session, agency_owner, category_id=42)


@pytest.mark.asyncio
async def test_related_posts_share_the_category(test_session, agency_owner, agency, email_service):
    category = await BlogService(test_session).create_category(CreateCategoryRequest(name="Destinations"))
    first = await _write_post(test_session, agency_owner, title="Tozeur", category_id=category.id)
    second = await _write_post(test_session, agency_owner, title="Tabarka", category_id=category.id)
    other = await _write_post(test_session, agency_owner, title="Packing tips")
    approvals = ApprovalService(test_session)
    for blog in (first, second, other):
        await approvals.decide("blog", blog.id, True, email_service)

    related = await BlogService(test_session).related_blogs(first.id)

    assert [b.id for b in related] == [second.id]


@pytest.mark.asyncio
async def test_other_agencies_cannot_edit(test_session, agency_owner, agency, make_user, make_agency):
    blog = await _write_post(test_session, agency_owner)
    rival = await make_user(UserRole.AGENCY_OWNER, email="rival@agency.example.com")
    await make_agency(rival)

    with pytest.raises(AuthorizationError):
        await BlogService(test_session).update_blog(rival, blog.id, UpdateBlogRequest(title="Mine now"))
