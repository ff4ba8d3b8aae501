"""Unit tests for chat, favorites and notifications."""

import pytest

from booki.core.exceptions import NotFoundError, ValidationError
from booki.models import UserRole
from booki.schemas.chat import SendMessageRequest
from booki.services.chat_service import ChatService
from booki.services.favorite_service import FavoriteService
from booki.services.notification_service import NotificationService


def _message(receiver, content="Is the trip suitable for kids?", post_id=1, post_type="trip"):
    return SendMessageRequest(post_id=post_id, post_type=post_type, receiver_id=receiver.id, content=content)


# Chat


@pytest.mark.asyncio
async def test_conversation_is_visible_to_both_sides(test_session, customer, agency_owner, make_user):
    service = ChatService(test_session)
    await service.send_message(customer, _message(agency_owner))
    await service.send_message(agency_owner, _message(customer, content="Yes, from 6 years old"))
    outsider = await make_user(email="outsider@example.com")

    for user in (customer, agency_owner):
        messages = await service.list_post_messages(user, "trip", 1)
        assert [m.content for m in messages] == ["Is the trip suitable for kids?", "Yes, from 6 years old"]
    assert await service.list_post_messages(outsider, "trip", 1) == []


@pytest.mark.asyncio
async def test_mark_read_clears_unread_for_that_post(test_session, customer, agency_owner):
    service = ChatService(test_session)
    await service.send_message(customer, _message(agency_owner))
    await service.send_message(customer, _message(agency_owner, post_id=2))
    assert await service.unread_count(agency_owner) == 2

    marked = await service.mark_read(agency_owner, "trip", 1)

    assert marked == 1
    assert await service.unread_count(agency_owner) == 1
    assert await service.unread_count(customer) == 0


@pytest.mark.asyncio
async def test_cannot_message_yourself(test_session, customer):
    with pytest.raises(ValidationError):
        await ChatService(test_session).send_message(customer, _message(customer))


@pytest.mark.asyncio
async def test_unknown_receiver(test_session, customer):
    request = SendMessageRequest(post_id=1, post_type="car", receiver_id=9999, content="Hello")
    with pytest.raises(NotFoundError):
        await ChatService(test_session).send_message(customer, request)


@pytest.mark.asyncio
async def test_chat_api_round_trip(test_client, customer, agency_owner, login_headers):
    customer_headers = await login_headers(customer)
    owner_headers = await login_headers(agency_owner)

    response = await test_client.post(
        "/v1/chat/messages",
        json={"post_id": 3, "post_type": "hotel", "receiver_id": agency_owner.id, "content": "Late check-in?"},
        headers=customer_headers,
    )
    assert response.status_code == 201

    response = await test_client.get("/v1/chat/unread-count", headers=owner_headers)
    assert response.json() == {"count": 1}

    response = await test_client.post("/v1/chat/messages/hotel/3/read", headers=owner_headers)
    assert response.json() == {"count": 0}


# Favorites


@pytest.mark.asyncio
async def test_toggle_adds_then_removes(test_session, customer, trip):
    service = FavoriteService(test_session)

    added = await service.toggle(customer, "trip", trip.id)
    assert added.is_favorite is True
    assert (await service.check(customer, "trip", trip.id)).is_favorite is True

    removed = await service.toggle(customer, "trip", trip.id)
    assert removed.is_favorite is False
    assert await service.list_favorites(customer) == []


@pytest.mark.asyncio
async def test_favorites_filter_by_type(test_session, customer, trip, car):
    service = FavoriteService(test_session)
    await service.toggle(customer, "trip", trip.id)
    await service.toggle(customer, "car", car.id)

    assert len(await service.list_favorites(customer)) == 2
    cars = await service.list_favorites(customer, "car")
    assert [(f.item_type, f.item_id) for f in cars] == [("car", car.id)]


@pytest.mark.asyncio
async def test_favorite_of_missing_item(test_session, customer):
    with pytest.raises(NotFoundError):
        await FavoriteService(test_session).toggle(customer, "hotel", 404)


# Notifications


@pytest.mark.asyncio
async def test_employees_share_the_owner_inbox(test_session, agency, agency_owner, agency_employee):
    service = NotificationService(test_session)
    await service.notify_agency(agency.id, "Trip approved", "Your trip was approved")
    await test_session.commit()

    assert await service.unread_count(agency_owner) == 1
    assert await service.unread_count(agency_employee) == 1
    [notification] = await service.list_for_user(agency_employee)

    await service.mark_read(agency_employee, notification.id)

    assert await service.unread_count(agency_owner) == 0


@pytest.mark.asyncio
async def test_admin_notifications_reach_every_admin(test_session, admin, make_user, customer):
    other_admin = await make_user(UserRole.ADMIN, email="second-admin@example.com")
    service = NotificationService(test_session)
    await service.notify_admins("New agency", "Atlas Voyages registered")
    await test_session.commit()

    assert await service.unread_count(admin) == 1
    assert await service.unread_count(other_admin) == 1
    assert await service.unread_count(customer) == 0


@pytest.mark.asyncio
async def test_cannot_read_someone_elses_notification(test_session, customer, make_user):
    service = NotificationService(test_session)
    notification = await service.notify_user(customer.id, "Payment received", "Thanks")
    await test_session.commit()
    stranger = await make_user(email="stranger@example.com")

    with pytest.raises(NotFoundError):
        await service.mark_read(stranger, notification.id)


@pytest.mark.asyncio
async def test_notifications_api(test_client, test_session, customer, login_headers):
    service = NotificationService(test_session)
    for title in ("One", "Two"):
        await service.notify_user(customer.id, title, "body")
    await test_session.commit()
    headers = await login_headers(customer)

    response = await test_client.get("/v1/notifications", headers=headers)
    body = response.json()
    assert body["unread"] == 2
    assert [n["title"] for n in body["notifications"]] == ["Two", "One"]

    response = await test_client.post("/v1/notifications/read-all", headers=headers)
    assert response.status_code == 200
    response = await test_client.get("/v1/notifications/unread-count", headers=headers)
    assert response.json() == {"count": 0}
