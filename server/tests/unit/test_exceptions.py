"""Unit tests for Problem Details rendering."""

import pytest
from httpx import ASGITransport, AsyncClient

from booki.core.exceptions import InternalServerError, NotFoundError


@pytest.mark.asyncio
async def test_unhandled_errors_become_internal_server_problems(test_app):
    @test_app.get("/v1/broken")
    async def broken():
        raise RuntimeError("database exploded")

    # The server error middleware re-raises after responding
    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/v1/broken")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["title"] == "Internal Server Error"
    assert body["instance"] == "/v1/broken"
    assert body["error_id"]
    assert "database exploded" not in response.text


def test_internal_server_error_carries_an_error_id():
    error = InternalServerError(error_id="err-1", instance="/v1/trips")

    assert error.status_code == 500
    assert error.problem_details["error_id"] == "err-1"
    assert error.problem_details["instance"] == "/v1/trips"
    assert InternalServerError().problem_details["error_id"] != InternalServerError().problem_details["error_id"]


def test_not_found_names_the_resource():
    error = NotFoundError("trip", 42)

    assert error.status_code == 404
    assert "42" in error.problem_details["detail"]
