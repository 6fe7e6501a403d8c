"""Tests for RequestContextMiddleware (contextvars set during the request, cleared after)."""

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware import RequestContextMiddleware
from app.shared.context import get_request_context


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/ctx")
    async def ctx() -> dict:
        current = get_request_context()
        return {
            "request_id": current.request_id,
            "ip_address": current.ip_address,
            "user_agent": current.user_agent,
        }

    return app


async def test_context_is_visible_inside_route() -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get(
            "/ctx",
            headers={
                "X-Request-ID": "req-42",
                "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
                "User-Agent": "workshop-tests",
            },
        )
    assert response.json() == {
        "request_id": "req-42",
        "ip_address": "203.0.113.7",
        "user_agent": "workshop-tests",
    }
    assert response.headers["X-Request-ID"] == "req-42"


async def test_missing_request_id_is_generated() -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/ctx")
    generated = response.json()["request_id"]
    assert generated
    assert response.headers["X-Request-ID"] == generated
