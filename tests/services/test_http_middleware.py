"""HTTP middleware — rate limit, body size limit, security headers, CORS."""

import json

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from caramel.main import create_app
from caramel.models import Order


@pytest.fixture
def limited_settings(settings):
    return settings.model_copy(update={
        "rate_limit_max_requests": 3,
        "rate_limit_window_seconds": 900,
        "max_request_body_bytes": 256,
    })


@pytest.fixture
async def limited_client(limited_settings, db):
    app = create_app(limited_settings)
    app.state.db = db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


async def test_requests_beyond_quota_are_rejected(limited_client):
    statuses = [
        (await limited_client.get("/api/health")).status_code
        for _ in range(3)
    ]
    assert statuses == [200, 200, 200]

    res = await limited_client.get("/api/health")
    assert res.status_code == 429
    assert res.json()["success"] is False
    assert res.json()["error"] == "Too many requests from this IP"
    assert int(res.headers["retry-after"]) > 0
    assert res.headers["x-ratelimit-remaining"] == "0"


async def test_quota_is_shared_across_api_paths(limited_client):
    await limited_client.get("/api/health")
    await limited_client.get("/api/settings")
    await limited_client.get("/api/nonexistent")
    res = await limited_client.get("/api/categories")
    assert res.status_code == 429


async def test_paths_outside_api_are_not_limited(limited_client):
    for _ in range(5):
        res = await limited_client.get("/")
        assert res.status_code == 200


async def test_accepted_requests_report_remaining_quota(limited_client):
    res = await limited_client.get("/api/health")
    assert res.headers["x-ratelimit-limit"] == "3"
    assert res.headers["x-ratelimit-remaining"] == "2"


async def test_oversized_body_is_413(limited_client):
    res = await limited_client.post(
        "/api/orders", json={"notes": "x" * 1000, "items": []},
    )
    assert res.status_code == 413
    assert res.json()["error"] == "Request body too large"


async def test_security_headers_present(client):
    res = await client.get("/")
    assert res.headers["x-content-type-options"] == "nosniff"
    assert res.headers["x-frame-options"] == "SAMEORIGIN"
    assert "default-src 'self'" in res.headers["content-security-policy"]
    assert res.headers["referrer-policy"] == "no-referrer"


async def test_security_headers_on_error_responses(client):
    res = await client.get("/api/nonexistent")
    assert res.status_code == 404
    assert res.headers["x-content-type-options"] == "nosniff"


async def test_cors_preflight_allows_configured_origin(client):
    res = await client.options(
        "/api/products",
        headers={
            "Origin": "https://shop.example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "*"


async def test_cors_restricted_origin(settings, db):
    app = create_app(settings.model_copy(
        update={"cors_origin": "https://caramel.example.com"},
    ))
    app.state.db = db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        res = await c.get("/", headers={"Origin": "https://caramel.example.com"})
    assert res.headers["access-control-allow-origin"] == "https://caramel.example.com"


def _client_from(app, peer):
    return AsyncClient(
        transport=ASGITransport(app=app, client=(peer, 40000)),
        base_url="http://test",
    )


async def test_forwarded_for_from_untrusted_peer_is_ignored(limited_settings, db):
    app = create_app(limited_settings)
    app.state.db = db
    async with _client_from(app, "203.0.113.7") as c:
        statuses = [
            (await c.get(
                "/api/health", headers={"X-Forwarded-For": f"10.0.0.{i}"},
            )).status_code
            for i in range(10)
        ]
    assert statuses[:3] == [200, 200, 200]
    assert set(statuses[3:]) == {429}


async def test_forwarded_for_from_trusted_proxy_keys_each_client(
    limited_settings, db,
):
    app = create_app(limited_settings)
    app.state.db = db
    async with _client_from(app, "127.0.0.1") as c:
        alice = [
            (await c.get(
                "/api/health", headers={"X-Forwarded-For": "198.51.100.1"},
            )).status_code
            for _ in range(4)
        ]
        bob = await c.get(
            "/api/health", headers={"X-Forwarded-For": "198.51.100.2"},
        )
    assert alice == [200, 200, 200, 429]
    assert bob.status_code == 200


async def _in_chunks(payload: bytes, size: int = 64):
    for start in range(0, len(payload), size):
        yield payload[start:start + size]


async def test_chunked_body_over_limit_is_413(limited_client, test_db):
    payload = json.dumps({
        "customer": {"name": "Anna", "phone": "+79000000001"},
        "items": [{"id": 1, "name": "Honey Cake", "quantity": 1, "price": 12.5}],
        "notes": "x" * 4000,
    }).encode()
    res = await limited_client.post(
        "/api/orders",
        content=_in_chunks(payload),
        headers={"Content-Type": "application/json"},
    )

    assert "content-length" not in res.request.headers
    assert res.status_code == 413
    assert res.json()["error"] == "Request body too large"
    orders = await test_db.execute(select(func.count()).select_from(Order))
    assert orders.scalar_one() == 0


async def test_chunked_body_within_limit_reaches_route(limited_client):
    res = await limited_client.post(
        "/api/orders",
        content=_in_chunks(b'{"items": []}', size=4),
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Order must contain items"


async def test_invalid_content_length_is_400(limited_client):
    res = await limited_client.post(
        "/api/orders",
        content=b"{}",
        headers={"Content-Type": "application/json", "Content-Length": "abc"},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid Content-Length header"
