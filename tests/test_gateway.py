import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import httpx
import pytest

from fakes import FakeBackend, make_gateway, make_session
from storefront.errors import ApiError
from storefront.session import Session


@pytest.mark.asyncio
async def test_read_is_unwrapped_and_carries_bearer_token():
    backend = FakeBackend({("GET", "/orders"): (200, {"success": True, "data": [{"_id": "o1"}]})})
    async with make_gateway(backend) as api:
        orders = await api.orders.list_all()

    assert orders == [{"_id": "o1"}]
    assert backend.requests[0].headers["Authorization"] == "Bearer tok-123"


@pytest.mark.asyncio
async def test_missing_token_sends_no_authorization_header():
    backend = FakeBackend({("GET", "/products"): (200, [])})
    async with make_gateway(backend, session=Session()) as api:
        assert await api.products.list() == []

    assert "Authorization" not in backend.requests[0].headers


@pytest.mark.asyncio
async def test_logout_takes_effect_on_next_call():
    backend = FakeBackend({("GET", "/products"): (200, [])})
    session = make_session()
    async with make_gateway(backend, session=session) as api:
        await api.products.list()
        session.logout()
        await api.products.list()

    assert "Authorization" in backend.requests[0].headers
    assert "Authorization" not in backend.requests[1].headers


@pytest.mark.asyncio
async def test_product_list_params():
    backend = FakeBackend({("GET", "/products"): (200, {"success": True, "data": []})})
    async with make_gateway(backend) as api:
        await api.products.list(category="Books", sort="price")
        await api.products.list()

    first, second = backend.requests
    assert first.url.params["category"] == "Books"
    assert first.url.params["sort"] == "price"
    assert first.url.params["order"] == "asc"
    assert not second.url.params


@pytest.mark.asyncio
async def test_count_endpoint_returns_number():
    backend = FakeBackend(
        {("GET", "/analytics/products/count"): (200, {"success": True, "count": 12})}
    )
    async with make_gateway(backend) as api:
        assert await api.analytics.product_count() == 12


@pytest.mark.asyncio
async def test_status_update_and_process_paths():
    backend = FakeBackend(
        {
            ("PATCH", "/orders/o1/status"): (200, {"success": True, "data": {"status": "Shipped"}}),
            ("PATCH", "/payments/pay1/process"): (200, {"success": True, "data": {"status": "Completed"}}),
        }
    )
    async with make_gateway(backend) as api:
        assert await api.orders.update_status("o1", "Shipped") == {"status": "Shipped"}
        assert await api.payments.process("pay1") == {"status": "Completed"}

    assert FakeBackend.body_of(backend.requests[0]) == {"status": "Shipped"}


@pytest.mark.asyncio
async def test_daily_revenue_params():
    backend = FakeBackend({("GET", "/analytics/payments/daily"): (200, [])})
    async with make_gateway(backend) as api:
        await api.analytics.daily_revenue("2025-01-01", "2025-01-31")

    params = backend.requests[0].url.params
    assert params["startDate"] == "2025-01-01"
    assert params["endDate"] == "2025-01-31"


@pytest.mark.asyncio
async def test_non_2xx_carries_backend_message():
    backend = FakeBackend(
        {("POST", "/orders"): (400, {"success": False, "message": "Insufficient stock"})}
    )
    async with make_gateway(backend) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.orders.create({})

    err = exc_info.value
    assert err.status_code == 400
    assert err.backend_message == "Insufficient stock"
    assert str(err) == "Insufficient stock"


@pytest.mark.asyncio
async def test_non_2xx_without_message_uses_generic_text():
    backend = FakeBackend({("DELETE", "/orders/o1"): (500, "Internal Server Error")})
    async with make_gateway(backend) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.orders.cancel("o1")

    assert exc_info.value.backend_message is None
    assert "500" in exc_info.value.message


@pytest.mark.asyncio
async def test_malformed_json_is_an_api_error():
    backend = FakeBackend({("GET", "/payments"): (200, "{not json")})
    async with make_gateway(backend) as api:
        with pytest.raises(ApiError):
            await api.payments.list_all()


@pytest.mark.asyncio
async def test_network_failure_is_an_api_error():
    backend = FakeBackend({("GET", "/payments"): (0, httpx.ConnectError("connection refused"))})
    async with make_gateway(backend) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.payments.list_all()

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_empty_success_body_is_none():
    backend = FakeBackend({("DELETE", "/products/p1"): (204, b"")})
    async with make_gateway(backend) as api:
        assert await api.products.delete("p1") is None
