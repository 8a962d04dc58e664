"""Асинхронный HTTP-шлюз к бэкенду магазина.

Каждый ответ проходит через декодер конверта до того, как попасть к вызывающему.
Любой сбой (сеть, не-2xx статус, битый JSON) превращается в одну ApiError.
Повторов и кэша нет.
"""

import logging
from typing import Any, Optional

import httpx

from .config import Settings, load_settings
from .envelope import unwrap
from .errors import ApiError
from .session import Session

logger = logging.getLogger(__name__)


def _handle_response(response: httpx.Response) -> Any:
    """Разбор ответа бэкенда: 2xx -> распакованный payload, иначе ApiError"""
    if response.is_success:
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            logger.warning(
                "Malformed JSON from %s %s", response.request.method, response.request.url
            )
            raise ApiError(
                "Malformed response from server", status_code=response.status_code
            ) from e
        return unwrap(body)

    payload: Any = None
    backend_message: Optional[str] = None
    try:
        payload = response.json()
    except ValueError:
        payload = response.text or None
    if isinstance(payload, dict) and payload.get("message"):
        backend_message = str(payload["message"])

    logger.warning(
        "Shop API %s %s failed with %s: %s",
        response.request.method,
        response.request.url,
        response.status_code,
        backend_message or "no message",
    )
    raise ApiError(
        backend_message or f"Request failed with status code {response.status_code}",
        status_code=response.status_code,
        payload=payload,
        backend_message=backend_message,
    )


def _clean(params: Optional[dict]) -> Optional[dict]:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None and v != ""}


class ApiGateway:
    """По группе операций на сущность, все на одном httpx.AsyncClient.

    Использование:
        async with ApiGateway(session) as api:
            products = await api.products.list(category="Books")
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session if session is not None else Session()
        self.settings = settings or load_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self.auth = AuthAPI(self)
        self.products = ProductsAPI(self)
        self.orders = OrdersAPI(self)
        self.payments = PaymentsAPI(self)
        self.analytics = AnalyticsAPI(self)

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> Any:
        """Отправляет запрос и возвращает распакованный payload.

        Raises:
            ApiError: сбой сети, не-2xx статус или битый JSON
        """
        # токен читается на каждый вызов: login/logout действуют сразу
        headers = self.session.auth_headers()
        logger.debug("Shop API %s %s params=%s", method, path, params)
        try:
            response = await self._client.request(
                method, path, params=_clean(params), json=json, headers=headers
            )
        except httpx.RequestError as e:
            logger.error("Shop API unavailable: %s", e)
            raise ApiError(str(e) or "Network error") from e
        return _handle_response(response)

    async def get(self, path: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


class _Group:
    def __init__(self, gateway: ApiGateway):
        self._api = gateway


class AuthAPI(_Group):
    async def register(self, user_data: dict) -> Any:
        return await self._api.post("/auth/register", user_data)

    async def login(self, credentials: dict) -> Any:
        return await self._api.post("/auth/login", credentials)


class ProductsAPI(_Group):
    async def list(
        self,
        category: Optional[str] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> Any:
        params = {"category": category, "sort": sort}
        if sort:
            params["order"] = order or "asc"
        return await self._api.get("/products", params)

    async def get(self, product_id: str) -> Any:
        return await self._api.get(f"/products/{product_id}")

    async def search(self, query: str) -> Any:
        return await self._api.get("/products/search", {"q": query})

    async def low_stock(self, threshold: int) -> Any:
        return await self._api.get("/products/low-stock", {"threshold": threshold})

    async def create(self, product_data: dict) -> Any:
        return await self._api.post("/products", product_data)

    async def update(self, product_id: str, product_data: dict) -> Any:
        return await self._api.put(f"/products/{product_id}", product_data)

    async def delete(self, product_id: str) -> Any:
        return await self._api.delete(f"/products/{product_id}")


class OrdersAPI(_Group):
    async def list_all(self) -> Any:
        return await self._api.get("/orders")

    async def get(self, order_id: str) -> Any:
        return await self._api.get(f"/orders/{order_id}")

    async def by_customer_email(self, email: str) -> Any:
        return await self._api.get(f"/orders/customer/{email}")

    async def create(self, order_data: dict) -> Any:
        return await self._api.post("/orders", order_data)

    async def update_status(self, order_id: str, status: str) -> Any:
        return await self._api.patch(f"/orders/{order_id}/status", {"status": status})

    async def cancel(self, order_id: str) -> Any:
        return await self._api.delete(f"/orders/{order_id}")


class PaymentsAPI(_Group):
    async def list_all(self) -> Any:
        return await self._api.get("/payments")

    async def get(self, payment_id: str) -> Any:
        return await self._api.get(f"/payments/{payment_id}")

    async def by_order_id(self, order_id: str) -> Any:
        return await self._api.get(f"/payments/order/{order_id}")

    async def by_status(self, status: str) -> Any:
        return await self._api.get(f"/payments/status/{status}")

    async def create(self, payment_data: dict) -> Any:
        return await self._api.post("/payments", payment_data)

    async def process(self, payment_id: str) -> Any:
        return await self._api.patch(f"/payments/{payment_id}/process")


class AnalyticsAPI(_Group):
    async def product_count(self) -> Any:
        return await self._api.get("/analytics/products/count")

    async def products_by_category(self) -> Any:
        return await self._api.get("/analytics/products/by-category")

    async def inventory_value(self) -> Any:
        return await self._api.get("/analytics/products/value")

    async def order_stats(self) -> Any:
        return await self._api.get("/analytics/orders/stats")

    async def orders_by_status(self) -> Any:
        return await self._api.get("/analytics/orders/by-status")

    async def recent_orders(self) -> Any:
        return await self._api.get("/analytics/orders/recent")

    async def top_products(self) -> Any:
        return await self._api.get("/analytics/orders/top-products")

    async def payments_by_method(self) -> Any:
        return await self._api.get("/analytics/payments/by-method")

    async def payment_success_rate(self) -> Any:
        return await self._api.get("/analytics/payments/success-rate")

    async def revenue_by_status(self) -> Any:
        return await self._api.get("/analytics/payments/revenue")

    async def daily_revenue(self, start_date: str, end_date: str) -> Any:
        return await self._api.get(
            "/analytics/payments/daily",
            {"startDate": start_date, "endDate": end_date},
        )
