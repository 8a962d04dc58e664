import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from Analytics_Service.report import breakdown_rows, build_snapshot
from .domain import AnalyticsSnapshot
from .errors import ApiError, OperationFailed
from .ftypes import Either
from .gateway import ApiGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============ Дашборд: параллельная загрузка ============


class AnalyticsAggregator:
    """
    Пять независимых запросов выполняются одновременно.
    Кривые или пустые поля получают значения по умолчанию,
    но отказ любого запроса валит весь снимок целиком:
    частичного дашборда не бывает.
    """

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway
        self.snapshot: Optional[AnalyticsSnapshot] = None
        self.error: Optional[OperationFailed] = None

    async def load(self) -> Either:
        api = self.gateway
        try:
            (
                raw_products,
                raw_order_stats,
                raw_payment_stats,
                raw_orders,
                raw_payments,
            ) = await asyncio.gather(
                api.analytics.product_count(),
                api.analytics.order_stats(),
                api.analytics.payment_success_rate(),
                api.orders.list_all(),
                api.payments.list_all(),
            )
        except ApiError as e:
            logger.warning("Dashboard load failed: %s", e)
            # старый снимок не показываем
            self.snapshot = None
            self.error = OperationFailed.from_api_error(e, "Failed to fetch dashboard data")
            return Either.left(self.error)

        self.snapshot = build_snapshot(
            raw_products, raw_order_stats, raw_payment_stats, raw_orders, raw_payments
        )
        self.error = None
        return Either.right(self.snapshot)

    async def load_breakdowns(self) -> Either:
        """Разбивки для графиков дашборда, тоже всё-или-ничего"""
        api = self.gateway
        names = (
            "products_by_category",
            "inventory_value",
            "orders_by_status",
            "top_products",
            "payments_by_method",
            "revenue_by_status",
        )
        try:
            results = await asyncio.gather(
                api.analytics.products_by_category(),
                api.analytics.inventory_value(),
                api.analytics.orders_by_status(),
                api.analytics.top_products(),
                api.analytics.payments_by_method(),
                api.analytics.revenue_by_status(),
            )
        except ApiError as e:
            logger.warning("Dashboard breakdowns failed: %s", e)
            return Either.left(OperationFailed.from_api_error(e, "Failed to fetch analytics"))

        rows: Dict[str, Any] = {
            name: (raw if name == "inventory_value" else breakdown_rows(raw))
            for name, raw in zip(names, results)
        }
        return Either.right(rows)


# ============ Синхронная обёртка для UI ============


def run_with_gateway(
    work: Callable[[ApiGateway], Awaitable[T]], *args, **kwargs
) -> T:
    """
    Открывает ApiGateway, выполняет work(gateway) и закрывает клиент.
    Для Streamlit, где код страницы синхронный.
    """

    async def _run() -> T:
        async with ApiGateway(*args, **kwargs) as gateway:
            return await work(gateway)

    return asyncio.run(_run())
