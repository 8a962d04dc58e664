import math
import re
from functools import reduce
from typing import Any, Dict, List, Tuple
from storefront.domain import (
    ORDER_STATUSES,
    AnalyticsSnapshot,
    Order,
    OrderStats,
    Payment,
    PaymentStats,
)
from storefront.lazy import take, iter_by_status
from storefront.transforms import order_from_json, parse_many, payment_from_json

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


# ============ Нормализация сырых значений ============


def parse_number(raw: Any) -> float:
    """
    Число или строка ("87.5", "87.5%") -> float.
    Берётся числовой префикс строки; без префикса, None, bool, inf и NaN -> 0
    """
    if isinstance(raw, bool) or raw is None:
        return 0.0
    if isinstance(raw, str):
        match = _LEADING_NUMBER.match(raw)
        raw = match.group(0) if match else 0
    if not isinstance(raw, (int, float, str)):
        return 0.0
    try:
        value = float(raw)
    except OverflowError:
        return 0.0
    # json допускает 1e999 и NaN
    return value if math.isfinite(value) else 0.0


def product_count(raw: Any) -> int:
    """Счётчик товаров: число из count-конверта; нет значения -> 0"""
    if isinstance(raw, dict):
        raw = raw.get("count", raw.get("totalProducts"))
    return int(parse_number(raw))


def order_stats(raw: Any) -> OrderStats:
    """Нет статистики -> нули; отсутствующие поля тоже нули"""
    if not isinstance(raw, dict) or not raw:
        return OrderStats()
    return OrderStats(
        total_orders=int(parse_number(raw.get("totalOrders"))),
        total_revenue=parse_number(raw.get("totalRevenue")),
        avg_order_value=parse_number(raw.get("avgOrderValue")),
    )


def payment_stats(raw: Any) -> PaymentStats:
    """
    successRate приходит числом или строкой с "%".
    Бывает и голое значение вместо объекта.
    """
    if isinstance(raw, dict):
        return PaymentStats(
            success_rate=parse_number(raw.get("successRate")),
            total_payments=int(parse_number(raw.get("totalPayments"))),
        )
    return PaymentStats(success_rate=parse_number(raw))


def build_snapshot(
    raw_products: Any,
    raw_order_stats: Any,
    raw_payment_stats: Any,
    raw_orders: Any,
    raw_payments: Any,
) -> AnalyticsSnapshot:
    """Пять независимых ответов -> одна модель дашборда"""
    return AnalyticsSnapshot(
        total_products=product_count(raw_products),
        order_stats=order_stats(raw_order_stats),
        payment_stats=payment_stats(raw_payment_stats),
        orders=parse_many(order_from_json, raw_orders),
        payments=parse_many(payment_from_json, raw_payments),
    )


# ============ Отчёты для дашборда ============


def recent_orders(snapshot: AnalyticsSnapshot, k: int = 10) -> Tuple[Order, ...]:
    return tuple(take(snapshot.orders, k))


def recent_payments(snapshot: AnalyticsSnapshot, k: int = 10) -> Tuple[Payment, ...]:
    return tuple(take(snapshot.payments, k))


def pending_payments(payments: Tuple[Payment, ...]) -> Tuple[Payment, ...]:
    """Платежи, для которых UI предлагает действие Process"""
    return tuple(iter_by_status(payments, "Pending"))


def orders_by_status(orders: Tuple[Order, ...]) -> Dict[str, int]:
    """Количество заказов по статусам (все статусы присутствуют, даже нулевые)"""

    def count(acc: dict, order: Order) -> dict:
        return {**acc, order.status: acc.get(order.status, 0) + 1}

    return reduce(count, orders, {status: 0 for status in ORDER_STATUSES})


def breakdown_rows(raw: Any) -> List[dict]:
    """
    Разбивки (по категориям, методам оплаты, top-N) — транзитные данные.
    Список словарей оставляем как есть, объект {ключ: значение} разворачиваем в строки.
    """
    if isinstance(raw, list):
        return [row for row in raw if isinstance(row, dict)]
    if isinstance(raw, dict):
        return [{"key": k, "value": v} for k, v in raw.items()]
    return []
