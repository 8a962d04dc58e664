import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional, Tuple

from .domain import (
    ORDER_STATUSES,
    Cart,
    CartLine,
    Customer,
    Order,
    Payment,
    Product,
)
from .errors import (
    ApiError,
    EmptyCartError,
    OperationFailed,
    SessionError,
    ValidationError,
)
from .ftypes import Either, Maybe
from .gateway import ApiGateway
from .session import Session
from .transforms import (
    add_item,
    build_order_request,
    cart_total,
    find_line,
    order_from_json,
    parse_many,
    payment_from_json,
    product_from_json,
    remove_item,
    set_quantity,
    validate_product_form,
)

logger = logging.getLogger(__name__)

# вызывается после успешной записи; по умолчанию — полная перезагрузка списка
OnSuccess = Callable[[], Awaitable[Any]]


class CartAggregator:
    """
    Выбор товаров в рамках одной сессии оформления заказа.
    Только память, никакого I/O; состояние — иммутабельный Cart,
    который заменяется целиком на каждой операции.
    """

    def __init__(self):
        self.cart = Cart()

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return self.cart.lines

    def is_empty(self) -> bool:
        return not self.cart.lines

    def line(self, product_id: str) -> Maybe[CartLine]:
        return find_line(self.cart, product_id)

    def add_item(self, product: Product) -> None:
        self.cart = add_item(self.cart, product)

    def remove_item(self, product_id: str) -> None:
        self.cart = remove_item(self.cart, product_id)

    def set_quantity(self, product_id: str, qty: int) -> None:
        self.cart = set_quantity(self.cart, product_id, qty)

    def total(self) -> Decimal:
        return cart_total(self.cart)

    def clear(self) -> None:
        self.cart = Cart()


class OrderComposer:
    """Корзина -> запрос на создание заказа -> бэкенд"""

    def __init__(self, gateway: ApiGateway, session: Session):
        self.gateway = gateway
        self.session = session

    async def submit(
        self, cart: CartAggregator, customer: Optional[Customer] = None
    ) -> Either:
        """
        Left(EmptyCartError) — пустая корзина, в сеть ничего не уходит.
        Left(SessionError) — не известно, кто покупатель.
        Left(OperationFailed) — бэкенд отказал; корзина не тронута.
        Right(payload) — созданный заказ; очистка корзины на вызывающем.
        """
        if cart.is_empty():
            return Either.left(EmptyCartError())

        customer = customer or self.session.customer
        if customer is None:
            return Either.left(SessionError("Log in to place an order"))

        request = build_order_request(cart.cart, customer)
        try:
            created = await self.gateway.orders.create(request)
        except ApiError as e:
            logger.warning("Order creation failed for %s: %s", customer.email, e)
            return Either.left(OperationFailed.from_api_error(e, "Failed to create order"))

        logger.info(
            "Order created for %s: %d items, total %s",
            customer.email,
            len(request["items"]),
            request["totalAmount"],
        )
        return Either.right(created)


class OrderHistory:
    """Заказы текущего покупателя (по email из сессии)"""

    def __init__(self, gateway: ApiGateway, session: Session):
        self.gateway = gateway
        self.session = session
        self.orders: Tuple[Order, ...] = ()

    async def load(self) -> Either:
        if self.session.customer is None:
            return Either.left(SessionError("Log in to see your orders"))
        try:
            raw = await self.gateway.orders.by_customer_email(self.session.customer.email)
        except ApiError as e:
            return Either.left(OperationFailed.from_api_error(e, "Failed to fetch orders"))
        self.orders = parse_many(order_from_json, raw)
        return Either.right(self.orders)


class OrderStatusController:
    """
    Админский переход статусов заказа.
    Граф переходов не проверяется: любой статус достижим из любого,
    законность решает бэкенд. После успеха — полная перезагрузка списка,
    без оптимистичного обновления.
    """

    def __init__(self, gateway: ApiGateway, on_success: Optional[OnSuccess] = None):
        self.gateway = gateway
        self.orders: Tuple[Order, ...] = ()
        self.error: Optional[OperationFailed] = None
        self._on_success = on_success or self.refresh

    def status_of(self, order_id: str) -> Maybe[str]:
        found = next((o.status for o in self.orders if o.id == order_id), None)
        return Maybe.of(found)

    async def refresh(self) -> Either:
        try:
            raw = await self.gateway.orders.list_all()
        except ApiError as e:
            self.error = OperationFailed.from_api_error(e, "Failed to fetch orders")
            return Either.left(self.error)
        self.orders = parse_many(order_from_json, raw)
        self.error = None
        return Either.right(self.orders)

    async def set_status(self, order_id: str, new_status: str) -> Either:
        if new_status not in ORDER_STATUSES:
            return Either.left(ValidationError(f"Unknown order status '{new_status}'"))

        try:
            updated = await self.gateway.orders.update_status(order_id, new_status)
        except ApiError as e:
            logger.warning("Status change of order %s to %s failed: %s", order_id, new_status, e)
            return Either.left(
                OperationFailed.from_api_error(e, "Failed to update order status")
            )

        await self._on_success()
        return Either.right(updated)

    async def cancel(self, order_id: str) -> Either:
        try:
            result = await self.gateway.orders.cancel(order_id)
        except ApiError as e:
            logger.warning("Cancelling order %s failed: %s", order_id, e)
            return Either.left(OperationFailed.from_api_error(e, "Failed to cancel order"))

        await self._on_success()
        return Either.right(result)


class PaymentStatusController:
    """
    Единственный клиентский переход: Pending -> Completed (process).
    Подтверждение пользователя — предусловие вызывающего.
    Статус платежа здесь не проверяется: UI предлагает действие только
    для Pending, остальное отклоняет бэкенд.
    """

    def __init__(self, gateway: ApiGateway, on_success: Optional[OnSuccess] = None):
        self.gateway = gateway
        self.payments: Tuple[Payment, ...] = ()
        self.status_filter: Optional[str] = None
        self.error: Optional[OperationFailed] = None
        self._on_success = on_success or self.refresh

    async def refresh(self) -> Either:
        try:
            if self.status_filter:
                raw = await self.gateway.payments.by_status(self.status_filter)
            else:
                raw = await self.gateway.payments.list_all()
        except ApiError as e:
            self.error = OperationFailed.from_api_error(e, "Failed to fetch payments")
            return Either.left(self.error)
        self.payments = parse_many(payment_from_json, raw)
        self.error = None
        return Either.right(self.payments)

    async def filter_by(self, status: Optional[str]) -> Either:
        self.status_filter = status or None
        return await self.refresh()

    async def process(self, payment_id: str) -> Either:
        try:
            processed = await self.gateway.payments.process(payment_id)
        except ApiError as e:
            logger.warning("Processing payment %s failed: %s", payment_id, e)
            return Either.left(
                OperationFailed.from_api_error(e, "Failed to process payment")
            )

        await self._on_success()
        return Either.right(processed)


class CatalogBrowser:
    """Каталог: просмотр/поиск для всех, создание/правка/удаление для админа"""

    def __init__(self, gateway: ApiGateway, on_success: Optional[OnSuccess] = None):
        self.gateway = gateway
        self.products: Tuple[Product, ...] = ()
        self.category: Optional[str] = None
        self.sort: Optional[str] = None
        self._on_success = on_success or self.refresh

    async def _load(self, fetch: Awaitable[Any], fallback: str) -> Either:
        try:
            raw = await fetch
        except ApiError as e:
            return Either.left(OperationFailed.from_api_error(e, fallback))
        self.products = parse_many(product_from_json, raw)
        return Either.right(self.products)

    async def browse(
        self, category: Optional[str] = None, sort: Optional[str] = None
    ) -> Either:
        self.category, self.sort = category or None, sort or None
        return await self.refresh()

    async def refresh(self) -> Either:
        return await self._load(
            self.gateway.products.list(category=self.category, sort=self.sort),
            "Failed to fetch products",
        )

    async def search(self, query: str) -> Either:
        # пустой запрос — обычный список с текущими фильтрами
        if not query.strip():
            return await self.refresh()
        return await self._load(self.gateway.products.search(query.strip()), "Search failed")

    async def low_stock(self, threshold: int) -> Either:
        try:
            raw = await self.gateway.products.low_stock(threshold)
        except ApiError as e:
            return Either.left(OperationFailed.from_api_error(e, "Failed to fetch low-stock products"))
        return Either.right(parse_many(product_from_json, raw))

    async def save(self, form: dict, product_id: Optional[str] = None) -> Either:
        validated = validate_product_form(form)
        if validated.is_left:
            return Either.left(ValidationError(validated.value["error"]))

        try:
            if product_id:
                saved = await self.gateway.products.update(product_id, validated.value)
            else:
                saved = await self.gateway.products.create(validated.value)
        except ApiError as e:
            logger.warning("Saving product %s failed: %s", product_id or "(new)", e)
            return Either.left(OperationFailed.from_api_error(e, "Failed to save product"))

        await self._on_success()
        return Either.right(saved)

    async def delete(self, product_id: str) -> Either:
        try:
            result = await self.gateway.products.delete(product_id)
        except ApiError as e:
            logger.warning("Deleting product %s failed: %s", product_id, e)
            return Either.left(OperationFailed.from_api_error(e, "Failed to delete product"))

        await self._on_success()
        return Either.right(result)
