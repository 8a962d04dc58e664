from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import Any, Tuple
from .ftypes import Maybe, Either
from .domain import (
    PRODUCT_CATEGORIES,
    Cart,
    CartLine,
    Customer,
    Order,
    OrderItem,
    Payment,
    Product,
)


# ============ Разбор JSON бэкенда ============


def to_decimal(value: Any) -> Decimal:
    """Число/строка из JSON -> Decimal; мусор, None, Infinity и NaN -> 0"""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def to_int(value: Any) -> int:
    """Целое из JSON без исключений: "two" -> 0, 2.9 -> 2"""
    return int(to_decimal(value))


def _id_of(data: dict) -> str:
    return str(data.get("_id", data.get("id", "")))


def product_from_json(data: dict) -> Product:
    return Product(
        id=_id_of(data),
        name=str(data.get("name", "")),
        description=str(data.get("description") or ""),
        price=to_decimal(data.get("price")),
        category=str(data.get("category", "Other")),
        stock=to_int(data.get("stock")),
    )


def customer_from_json(data: dict) -> Customer:
    return Customer(
        id=_id_of(data),
        name=str(data.get("name", "")),
        email=str(data.get("email", "")),
        role=str(data.get("role", "customer")),
    )


def _order_item_from_json(item: dict) -> OrderItem:
    # product приходит либо id-строкой, либо заполненным объектом
    product = item.get("product")
    if isinstance(product, dict):
        product_id, product_name = _id_of(product), product.get("name")
    else:
        product_id, product_name = str(product or ""), None
    return OrderItem(
        product_id=product_id,
        product_name=product_name,
        quantity=to_int(item.get("quantity")),
        price=to_decimal(item.get("price")),
    )


def order_from_json(data: dict) -> Order:
    return Order(
        id=_id_of(data),
        order_number=str(data.get("orderNumber", "")),
        customer_name=str(data.get("customerName", "")),
        customer_email=str(data.get("customerEmail", "")),
        items=parse_many(_order_item_from_json, data.get("items")),
        total_amount=to_decimal(data.get("totalAmount")),
        status=str(data.get("status", "Pending")),
        created_at=str(data.get("createdAt", "")),
    )


def payment_from_json(data: dict) -> Payment:
    order = data.get("order", data.get("orderId"))
    if isinstance(order, dict):
        order = _id_of(order)
    return Payment(
        id=_id_of(data),
        order_id=str(order) if order else None,
        customer_name=str(data.get("customerName", "")),
        customer_email=str(data.get("customerEmail", "")),
        amount=to_decimal(data.get("amount")),
        method=str(data.get("paymentMethod", data.get("method", ""))),
        status=str(data.get("status", "Pending")),
        transaction_id=data.get("transactionId") or None,
        created_at=str(data.get("createdAt", "")),
    )


def parse_many(parser, raw: Any) -> Tuple:
    """Список из ответа -> кортеж доменных объектов; не-список -> ()"""
    if not isinstance(raw, list):
        return ()
    return tuple(map(parser, filter(lambda x: isinstance(x, dict), raw)))


# ============ Корзина (чистые функции) ============


def find_line(cart: Cart, product_id: str) -> Maybe[CartLine]:
    found = next((line for line in cart.lines if line.product.id == product_id), None)
    return Maybe.of(found)


def add_item(cart: Cart, product: Product) -> Cart:
    """
    Новый Cart с товаром.
    Уже есть строка — quantity + 1, цена остаётся той, что была при первом добавлении.
    """
    if find_line(cart, product.id).is_some():
        updated = tuple(
            CartLine(line.product, line.quantity + 1, line.price)
            if line.product.id == product.id
            else line
            for line in cart.lines
        )
        return Cart(lines=updated)

    return Cart(lines=cart.lines + (CartLine(product, 1, product.price),))


def remove_item(cart: Cart, product_id: str) -> Cart:
    return Cart(lines=tuple(filter(lambda l: l.product.id != product_id, cart.lines)))


def set_quantity(cart: Cart, product_id: str, qty: int) -> Cart:
    """qty < 1 игнорируется: обнулить строку можно только через remove_item"""
    if qty < 1:
        return cart
    return Cart(
        lines=tuple(
            CartLine(line.product, qty, line.price)
            if line.product.id == product_id
            else line
            for line in cart.lines
        )
    )


def cart_total(cart: Cart) -> Decimal:
    """Σ(price × quantity), каждый раз заново"""
    return reduce(lambda acc, line: acc + line.subtotal, cart.lines, Decimal("0"))


def build_order_request(cart: Cart, customer: Customer) -> dict:
    return {
        "customerName": customer.name,
        "customerEmail": customer.email,
        "items": [
            {
                "product": line.product.id,
                "quantity": line.quantity,
                "price": float(line.price),
            }
            for line in cart.lines
        ],
        "totalAmount": float(cart_total(cart)),
    }


# ============ Форма товара (админка) ============


def validate_product_form(form: dict) -> Either[dict, dict]:
    """
    Проверяет форму товара до отправки:
    - имя обязательно
    - цена >= 0, остаток — целое >= 0
    - категория из известного списка
    Возвращает Either[{"error": ...}, payload]
    """
    name = str(form.get("name") or "").strip()
    if not name:
        return Either.left({"error": "Product name is required"})

    try:
        price = Decimal(str(form.get("price")))
    except (InvalidOperation, ValueError):
        return Either.left({"error": "Price must be a number"})
    if not price.is_finite() or price < 0:
        return Either.left({"error": "Price must be non-negative"})

    try:
        stock = int(str(form.get("stock")))
    except ValueError:
        return Either.left({"error": "Stock must be a whole number"})
    if stock < 0:
        return Either.left({"error": "Stock must be non-negative"})

    category = form.get("category") or "Electronics"
    if category not in PRODUCT_CATEGORIES:
        return Either.left({"error": f"Unknown category '{category}'"})

    return Either.right(
        {
            "name": name,
            "description": str(form.get("description") or ""),
            "price": float(price),
            "category": category,
            "stock": stock,
        }
    )
