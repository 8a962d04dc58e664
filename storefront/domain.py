from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple


ORDER_STATUSES = ("Pending", "Processing", "Shipped", "Delivered", "Cancelled")
PAYMENT_STATUSES = ("Pending", "Completed", "Failed", "Refunded")
PRODUCT_CATEGORIES = ("Electronics", "Clothing", "Food", "Books", "Other")


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    description: str
    price: Decimal
    category: str
    stock: int


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str
    role: str = "customer"  # "customer" | "admin"


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int
    price: Decimal  # цена на момент добавления в корзину

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    lines: Tuple[CartLine, ...] = ()


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    product_name: Optional[str]
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class Order:
    id: str
    order_number: str
    customer_name: str
    customer_email: str
    items: Tuple[OrderItem, ...]
    total_amount: Decimal
    status: str
    created_at: str


@dataclass(frozen=True)
class Payment:
    id: str
    order_id: Optional[str]
    customer_name: str
    customer_email: str
    amount: Decimal
    method: str
    status: str
    transaction_id: Optional[str]
    created_at: str


@dataclass(frozen=True)
class OrderStats:
    total_orders: int = 0
    total_revenue: float = 0
    avg_order_value: float = 0


@dataclass(frozen=True)
class PaymentStats:
    success_rate: float = 0
    total_payments: int = 0


@dataclass(frozen=True)
class AnalyticsSnapshot:
    total_products: int
    order_stats: OrderStats
    payment_stats: PaymentStats
    orders: Tuple[Order, ...]
    payments: Tuple[Payment, ...]
