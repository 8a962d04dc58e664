import sys
import os
import streamlit as st

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.config import load_settings, configure_logging
from storefront.domain import ORDER_STATUSES, PAYMENT_STATUSES, PRODUCT_CATEGORIES
from storefront.errors import ApiError
from storefront.session import Session
from storefront.service import (
    CartAggregator,
    CatalogBrowser,
    OrderComposer,
    OrderHistory,
    OrderStatusController,
    PaymentStatusController,
)
from storefront.async_ops import AnalyticsAggregator, run_with_gateway
from Analytics_Service.report import (
    recent_orders,
    recent_payments,
    orders_by_status,
)


# ============ Инициализация ============
@st.cache_resource
def get_settings():
    settings = load_settings()
    configure_logging(settings)
    return settings


st.set_page_config(
    page_title="Shop Client",
    page_icon="🛒",
    layout="wide",
    initial_sidebar_state="expanded",
)

settings = get_settings()

if "session" not in st.session_state:
    st.session_state.session = Session()

if "cart" not in st.session_state:
    st.session_state.cart = CartAggregator()

session: Session = st.session_state.session
cart: CartAggregator = st.session_state.cart


# ============ Вспомогательные функции ============
def call(work):
    """work(gateway) -> результат; сессия и настройки общие для всех страниц"""
    return run_with_gateway(work, session, settings)


def format_price(amount) -> str:
    return f"${float(amount):,.2f}"


def show_result(result, success_text: str) -> bool:
    """Left -> st.error, Right -> st.success; сигнал отделён от показа"""
    if result.is_left:
        st.error(f"❌ {result.error}")
        return False
    st.success(f"✅ {success_text}")
    return True


def status_badge(status: str) -> str:
    colors = {
        "Pending": "🟡",
        "Processing": "🔵",
        "Shipped": "🟣",
        "Delivered": "🟢",
        "Completed": "🟢",
        "Cancelled": "🔴",
        "Failed": "🔴",
        "Refunded": "⚪",
    }
    return f"{colors.get(status, '⚪')} {status}"


def show_flash():
    """Сообщение, отложенное до следующего прогона скрипта (после st.rerun или колбэка)"""
    flash = st.session_state.pop("flash", None)
    if flash is None:
        return
    kind, text = flash
    if kind == "error":
        st.error(f"❌ {text}")
    else:
        st.success(f"✅ {text}")


def shown_status(order) -> str:
    return order.status if order.status in ORDER_STATUSES else ORDER_STATUSES[0]


def change_order_status(order):
    """
    on_change селектора статуса: запрос уходит один раз на выбор.
    Отказ бэкенда возвращает селектор к текущему статусу заказа.
    """
    key = f"status_{order.id}"
    result = call(
        lambda api: OrderStatusController(api).set_status(order.id, st.session_state[key])
    )
    if result.is_left:
        st.session_state[key] = shown_status(order)
        st.session_state.flash = ("error", str(result.error))
    else:
        st.session_state.flash = ("success", "Order status updated successfully")


# ============ SIDEBAR - Навигация и вход ============
with st.sidebar:
    st.header("🛒 Shop")

    if session.is_authenticated:
        st.write(f"👤 **{session.customer.name}** ({session.customer.role})")
        if st.button("Logout"):
            session.logout()
            cart.clear()
            st.rerun()
    else:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Login"):
                try:
                    payload = call(
                        lambda api: api.auth.login({"email": email, "password": password})
                    )
                except ApiError as e:
                    st.error(f"❌ {e.backend_message or 'Login failed'}")
                else:
                    logged_in = Session.from_login_payload(payload or {})
                    session.login(logged_in.token, logged_in.customer)
                    st.rerun()

    pages = ["🏪 Products"]
    if session.is_authenticated:
        pages += ["🛒 Create Order", "🧾 My Orders"]
    if session.is_admin:
        pages += ["📊 Admin Dashboard", "📦 Manage Products", "💳 Manage Payments"]

    st.divider()
    page = st.radio("Page", pages, label_visibility="collapsed")

show_flash()


# ============ PAGE: PRODUCTS ============
if page == "🏪 Products":
    st.header("🏪 Products")

    col1, col2, col3 = st.columns([3, 2, 2])
    with col1:
        query = st.text_input("🔍 Search", key="products_query")
    with col2:
        category = st.selectbox("📂 Category", ["All"] + list(PRODUCT_CATEGORIES))
    with col3:
        sort = st.selectbox("↕️ Sort by", ["", "name", "price", "stock"])

    def load(api):
        browser = CatalogBrowser(api)
        browser.category = None if category == "All" else category
        browser.sort = sort or None
        return browser.search(query)

    result = call(load)
    if result.is_left:
        st.error(f"❌ {result.error}")
    elif not result.value:
        st.warning("No products found.")
    else:
        for p in result.value:
            cols = st.columns([5, 2, 2])
            with cols[0]:
                st.markdown(f"**{p.name}**")
                st.caption(p.description)
            with cols[1]:
                st.write(format_price(p.price))
            with cols[2]:
                st.write(f"Stock: {p.stock:,}")


# ============ PAGE: CREATE ORDER ============
elif page == "🛒 Create Order":
    st.header("🛒 Create Order")

    products = call(lambda api: CatalogBrowser(api).refresh())
    col_products, col_summary = st.columns(2)

    with col_products:
        st.subheader("Available Products")
        if products.is_left:
            st.error(f"❌ {products.error}")
        else:
            for p in products.value:
                cols = st.columns([5, 2, 1])
                with cols[0]:
                    st.markdown(f"**{p.name}** — {format_price(p.price)}")
                    st.caption(f"Stock: {p.stock:,}")
                with cols[2]:
                    if st.button("Add", key=f"add_{p.id}", disabled=p.stock == 0):
                        cart.add_item(p)
                        st.rerun()

    with col_summary:
        st.subheader("Order Summary")
        if cart.is_empty():
            st.info("No items added yet")
        else:
            for line in cart.lines:
                cols = st.columns([4, 2, 1])
                with cols[0]:
                    st.write(f"**{line.product.name}**")
                    st.caption(f"{format_price(line.price)} × {line.quantity}")
                with cols[1]:
                    qty = st.number_input(
                        "Qty",
                        min_value=1,
                        value=line.quantity,
                        key=f"qty_{line.product.id}",
                        label_visibility="collapsed",
                    )
                    if qty != line.quantity:
                        cart.set_quantity(line.product.id, int(qty))
                        st.rerun()
                with cols[2]:
                    if st.button("🗑️", key=f"remove_{line.product.id}"):
                        cart.remove_item(line.product.id)
                        st.rerun()

            st.divider()
            st.markdown(f"### Total: **{format_price(cart.total())}**")

        if st.button("✅ Place Order", type="primary", use_container_width=True):
            result = call(lambda api: OrderComposer(api, session).submit(cart))
            if show_result(result, "Order created successfully"):
                cart.clear()
                st.session_state.flash = ("success", "Order created successfully")
                st.rerun()


# ============ PAGE: MY ORDERS ============
elif page == "🧾 My Orders":
    st.header("🧾 My Orders")

    result = call(lambda api: OrderHistory(api, session).load())
    if result.is_left:
        st.error(f"❌ {result.error}")
    elif not result.value:
        st.info("You have no orders yet. Create your first order!")
    else:
        for order in result.value:
            with st.container(border=True):
                cols = st.columns([4, 2])
                with cols[0]:
                    st.markdown(f"**Order #{order.order_number}**")
                    st.caption(order.created_at)
                with cols[1]:
                    st.write(status_badge(order.status))
                for item in order.items:
                    st.write(
                        f"• {item.product_name or 'Product'} × {item.quantity} — "
                        f"{format_price(item.price * item.quantity)}"
                    )
                st.markdown(f"Total Amount: **{format_price(order.total_amount)}**")


# ============ PAGE: ADMIN DASHBOARD ============
elif page == "📊 Admin Dashboard":
    st.header("📊 Admin Dashboard")

    result = call(lambda api: AnalyticsAggregator(api).load())
    if result.is_left:
        st.error(f"❌ {result.error}")
    else:
        snapshot = result.value

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("📦 Products", f"{snapshot.total_products:,}")
        with col2:
            st.metric("🧾 Orders", f"{snapshot.order_stats.total_orders:,}")
            st.caption(f"Revenue: {format_price(snapshot.order_stats.total_revenue)}")
        with col3:
            st.metric("💳 Success Rate", f"{snapshot.payment_stats.success_rate:.1f}%")
            st.caption(f"{snapshot.payment_stats.total_payments:,} Total Payments")

        st.bar_chart(orders_by_status(snapshot.orders))

        st.subheader("Recent Orders")
        for order in recent_orders(snapshot):
            cols = st.columns([3, 2, 2, 3])
            with cols[0]:
                st.write(f"#{order.order_number} · {order.customer_name}")
            with cols[1]:
                st.write(format_price(order.total_amount))
            with cols[2]:
                st.write(status_badge(order.status))
            with cols[3]:
                # значение селектора хранится в state, колбэк откатывает его при отказе
                st.session_state.setdefault(f"status_{order.id}", shown_status(order))
                st.selectbox(
                    "Status",
                    ORDER_STATUSES,
                    key=f"status_{order.id}",
                    label_visibility="collapsed",
                    on_change=change_order_status,
                    args=(order,),
                )

        st.subheader("Recent Payments")
        for payment in recent_payments(snapshot):
            cols = st.columns([3, 2, 2, 2])
            with cols[0]:
                st.write(payment.customer_name)
            with cols[1]:
                st.write(format_price(payment.amount))
            with cols[2]:
                st.write(status_badge(payment.status))
            with cols[3]:
                if payment.status == "Pending" and st.button(
                    "Process", key=f"dash_process_{payment.id}"
                ):
                    st.session_state.confirm_payment = payment.id

        pending_id = st.session_state.get("confirm_payment")
        if pending_id:
            st.warning("Process payment? This will mark the payment as completed.")
            yes, no = st.columns(2)
            if yes.button("Yes, process it!", key="dash_confirm"):
                st.session_state.confirm_payment = None
                processed = call(lambda api: PaymentStatusController(api).process(pending_id))
                if show_result(processed, "Payment processed successfully"):
                    st.rerun()
            if no.button("Cancel", key="dash_cancel"):
                st.session_state.confirm_payment = None
                st.rerun()


# ============ PAGE: MANAGE PRODUCTS ============
elif page == "📦 Manage Products":
    st.header("📦 Manage Products")

    editing = st.session_state.get("editing_product")

    with st.form("product_form", clear_on_submit=True):
        st.subheader("Edit Product" if editing else "Add New Product")
        name = st.text_input("Product Name *", value=editing.name if editing else "")
        category = st.selectbox(
            "Category *",
            PRODUCT_CATEGORIES,
            index=PRODUCT_CATEGORIES.index(editing.category)
            if editing and editing.category in PRODUCT_CATEGORIES
            else 0,
        )
        price = st.number_input(
            "Price *", min_value=0.0, step=0.01, value=float(editing.price) if editing else 0.0
        )
        stock = st.number_input(
            "Stock *", min_value=0, step=1, value=editing.stock if editing else 0
        )
        description = st.text_area("Description", value=editing.description if editing else "")
        if st.form_submit_button("Update Product" if editing else "Add Product"):
            form = {
                "name": name,
                "category": category,
                "price": price,
                "stock": stock,
                "description": description,
            }
            saved = call(
                lambda api: CatalogBrowser(api).save(form, editing.id if editing else None)
            )
            if show_result(saved, "Product saved successfully"):
                st.session_state.editing_product = None

    if editing and st.button("Cancel editing"):
        st.session_state.editing_product = None
        st.rerun()

    products = call(lambda api: CatalogBrowser(api).refresh())
    if products.is_left:
        st.error(f"❌ {products.error}")
    else:
        for p in products.value:
            cols = st.columns([4, 2, 2, 1, 1])
            with cols[0]:
                st.write(f"**{p.name}** · {p.category}")
            with cols[1]:
                st.write(format_price(p.price))
            with cols[2]:
                st.write(f"Stock: {p.stock:,}")
            with cols[3]:
                if st.button("Edit", key=f"edit_{p.id}"):
                    st.session_state.editing_product = p
                    st.rerun()
            with cols[4]:
                if st.button("Delete", key=f"delete_{p.id}"):
                    st.session_state.confirm_delete = p.id

    delete_id = st.session_state.get("confirm_delete")
    if delete_id:
        st.warning("Are you sure? You won't be able to revert this!")
        yes, no = st.columns(2)
        if yes.button("Yes, delete it!"):
            st.session_state.confirm_delete = None
            deleted = call(lambda api: CatalogBrowser(api).delete(delete_id))
            if show_result(deleted, "Product has been deleted"):
                st.rerun()
        if no.button("Cancel", key="delete_cancel"):
            st.session_state.confirm_delete = None
            st.rerun()


# ============ PAGE: MANAGE PAYMENTS ============
elif page == "💳 Manage Payments":
    st.header("💳 Manage Payments")

    status = st.selectbox("Filter by status", ["All"] + list(PAYMENT_STATUSES))
    result = call(
        lambda api: PaymentStatusController(api).filter_by(
            None if status == "All" else status
        )
    )

    if result.is_left:
        st.error(f"❌ {result.error}")
    elif not result.value:
        st.info("No payments found")
    else:
        for payment in result.value:
            cols = st.columns([3, 2, 2, 3, 2])
            with cols[0]:
                st.write(f"{payment.customer_name} · {payment.method}")
                st.caption(payment.created_at)
            with cols[1]:
                st.write(format_price(payment.amount))
            with cols[2]:
                st.write(status_badge(payment.status))
            with cols[3]:
                st.write(payment.transaction_id or "N/A")
            with cols[4]:
                if payment.status == "Pending" and st.button(
                    "Process", key=f"process_{payment.id}"
                ):
                    st.session_state.confirm_payment = payment.id

    pending_id = st.session_state.get("confirm_payment")
    if pending_id:
        st.warning(
            "Process payment? This will mark the payment as completed "
            "and generate a transaction ID."
        )
        yes, no = st.columns(2)
        if yes.button("Yes, process it!"):
            st.session_state.confirm_payment = None
            processed = call(lambda api: PaymentStatusController(api).process(pending_id))
            if show_result(processed, "Payment processed successfully"):
                st.rerun()
        if no.button("Cancel", key="payment_cancel"):
            st.session_state.confirm_payment = None
            st.rerun()
