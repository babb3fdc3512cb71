# src/api/endpoints.py
# one coroutine per remote operation; all return a gateway Result
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from api.gateway import Gateway, Result
from api.models import (
    AdminProduct,
    AuthResponse,
    BuyerProduct,
    Order,
    OrderStatusUpdate,
    OrderSummary,
    PopularItem,
    ProfitSummary,
    TopFrequentItem,
    TopRecentItem,
    TotalSold,
    many,
    page_content,
)


def _drop_none(**fields) -> dict:
    return {k: v for k, v in fields.items() if v is not None}


# ---------------------------
# Auth
# ---------------------------


async def register(
    gw: Gateway, username: str, email: str, password: str
) -> Result[AuthResponse]:
    body = {"username": username, "email": email, "password": password}
    return await gw.request(
        "/api/auth/register", "POST", body=body, decode=AuthResponse.from_json
    )


async def login(gw: Gateway, username_or_email: str, password: str) -> Result[AuthResponse]:
    body = {"usernameOrEmail": username_or_email, "password": password}
    return await gw.request(
        "/api/auth/login", "POST", body=body, decode=AuthResponse.from_json
    )


# ---------------------------
# Buyer: products & orders
# ---------------------------


async def buyer_products(gw: Gateway, token: str) -> Result[List[BuyerProduct]]:
    return await gw.request(
        "/api/buyer/products", token=token, decode=many(BuyerProduct.from_json)
    )


async def buyer_product(gw: Gateway, token: str, product_id: int) -> Result[BuyerProduct]:
    return await gw.request(
        f"/api/buyer/products/{product_id}", token=token, decode=BuyerProduct.from_json
    )


async def create_order(
    gw: Gateway, token: str, items: Iterable[Tuple[int, int]]
) -> Result[Order]:
    """`items` are (product_id, quantity) pairs."""
    body = {"items": [{"productId": pid, "quantity": qty} for pid, qty in items]}
    return await gw.request(
        "/api/buyer/orders", "POST", token=token, body=body, decode=Order.from_json
    )


async def buyer_orders(gw: Gateway, token: str) -> Result[List[OrderSummary]]:
    return await gw.request(
        "/api/buyer/orders", token=token, decode=page_content(OrderSummary.from_json)
    )


async def buyer_order(gw: Gateway, token: str, order_id: int) -> Result[Order]:
    return await gw.request(
        f"/api/buyer/orders/{order_id}", token=token, decode=Order.from_json
    )


async def cancel_buyer_order(
    gw: Gateway, token: str, order_id: int
) -> Result[OrderStatusUpdate]:
    return await gw.request(
        f"/api/buyer/orders/{order_id}/cancel",
        "PATCH",
        token=token,
        decode=OrderStatusUpdate.from_json,
    )


async def buyer_top_frequent(gw: Gateway, token: str) -> Result[List[TopFrequentItem]]:
    return await gw.request(
        "/api/buyer/orders/top/frequent",
        token=token,
        decode=many(TopFrequentItem.from_json),
    )


async def buyer_top_recent(gw: Gateway, token: str) -> Result[List[TopRecentItem]]:
    return await gw.request(
        "/api/buyer/orders/top/recent",
        token=token,
        decode=many(TopRecentItem.from_json),
    )


# ---------------------------
# Buyer: watchlist
# ---------------------------


async def watchlist(gw: Gateway, token: str) -> Result[List[BuyerProduct]]:
    return await gw.request(
        "/api/buyer/watchlist", token=token, decode=many(BuyerProduct.from_json)
    )


async def add_to_watchlist(gw: Gateway, token: str, product_id: int) -> Result[None]:
    return await gw.request(f"/api/buyer/watchlist/{product_id}", "POST", token=token)


async def remove_from_watchlist(gw: Gateway, token: str, product_id: int) -> Result[None]:
    return await gw.request(f"/api/buyer/watchlist/{product_id}", "DELETE", token=token)


# ---------------------------
# Admin: products
# ---------------------------


async def admin_products(gw: Gateway, token: str) -> Result[List[AdminProduct]]:
    return await gw.request(
        "/api/admin/products", token=token, decode=many(AdminProduct.from_json)
    )


async def admin_product(gw: Gateway, token: str, product_id: int) -> Result[AdminProduct]:
    return await gw.request(
        f"/api/admin/products/{product_id}", token=token, decode=AdminProduct.from_json
    )


async def create_admin_product(
    gw: Gateway,
    token: str,
    description: str,
    wholesale_price: float,
    retail_price: float,
    stock_quantity: int,
) -> Result[AdminProduct]:
    body = {
        "description": description,
        "wholesalePrice": wholesale_price,
        "retailPrice": retail_price,
        "stockQuantity": stock_quantity,
    }
    return await gw.request(
        "/api/admin/products", "POST", token=token, body=body, decode=AdminProduct.from_json
    )


async def update_admin_product(
    gw: Gateway,
    token: str,
    product_id: int,
    description: Optional[str] = None,
    wholesale_price: Optional[float] = None,
    retail_price: Optional[float] = None,
    stock_quantity: Optional[int] = None,
) -> Result[AdminProduct]:
    """Partial update; fields left as None are not sent."""
    body = _drop_none(
        description=description,
        wholesalePrice=wholesale_price,
        retailPrice=retail_price,
        stockQuantity=stock_quantity,
    )
    return await gw.request(
        f"/api/admin/products/{product_id}",
        "PATCH",
        token=token,
        body=body,
        decode=AdminProduct.from_json,
    )


# ---------------------------
# Admin: orders
# ---------------------------


async def admin_orders(gw: Gateway, token: str, page: int) -> Result[List[OrderSummary]]:
    """One page of orders; bare arrays and paged envelopes both come back flat."""
    return await gw.request(
        "/api/admin/orders",
        token=token,
        query={"page": page},
        decode=page_content(OrderSummary.from_json),
    )


async def admin_order(gw: Gateway, token: str, order_id: int) -> Result[Order]:
    return await gw.request(
        f"/api/admin/orders/{order_id}", token=token, decode=Order.from_json
    )


async def complete_admin_order(
    gw: Gateway, token: str, order_id: int
) -> Result[OrderStatusUpdate]:
    return await gw.request(
        f"/api/admin/orders/{order_id}/complete",
        "PATCH",
        token=token,
        decode=OrderStatusUpdate.from_json,
    )


async def cancel_admin_order(
    gw: Gateway, token: str, order_id: int
) -> Result[OrderStatusUpdate]:
    return await gw.request(
        f"/api/admin/orders/{order_id}/cancel",
        "PATCH",
        token=token,
        decode=OrderStatusUpdate.from_json,
    )


# ---------------------------
# Admin: summaries
# ---------------------------


async def admin_profit(gw: Gateway, token: str) -> Result[ProfitSummary]:
    return await gw.request(
        "/api/admin/summary/profit", token=token, decode=ProfitSummary.from_json
    )


async def admin_popular(gw: Gateway, token: str) -> Result[List[PopularItem]]:
    return await gw.request(
        "/api/admin/summary/popular", token=token, decode=many(PopularItem.from_json)
    )


async def admin_total_sold(gw: Gateway, token: str) -> Result[TotalSold]:
    return await gw.request(
        "/api/admin/summary/total-sold", token=token, decode=TotalSold.from_json
    )
