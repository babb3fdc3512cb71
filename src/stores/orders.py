"""
Order listings.

`OrderAccumulator` walks the admin order pages until a page brings nothing new,
publishing what it has after every page. `BuyerOrdersStore` holds the buyer's
own orders. In both, a status change is applied only from the server's reply.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from api import endpoints
from api.errors import user_message
from api.gateway import Gateway, Result
from api.models import Order, OrderStatus, OrderStatusUpdate, OrderSummary
from utils.cell import StateCell
from utils.logger import get_logger
from utils.state import UpdatePolicy, update_policy

_logger = get_logger(__name__)


def _with_status(orders, order_id: int, status: OrderStatus):
    return tuple(replace(o, status=status) if o.id == order_id else o for o in orders)


@dataclass(frozen=True)
class OrderListSnapshot:
    orders: Tuple[OrderSummary, ...] = ()
    detail: Optional[Order] = None
    loading: bool = False
    error: Optional[str] = None


class _OrderListStore:
    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway
        self.cell: StateCell[OrderListSnapshot] = StateCell(OrderListSnapshot())

    @property
    def orders(self) -> Tuple[OrderSummary, ...]:
        return self.cell.value.orders

    def _publish(self, **changes) -> None:
        self.cell.set(replace(self.cell.value, **changes))

    def reset(self) -> None:
        self.cell.set(OrderListSnapshot())

    async def _change_status(
        self, call: Awaitable[Result[OrderStatusUpdate]], order_id: int, fallback: str
    ) -> Result[OrderStatusUpdate]:
        result = await call
        if not result.ok:
            self._publish(error=user_message(result.error, fallback))
            return result

        status = result.value.status
        snapshot = self.cell.value
        detail = snapshot.detail
        if detail is not None and detail.id == order_id:
            detail = replace(detail, status=status)
        self._publish(
            orders=_with_status(snapshot.orders, order_id, status), detail=detail, error=None
        )
        _logger.info(f"Order {order_id} is now {status.value}")
        return result


class OrderAccumulator(_OrderListStore):
    """Admin listing assembled from every page of /api/admin/orders."""

    def __init__(
        self,
        gateway: Gateway,
        fetch_page: Optional[Callable[[str, int], Awaitable[Result[List[OrderSummary]]]]] = None,
    ) -> None:
        super().__init__(gateway)
        self._fetch_page = fetch_page or (
            lambda token, page: endpoints.admin_orders(self.gateway, token, page)
        )

    async def load_all(self, token: str) -> Result[List[OrderSummary]]:
        """
        Fetch pages from 0 upwards, dropping ids already seen.

        Stops when a page is empty or brings no unseen id, which also ends the
        walk when the server keeps answering with the first page. An error
        stops the walk but keeps whatever was accumulated before it.
        """
        collected: List[OrderSummary] = []
        seen: Set[int] = set()
        self._publish(orders=(), loading=True, error=None)

        page = 0
        while True:
            result = await self._fetch_page(token, page)
            if not result.ok:
                _logger.warning(f"Order page {page} failed: {result.error}")
                self._publish(
                    loading=False, error=user_message(result.error, "Unable to load orders.")
                )
                return Result.failure(result.error)

            batch = result.value or []
            fresh = [o for o in batch if o.id not in seen]
            seen.update(o.id for o in fresh)
            if fresh:
                collected.extend(fresh)
                self._publish(orders=tuple(collected))

            if not batch or not fresh:
                break
            page += 1

        _logger.debug(f"Accumulated {len(collected)} orders over {page + 1} page(s)")
        self._publish(orders=tuple(collected), loading=False)
        return Result.success(collected)

    async def load_detail(self, token: str, order_id: int) -> Result[Order]:
        result = await endpoints.admin_order(self.gateway, token, order_id)
        if result.ok:
            self._publish(detail=result.value, error=None)
        else:
            self._publish(error=user_message(result.error, "Unable to load order."))
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def complete(self, token: str, order_id: int) -> Result[OrderStatusUpdate]:
        return await self._change_status(
            endpoints.complete_admin_order(self.gateway, token, order_id),
            order_id,
            "Unable to complete order.",
        )

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def cancel(self, token: str, order_id: int) -> Result[OrderStatusUpdate]:
        return await self._change_status(
            endpoints.cancel_admin_order(self.gateway, token, order_id),
            order_id,
            "Unable to cancel order.",
        )


class BuyerOrdersStore(_OrderListStore):
    """The signed-in buyer's orders and the one being viewed."""

    async def load(self, token: str) -> Result[List[OrderSummary]]:
        self._publish(loading=True, error=None)
        result = await endpoints.buyer_orders(self.gateway, token)
        if result.ok:
            self._publish(orders=tuple(result.value), loading=False)
        else:
            self._publish(
                loading=False, error=user_message(result.error, "Failed to load orders.")
            )
        return result

    async def load_detail(self, token: str, order_id: int) -> Result[Order]:
        result = await endpoints.buyer_order(self.gateway, token, order_id)
        if result.ok:
            self._publish(detail=result.value, error=None)
        else:
            self._publish(error=user_message(result.error, "Unable to load order."))
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def cancel(self, token: str, order_id: int) -> Result[OrderStatusUpdate]:
        return await self._change_status(
            endpoints.cancel_buyer_order(self.gateway, token, order_id),
            order_id,
            "Unable to cancel this order.",
        )
