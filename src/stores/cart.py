from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, Optional, Tuple

from api import endpoints
from api.errors import LocalValidationError, user_message
from api.gateway import Gateway, Result
from api.models import BuyerProduct, Order
from utils.cell import StateCell
from utils.logger import get_logger
from utils.state import UpdatePolicy, update_policy

_logger = get_logger(__name__)

EMPTY_CART_MESSAGE = "Add at least one item before placing an order."


@dataclass(frozen=True)
class CartItem:
    product_id: int
    description: str
    unit_price: float
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSnapshot:
    items: Tuple[CartItem, ...] = ()
    submitting: bool = False
    last_order: Optional[Order] = None
    error: Optional[str] = None

    @property
    def total(self) -> float:
        return sum(item.subtotal for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


class CartStore:
    """
    Client-side cart keyed by product id, plus order submission.

    Line edits are local only; the server sees the cart once, when the order
    is placed.
    """

    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway
        self.cell: StateCell[CartSnapshot] = StateCell(CartSnapshot())
        self._lines: Dict[int, CartItem] = {}

    @property
    def snapshot(self) -> CartSnapshot:
        return self.cell.value

    @property
    def total(self) -> float:
        return self.snapshot.total

    def get(self, product_id: int) -> Optional[CartItem]:
        return self._lines.get(product_id)

    def _publish(self, **changes) -> None:
        changes.setdefault("items", tuple(self._lines.values()))
        self.cell.set(replace(self.cell.value, **changes))

    # ---------- line edits ----------

    @update_policy(UpdatePolicy.OPTIMISTIC)
    def add(self, product: BuyerProduct, quantity: int = 1) -> None:
        if quantity <= 0:
            return
        line = self._lines.get(product.id)
        if line:
            self._lines[product.id] = replace(line, quantity=line.quantity + quantity)
        else:
            self._lines[product.id] = CartItem(
                product_id=product.id,
                description=product.description,
                unit_price=product.retail_price,
                quantity=quantity,
            )
        self._publish(error=None)

    @update_policy(UpdatePolicy.OPTIMISTIC)
    def update_quantity(self, product_id: int, quantity: int) -> None:
        line = self._lines.get(product_id)
        if line is None:
            return
        self._lines[product_id] = replace(line, quantity=max(int(quantity), 1))
        self._publish()

    @update_policy(UpdatePolicy.OPTIMISTIC)
    def remove(self, product_id: int) -> None:
        if self._lines.pop(product_id, None) is not None:
            self._publish()

    @update_policy(UpdatePolicy.OPTIMISTIC)
    def clear(self) -> None:
        self._lines.clear()
        self._publish()

    # ---------- submission ----------

    @contextmanager
    def _submitting(self) -> Iterator[None]:
        self._publish(submitting=True, error=None)
        try:
            yield
        finally:
            self._publish(submitting=False)

    @update_policy(UpdatePolicy.OPTIMISTIC)
    async def place_order(self, token: str) -> Result[Order]:
        """
        Submit every line as one order.

        On success the returned order is kept as `last_order` and the cart is
        cleared; on failure the cart is left as it was and the error recorded.
        """
        if not self._lines:
            error = LocalValidationError(EMPTY_CART_MESSAGE)
            self._publish(error=error.user_message)
            return Result.failure(error)
        if self.snapshot.submitting:
            error = LocalValidationError("An order is already being placed.")
            return Result.failure(error)

        with self._submitting():
            pairs = [(line.product_id, line.quantity) for line in self._lines.values()]
            result = await endpoints.create_order(self.gateway, token, pairs)

            if result.ok:
                _logger.info(f"Order {result.value.id} placed with {len(pairs)} line(s)")
                self._lines.clear()
                self._publish(last_order=result.value)
            else:
                _logger.warning(f"Order submission failed: {result.error}")
                self._publish(error=user_message(result.error, "Unable to place order."))
        return result
