from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional, Tuple

from api import endpoints
from api.errors import user_message
from api.gateway import Gateway, Result
from api.models import BuyerProduct
from utils.cell import StateCell
from utils.logger import get_logger
from utils.state import UpdatePolicy, update_policy

_logger = get_logger(__name__)


@dataclass(frozen=True)
class WatchlistSnapshot:
    ids: FrozenSet[int] = frozenset()
    products: Tuple[BuyerProduct, ...] = ()
    loading: bool = False
    error: Optional[str] = None


class WatchlistStore:
    """
    Product ids believed to be on the remote watchlist.

    Membership only changes after the server confirmed the add or remove, so a
    failed toggle never leaves the display out of step with the server.
    """

    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway
        self.cell: StateCell[WatchlistSnapshot] = StateCell(WatchlistSnapshot())

    @property
    def ids(self) -> FrozenSet[int]:
        return self.cell.value.ids

    def contains(self, product_id: int) -> bool:
        return product_id in self.cell.value.ids

    def _publish(self, **changes) -> None:
        self.cell.set(replace(self.cell.value, **changes))

    def replace_all(self, products: Iterable[BuyerProduct]) -> None:
        """Take a freshly fetched watchlist as the new truth."""
        products = tuple(products)
        self._publish(ids=frozenset(p.id for p in products), products=products, error=None)

    def reset(self) -> None:
        self.cell.set(WatchlistSnapshot())

    async def load(self, token: str) -> Result:
        self._publish(loading=True, error=None)
        result = await endpoints.watchlist(self.gateway, token)
        if result.ok:
            self.replace_all(result.value)
            self._publish(loading=False)
        else:
            self._publish(
                loading=False, error=user_message(result.error, "Unable to load watchlist.")
            )
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def toggle(
        self, token: str, product_id: int, product: Optional[BuyerProduct] = None
    ) -> Result:
        """
        Remove when present, add when absent; local set follows the server.
        `product` is the listed copy shown in the watchlist after a confirmed add.
        """
        if self.contains(product_id):
            return await self.remove(token, product_id)

        result = await endpoints.add_to_watchlist(self.gateway, token, product_id)
        if result.ok:
            snapshot = self.cell.value
            products = snapshot.products
            if product is not None and all(p.id != product_id for p in products):
                products = products + (product,)
            self._publish(ids=snapshot.ids | {product_id}, products=products, error=None)
        else:
            _logger.warning(f"Watchlist add of {product_id} failed: {result.error}")
            self._publish(error=user_message(result.error, "Unable to update watchlist."))
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def remove(self, token: str, product_id: int) -> Result:
        result = await endpoints.remove_from_watchlist(self.gateway, token, product_id)
        if result.ok:
            snapshot = self.cell.value
            self._publish(
                ids=snapshot.ids - {product_id},
                products=tuple(p for p in snapshot.products if p.id != product_id),
                error=None,
            )
        else:
            _logger.warning(f"Watchlist remove of {product_id} failed: {result.error}")
            self._publish(error=user_message(result.error, "Unable to update watchlist."))
        return result
