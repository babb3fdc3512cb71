from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from api import endpoints
from api.errors import user_message
from api.gateway import Gateway, Result
from api.models import AdminProduct, BuyerProduct
from stores.watchlist import WatchlistStore
from utils.cell import StateCell
from utils.state import UpdatePolicy, update_policy


@dataclass(frozen=True)
class BuyerCatalogSnapshot:
    products: Tuple[BuyerProduct, ...] = ()
    loading: bool = False
    error: Optional[str] = None


class BuyerCatalogStore:
    """Buyer product listing, loaded together with the watchlist."""

    def __init__(self, gateway: Gateway, watchlist: WatchlistStore) -> None:
        self.gateway = gateway
        self.watchlist = watchlist
        self.cell: StateCell[BuyerCatalogSnapshot] = StateCell(BuyerCatalogSnapshot())

    def _publish(self, **changes) -> None:
        self.cell.set(replace(self.cell.value, **changes))

    def reset(self) -> None:
        self.cell.set(BuyerCatalogSnapshot())

    async def load(self, token: str) -> Result:
        """Products and watchlist in parallel; either failing keeps the old listing."""
        self._publish(loading=True, error=None)
        products, watched = await asyncio.gather(
            endpoints.buyer_products(self.gateway, token),
            endpoints.watchlist(self.gateway, token),
        )
        failed = products if not products.ok else watched
        if not failed.ok:
            self._publish(
                loading=False, error=user_message(failed.error, "Unable to load products.")
            )
            return failed

        self.watchlist.replace_all(watched.value)
        self._publish(products=tuple(products.value), loading=False)
        return products

    def filtered(self, query: str) -> List[BuyerProduct]:
        products = list(self.cell.value.products)
        query = query.strip().casefold()
        if not query:
            return products
        return [p for p in products if query in p.description.casefold()]

    async def detail(self, token: str, product_id: int) -> Result[BuyerProduct]:
        return await endpoints.buyer_product(self.gateway, token, product_id)


@dataclass(frozen=True)
class AdminCatalogSnapshot:
    products: Tuple[AdminProduct, ...] = ()
    loading: bool = False
    error: Optional[str] = None


class AdminCatalogStore:
    """
    Admin product cache. Products are server snapshots: the only way a cached
    copy changes is by being replaced with what an update call returned.
    """

    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway
        self.cell: StateCell[AdminCatalogSnapshot] = StateCell(AdminCatalogSnapshot())

    @property
    def products(self) -> Tuple[AdminProduct, ...]:
        return self.cell.value.products

    def _publish(self, **changes) -> None:
        self.cell.set(replace(self.cell.value, **changes))

    def reset(self) -> None:
        self.cell.set(AdminCatalogSnapshot())

    def apply(self, product: AdminProduct) -> None:
        """Replace the cached copy with the same id, or append a new one."""
        products = list(self.products)
        for i, existing in enumerate(products):
            if existing.id == product.id:
                products[i] = product
                break
        else:
            products.append(product)
        self._publish(products=tuple(products))

    async def load(self, token: str) -> Result[List[AdminProduct]]:
        self._publish(loading=True, error=None)
        result = await endpoints.admin_products(self.gateway, token)
        if result.ok:
            self._publish(products=tuple(result.value), loading=False)
        else:
            self._publish(
                loading=False, error=user_message(result.error, "Unable to load products.")
            )
        return result

    async def load_detail(self, token: str, product_id: int) -> Result[AdminProduct]:
        result = await endpoints.admin_product(self.gateway, token, product_id)
        if result.ok:
            self.apply(result.value)
        else:
            self._publish(error=user_message(result.error, "Unable to load product."))
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def create(
        self,
        token: str,
        description: str,
        wholesale_price: float,
        retail_price: float,
        stock_quantity: int,
    ) -> Result[AdminProduct]:
        result = await endpoints.create_admin_product(
            self.gateway, token, description, wholesale_price, retail_price, stock_quantity
        )
        if result.ok:
            self.apply(result.value)
            self._publish(error=None)
        else:
            self._publish(error=user_message(result.error, "Unable to create product."))
        return result

    @update_policy(UpdatePolicy.CONFIRM_FIRST)
    async def update(self, token: str, product_id: int, **fields) -> Result[AdminProduct]:
        """
        Partial update. `fields` are any of description, wholesale_price,
        retail_price, stock_quantity.
        """
        result = await endpoints.update_admin_product(self.gateway, token, product_id, **fields)
        if result.ok:
            self.apply(result.value)
            self._publish(error=None)
        else:
            self._publish(error=user_message(result.error, "Unable to update product."))
        return result
