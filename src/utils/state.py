from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeVar

from api.gateway import Gateway
from db.storage import KeyValueStore

F = TypeVar("F", bound=Callable)


class UpdatePolicy(Enum):
    """
    How an operation reconciles local state with the server.

    OPTIMISTIC: local state changes first, the server is told later.
    CONFIRM_FIRST: local state changes only after the server confirmed.
    """

    OPTIMISTIC = "optimistic"
    CONFIRM_FIRST = "confirm_first"


def update_policy(policy: UpdatePolicy) -> Callable[[F], F]:
    """Tag a store operation with its UpdatePolicy (read back via `.update_policy`)."""

    def tag(fn: F) -> F:
        fn.update_policy = policy
        return fn

    return tag


@dataclass
class AppState:
    """
    Container of the stores shared by screens.

    Built once by the app and handed to every screen, instead of module
    globals, so each store can also be constructed on its own in tests.
    """

    gateway: Gateway
    session: "SessionStore"
    cart: "CartStore"
    watchlist: "WatchlistStore"
    buyer_catalog: "BuyerCatalogStore"
    admin_catalog: "AdminCatalogStore"
    buyer_orders: "BuyerOrdersStore"
    admin_orders: "OrderAccumulator"
    admin_dashboard: "DashboardAggregator"
    buyer_insights: "DashboardAggregator"

    @classmethod
    def build(
        cls, gateway: Optional[Gateway] = None, storage: Optional[KeyValueStore] = None
    ) -> "AppState":
        # imported here, the stores import this module for UpdatePolicy
        from stores.cart import CartStore
        from stores.catalog import AdminCatalogStore, BuyerCatalogStore
        from stores.dashboard import admin_dashboard, buyer_insights
        from stores.orders import BuyerOrdersStore, OrderAccumulator
        from stores.session import SessionStore
        from stores.watchlist import WatchlistStore

        gateway = gateway or Gateway()
        storage = storage or KeyValueStore()
        watchlist = WatchlistStore(gateway)
        return cls(
            gateway=gateway,
            session=SessionStore(storage, gateway),
            cart=CartStore(gateway),
            watchlist=watchlist,
            buyer_catalog=BuyerCatalogStore(gateway, watchlist),
            admin_catalog=AdminCatalogStore(gateway),
            buyer_orders=BuyerOrdersStore(gateway),
            admin_orders=OrderAccumulator(gateway),
            admin_dashboard=admin_dashboard(gateway),
            buyer_insights=buyer_insights(gateway),
        )

    @property
    def token(self) -> Optional[str]:
        return self.session.session.token

    def reset(self) -> None:
        """Drop per-user caches, used on sign-out."""
        self.cart.clear()
        self.watchlist.reset()
        self.buyer_catalog.reset()
        self.admin_catalog.reset()
        self.buyer_orders.reset()
        self.admin_orders.reset()
        self.admin_dashboard.reset()
        self.buyer_insights.reset()
