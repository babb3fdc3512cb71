"""
Dashboards built from several independent read-only calls.

Every sub-call states what happens when it fails: SWALLOW resolves its slot to
an empty value silently, PROPAGATE resolves the slot to empty as well but also
fails the aggregate. Sub-calls never abort one another.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from api import endpoints
from api.errors import ApiError, InvalidResponse, user_message
from api.gateway import Gateway, Result
from utils.cell import StateCell
from utils.logger import get_logger

_logger = get_logger(__name__)


class FailurePolicy(Enum):
    PROPAGATE = "propagate"
    SWALLOW = "swallow"


@dataclass(frozen=True)
class SubCall:
    name: str
    fetch: Callable[[str], Awaitable[Result]]
    policy: FailurePolicy
    empty: Any = None
    fallback_message: str = "Unable to load data."


@dataclass(frozen=True)
class DashboardSnapshot:
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    loading: bool = False
    error: Optional[str] = None


class DashboardAggregator:
    def __init__(self, calls: Sequence[SubCall]) -> None:
        names = [c.name for c in calls]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate sub-call names: {names}")
        self.calls = tuple(calls)
        self.cell: StateCell[DashboardSnapshot] = StateCell(self._empty_snapshot())

    def _empty_snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(values=MappingProxyType({c.name: c.empty for c in self.calls}))

    @property
    def values(self) -> Mapping[str, Any]:
        return self.cell.value.values

    def reset(self) -> None:
        self.cell.set(self._empty_snapshot())

    @staticmethod
    async def _fetch(call: SubCall, token: str) -> Result:
        """One slot; an exception inside a fetch becomes that slot's failure."""
        try:
            return await call.fetch(token)
        except Exception as e:
            _logger.exception(f"Dashboard call '{call.name}' raised")
            return Result.failure(InvalidResponse(f"{call.name}: {e}"))

    async def load(self, token: str) -> Result[Mapping[str, Any]]:
        """
        Run every sub-call concurrently and publish the joined values.

        Returns a failure carrying the first PROPAGATE error, if any; the values
        of the calls that succeeded are published either way.
        """
        self.cell.set(replace(self.cell.value, loading=True, error=None))
        results = await asyncio.gather(*(self._fetch(c, token) for c in self.calls))

        values: Dict[str, Any] = {}
        errors: List[ApiError] = []
        message = None
        for call, result in zip(self.calls, results):
            if result.ok:
                values[call.name] = result.value
                continue
            values[call.name] = call.empty
            if call.policy is FailurePolicy.PROPAGATE:
                _logger.warning(f"Dashboard call '{call.name}' failed: {result.error}")
                if not errors:
                    message = user_message(result.error, call.fallback_message)
                errors.append(result.error)
            else:
                _logger.debug(f"Dashboard call '{call.name}' failed, using empty value")

        frozen = MappingProxyType(values)
        self.cell.set(DashboardSnapshot(values=frozen, loading=False, error=message))
        if errors:
            return Result.failure(errors[0])
        return Result.success(frozen)


def admin_dashboard(gw: Gateway) -> DashboardAggregator:
    return DashboardAggregator(
        [
            SubCall(
                "orders",
                lambda token: endpoints.admin_orders(gw, token, 0),
                FailurePolicy.PROPAGATE,
                empty=[],
                fallback_message="Unable to load orders.",
            ),
            SubCall(
                "products",
                lambda token: endpoints.admin_products(gw, token),
                FailurePolicy.PROPAGATE,
                empty=[],
                fallback_message="Unable to load products.",
            ),
            SubCall(
                "profit",
                lambda token: endpoints.admin_profit(gw, token),
                FailurePolicy.SWALLOW,
            ),
            SubCall(
                "popular",
                lambda token: endpoints.admin_popular(gw, token),
                FailurePolicy.SWALLOW,
                empty=[],
            ),
            SubCall(
                "total_sold",
                lambda token: endpoints.admin_total_sold(gw, token),
                FailurePolicy.SWALLOW,
            ),
        ]
    )


def buyer_insights(gw: Gateway) -> DashboardAggregator:
    return DashboardAggregator(
        [
            SubCall(
                "frequent",
                lambda token: endpoints.buyer_top_frequent(gw, token),
                FailurePolicy.SWALLOW,
                empty=[],
            ),
            SubCall(
                "recent",
                lambda token: endpoints.buyer_top_recent(gw, token),
                FailurePolicy.SWALLOW,
                empty=[],
            ),
        ]
    )
