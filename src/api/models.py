# wire models of the remote service, as frozen dataclasses with JSON decoders
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from api.dates import parse_instant
from api.errors import DecodingError

T = TypeVar("T")


class Role(str, Enum):
    BUYER = "BUYER"
    ADMIN = "ADMIN"


class OrderStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


# ---------------------------
# field helpers
# ---------------------------


def _obj(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodingError(f"Expected an object, got {type(data).__name__}", raw=data)
    return data


def _req(data: Dict[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise DecodingError(f"Missing field '{key}'", raw=data)
    return data[key]


def _int(data: Dict[str, Any], key: str) -> int:
    val = _req(data, key)
    if isinstance(val, bool) or not isinstance(val, int):
        raise DecodingError(f"Field '{key}' is not an integer", raw=data)
    return val


def _float(data: Dict[str, Any], key: str) -> float:
    val = _req(data, key)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise DecodingError(f"Field '{key}' is not a number", raw=data)
    return float(val)


def _str(data: Dict[str, Any], key: str) -> str:
    val = _req(data, key)
    if not isinstance(val, str):
        raise DecodingError(f"Field '{key}' is not a string", raw=data)
    return val


def _opt(data: Dict[str, Any], key: str, getter: Callable[[Dict[str, Any], str], T]) -> Optional[T]:
    if data.get(key) is None:
        return None
    return getter(data, key)


def _enum(data: Dict[str, Any], key: str, enum_cls):
    val = _req(data, key)
    try:
        return enum_cls(val)
    except ValueError:
        raise DecodingError(f"Unknown {enum_cls.__name__} '{val}'", raw=data)


def _instant(data: Dict[str, Any], key: str) -> datetime:
    return parse_instant(_req(data, key))


def many(decode: Callable[[Any], T]) -> Callable[[Any], List[T]]:
    """Lift a single-item decoder to a decoder of JSON arrays."""

    def decode_list(data: Any) -> List[T]:
        if not isinstance(data, list):
            raise DecodingError("Expected an array", raw=data)
        return [decode(item) for item in data]

    return decode_list


def page_content(decode: Callable[[Any], T]) -> Callable[[Any], List[T]]:
    """
    Decoder for listings that come back either as a bare array or as a paged
    envelope {content, number?, totalPages?, totalElements?}.
    """
    decode_list = many(decode)

    def decode_page(data: Any) -> List[T]:
        if isinstance(data, list):
            return decode_list(data)
        if isinstance(data, dict) and "content" in data:
            return decode_list(data["content"] or [])
        raise DecodingError("Expected an array or a paged envelope", raw=data)

    return decode_page


# ---------------------------
# Auth
# ---------------------------


@dataclass(frozen=True)
class AuthResponse:
    token: str
    role: Role
    username: str
    user_id: int

    @classmethod
    def from_json(cls, data: Any) -> "AuthResponse":
        data = _obj(data)
        return cls(
            token=_str(data, "token"),
            role=_enum(data, "role", Role),
            username=_str(data, "username"),
            user_id=_int(data, "userId"),
        )


@dataclass(frozen=True)
class ErrorPayload:
    error: str
    message: str
    details: Optional[List[str]] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "ErrorPayload":
        data = _obj(data)
        details = data.get("details")
        if details is not None and not (
            isinstance(details, list) and all(isinstance(d, str) for d in details)
        ):
            raise DecodingError("Field 'details' is not a list of strings", raw=data)
        timestamp = data.get("timestamp")
        return cls(
            error=_str(data, "error"),
            message=_str(data, "message"),
            details=details,
            timestamp=str(timestamp) if timestamp is not None else None,
        )


# ---------------------------
# Products
# ---------------------------


@dataclass(frozen=True)
class BuyerProduct:
    id: int
    description: str
    retail_price: float

    @classmethod
    def from_json(cls, data: Any) -> "BuyerProduct":
        data = _obj(data)
        return cls(
            id=_int(data, "id"),
            description=_str(data, "description"),
            retail_price=_float(data, "retailPrice"),
        )


@dataclass(frozen=True)
class AdminProduct:
    id: int
    description: str
    retail_price: float
    wholesale_price: float
    stock_quantity: int

    @classmethod
    def from_json(cls, data: Any) -> "AdminProduct":
        data = _obj(data)
        return cls(
            id=_int(data, "id"),
            description=_str(data, "description"),
            retail_price=_float(data, "retailPrice"),
            wholesale_price=_float(data, "wholesalePrice"),
            stock_quantity=_int(data, "stockQuantity"),
        )


# ---------------------------
# Orders
# ---------------------------


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    description: str
    quantity: int
    unit_retail_price: float
    unit_wholesale_price: Optional[float] = None  # admin view only

    @property
    def subtotal(self) -> float:
        return self.unit_retail_price * self.quantity

    @classmethod
    def from_json(cls, data: Any) -> "OrderItem":
        data = _obj(data)
        return cls(
            product_id=_int(data, "productId"),
            description=_str(data, "description"),
            quantity=_int(data, "quantity"),
            unit_retail_price=_float(data, "unitRetailPrice"),
            unit_wholesale_price=_opt(data, "unitWholesalePrice", _float),
        )


@dataclass(frozen=True)
class OrderSummary:
    id: int
    placed_at: datetime
    status: OrderStatus
    buyer_username: Optional[str] = None  # admin view only

    @classmethod
    def from_json(cls, data: Any) -> "OrderSummary":
        data = _obj(data)
        return cls(
            id=_int(data, "id"),
            placed_at=_instant(data, "placedAt"),
            status=_enum(data, "status", OrderStatus),
            buyer_username=_opt(data, "buyerUsername", _str),
        )


@dataclass(frozen=True)
class Order:
    id: int
    placed_at: datetime
    status: OrderStatus
    items: Tuple[OrderItem, ...] = field(default_factory=tuple)
    buyer_username: Optional[str] = None

    @property
    def total(self) -> float:
        return sum(item.subtotal for item in self.items)

    @classmethod
    def from_json(cls, data: Any) -> "Order":
        data = _obj(data)
        items = data.get("items") or []
        return cls(
            id=_int(data, "id"),
            placed_at=_instant(data, "placedAt"),
            status=_enum(data, "status", OrderStatus),
            items=tuple(many(OrderItem.from_json)(items)),
            buyer_username=_opt(data, "buyerUsername", _str),
        )


@dataclass(frozen=True)
class OrderStatusUpdate:
    order_id: int
    status: OrderStatus

    @classmethod
    def from_json(cls, data: Any) -> "OrderStatusUpdate":
        # {orderId, status} or a whole order body {id, status, ...}
        data = _obj(data)
        key = "orderId" if data.get("orderId") is not None else "id"
        return cls(order_id=_int(data, key), status=_enum(data, "status", OrderStatus))


# ---------------------------
# Aggregates
# ---------------------------


@dataclass(frozen=True)
class TopFrequentItem:
    product_id: int
    description: str
    total_quantity: int

    @classmethod
    def from_json(cls, data: Any) -> "TopFrequentItem":
        data = _obj(data)
        return cls(
            product_id=_int(data, "productId"),
            description=data.get("description") or "",
            total_quantity=_opt(data, "totalQuantity", _int) or 0,
        )


@dataclass(frozen=True)
class TopRecentItem:
    product_id: int
    description: str
    last_purchased_at: Optional[datetime]

    @classmethod
    def from_json(cls, data: Any) -> "TopRecentItem":
        data = _obj(data)
        return cls(
            product_id=_int(data, "productId"),
            description=data.get("description") or "",
            last_purchased_at=_opt(data, "lastPurchasedAt", _instant),
        )


@dataclass(frozen=True)
class ProfitSummary:
    product_id: Optional[int]
    description: str
    total_profit: float

    @classmethod
    def from_json(cls, data: Any) -> "ProfitSummary":
        data = _obj(data)
        return cls(
            product_id=_opt(data, "productId", _int),
            description=data.get("description") or "",
            total_profit=_opt(data, "totalProfit", _float) or 0.0,
        )


@dataclass(frozen=True)
class PopularItem:
    product_id: int
    description: str
    total_quantity: int

    @classmethod
    def from_json(cls, data: Any) -> "PopularItem":
        data = _obj(data)
        return cls(
            product_id=_int(data, "productId"),
            description=data.get("description") or "",
            total_quantity=_opt(data, "totalQuantity", _int) or 0,
        )


@dataclass(frozen=True)
class TotalSold:
    total_items: int

    @classmethod
    def from_json(cls, data: Any) -> "TotalSold":
        data = _obj(data)
        return cls(total_items=_opt(data, "totalItems", _int) or 0)
