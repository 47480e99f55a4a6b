"""Typed outcomes for storefront services.

Services return ``Ok(value)`` or ``Err(kind, message, details)`` for every
expected, user-actionable outcome. Exceptions are left for failures below
the domain (storage outages, constraint violations), which propagate as-is.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    NOT_FOUND = "NotFound"
    INSUFFICIENT_STOCK = "InsufficientStock"
    EMPTY_CART = "EmptyCart"
    INVALID_INPUT = "InvalidInput"
    CONFLICT = "Conflict"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise ValueError(f"{self.kind.value}: {self.message}")

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value, "details": self.details}


Result = Ok[T] | Err


def not_found(message: str, **details: Any) -> Err:
    return Err(ErrorKind.NOT_FOUND, message, details)


def insufficient_stock(message: str, **details: Any) -> Err:
    return Err(ErrorKind.INSUFFICIENT_STOCK, message, details)


def empty_cart(message: str = "Cart is empty", **details: Any) -> Err:
    return Err(ErrorKind.EMPTY_CART, message, details)


def invalid_input(message: str, **details: Any) -> Err:
    return Err(ErrorKind.INVALID_INPUT, message, details)


def conflict(message: str, **details: Any) -> Err:
    return Err(ErrorKind.CONFLICT, message, details)
