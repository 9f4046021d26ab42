"""Domain-level exceptions.

Every business rule violation surfaces as an ``OrderError`` carrying a
machine-readable ``ErrorCode`` and the HTTP-style ``status_code`` that an
outer layer can map directly.  The CLI catches ``DomainException``
uniformly and displays the message.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    EMPTY_CART = ("EMPTY_CART", 400)
    RULE_VIOLATION = ("RULE_VIOLATION", 400)
    INSUFFICIENT_STOCK = ("INSUFFICIENT_STOCK", 400)
    INVALID_TRANSITION = ("INVALID_TRANSITION", 400)
    INVALID_STATE = ("INVALID_STATE", 400)
    INVALID_INPUT = ("INVALID_INPUT", 400)
    FORBIDDEN = ("FORBIDDEN", 403)
    NOT_FOUND = ("NOT_FOUND", 404)

    @property
    def status_code(self) -> int:
        return self.value[1]


class DomainException(Exception):
    """Base class for all domain errors."""


class OrderError(DomainException):
    """The single error kind raised by order operations."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status_code(self) -> int:
        return self.code.status_code

    def __repr__(self) -> str:
        return f"OrderError({self.code.name}, {self.message!r})"

    # --- Named constructors ---------------------------------------------------

    @classmethod
    def empty_cart(cls) -> OrderError:
        return cls(ErrorCode.EMPTY_CART, "Cart is empty")

    @classmethod
    def rule_violation(cls, message: str) -> OrderError:
        return cls(ErrorCode.RULE_VIOLATION, message)

    @classmethod
    def insufficient_stock(cls, product_name: str, product_id: int) -> OrderError:
        return cls(
            ErrorCode.INSUFFICIENT_STOCK,
            f'Product "{product_name}" (id={product_id}) is not available '
            f"in the requested quantity",
        )

    @classmethod
    def invalid_transition(cls, current: str, target: str) -> OrderError:
        return cls(
            ErrorCode.INVALID_TRANSITION,
            f'Cannot change status from "{current}" to "{target}"',
        )

    @classmethod
    def invalid_state(cls, message: str) -> OrderError:
        return cls(ErrorCode.INVALID_STATE, message)

    @classmethod
    def invalid_input(cls, message: str) -> OrderError:
        return cls(ErrorCode.INVALID_INPUT, message)

    @classmethod
    def forbidden(cls, message: str) -> OrderError:
        return cls(ErrorCode.FORBIDDEN, message)

    @classmethod
    def not_found(cls, message: str) -> OrderError:
        return cls(ErrorCode.NOT_FOUND, message)
