"""Money and Quantity: the two numeric kernels of an order line."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ordercore.domain.exceptions import OrderError

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Non-negative hryvnia amount; ``str()`` renders two decimals."""

    amount: Decimal
    currency: str = "UAH"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise OrderError.invalid_input(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise OrderError.invalid_input(f"Money amount cannot be negative, got {self.amount}")

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal("0.00"))

    @classmethod
    def of(cls, amount: str | float | int | Decimal) -> Money:
        """Parse user or database input; floats go through ``str`` first."""
        try:
            return cls(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise OrderError.invalid_input(f"Invalid money amount: {amount!r}") from exc

    # Line subtotals and order totals.
    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, units: int) -> Money:
        if not isinstance(units, int):
            raise TypeError(f"Money can only be multiplied by a unit count, got {type(units).__name__}")
        return Money(self.amount * units, self.currency)

    # Minimum order amount check.
    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def quantized(self) -> Decimal:
        return self.amount.quantize(_CENT, rounding=ROUND_HALF_UP)

    def __str__(self) -> str:
        return f"{self.quantized():.2f}"

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise OrderError.invalid_input(f"Cannot combine {self.currency} with {other.currency}")


@dataclass(frozen=True)
class Quantity:
    """Units on an order or cart line; always a positive int."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise OrderError.invalid_input(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise OrderError.invalid_input("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
