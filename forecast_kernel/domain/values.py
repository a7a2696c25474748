"""
Values -- Currency and Money, the types every forecast amount is expressed in.

Responsibility:
    Keep amounts exact (Decimal, never float) and never separated from
    their currency.  Rounding happens only when a caller asks for it,
    once, on the final figures.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - ValueError: unknown currency, unparseable amount, or arithmetic
      and comparisons that mix currencies.  Mixing currencies is a
      programming error, never a data condition.
    - TypeError: currency that is neither a Currency nor a code string.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from forecast_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """A supported ISO 4217 code, normalized to upper case."""

    code: str

    def __post_init__(self) -> None:
        if not CurrencyRegistry.is_valid(self.code):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", CurrencyRegistry.normalize(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def name(self) -> str:
        return CurrencyRegistry.get_info(self.code).name

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


def _as_currency(value: Currency | str) -> Currency:
    if isinstance(value, Currency):
        return value
    if isinstance(value, str):
        return Currency(value)
    raise TypeError(f"currency must be Currency or str, got {type(value)}")


def _as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value}") from e


@functools.total_ordering
@dataclass(frozen=True, slots=True)
class Money:
    """
    An exact amount in one currency.

    Equality compares amounts numerically, so ``2.50 EUR == 2.5 EUR``.
    Addition, subtraction and ordering require the same currency.
    Multiplication takes a plain factor (Decimal, int or numeric str).
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _as_decimal(self.amount))
        object.__setattr__(self, "currency", _as_currency(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=_as_decimal(amount), currency=_as_currency(currency))

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=_as_currency(currency))

    @property
    def is_zero(self) -> bool:
        return self.amount.is_zero()

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Copy quantized to the currency's decimal places."""
        quantum = Decimal(1).scaleb(-self.currency.decimal_places)
        return Money(self.amount.quantize(quantum, rounding=rounding), self.currency)

    def _same_currency(self, other: Money, verb: str) -> None:
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {verb} Money in {self.currency} and {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (Decimal, int, str)):
            return NotImplemented
        return Money(self.amount * _as_decimal(factor), self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other, "compare")
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"
