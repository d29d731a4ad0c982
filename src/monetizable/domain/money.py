from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from monetizable.domain.currency import Currency, CurrencyCode, find_currency
from monetizable.errors import CurrencyMismatchError
from monetizable.utils.formatting import format_amount, format_currency


def to_minor_units(amount: int | Decimal | str, currency: Currency, *, rounding: str = ROUND_HALF_UP) -> int:
    """Convert a major-unit amount into an integer number of minor units."""
    if isinstance(amount, bool):
        raise ValueError("Boolean is not a monetary amount")
    if isinstance(amount, int):
        return amount * currency.subunit_to_unit
    if isinstance(amount, str):
        try:
            amount = Decimal(amount.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a numeric amount: {amount!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {amount}")
    try:
        return int((amount * currency.subunit_to_unit).to_integral_value(rounding=rounding))
    except ArithmeticError as exc:
        raise ValueError(f"Amount out of range: {amount}") from exc


@total_ordering
@dataclass(frozen=True, init=False)
class Money:
    """Amount in minor units together with its currency.

    Equality is structural: two values are equal when both the number of minor
    units and the currency match. Arithmetic and ordering are only defined
    between values of the same currency.
    """

    cents: int
    currency: Currency

    def __init__(self, cents: int, currency: CurrencyCode) -> None:
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise TypeError(f"Money.cents must be an int, got {type(cents).__name__}")
        object.__setattr__(self, "cents", cents)
        object.__setattr__(self, "currency", find_currency(currency))

    @classmethod
    def from_amount(
        cls, amount: int | Decimal | str, currency: CurrencyCode, *, rounding: str = ROUND_HALF_UP
    ) -> Money:
        resolved = find_currency(currency)
        return cls(to_minor_units(amount, resolved, rounding=rounding), resolved)

    @property
    def currency_as_string(self) -> str:
        return self.currency.iso_code

    @property
    def amount(self) -> Decimal:
        return Decimal(self.cents).scaleb(-self.currency.exponent)

    def is_zero(self) -> bool:
        return self.cents == 0

    def format(self) -> str:
        return format_currency(self.amount, self.currency.symbol, self.currency.exponent)

    def _check_currency(self, other: Money) -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(expected=self.currency.iso_code, actual=other.currency.iso_code, value=other)

    def __add__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.cents, self.currency)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.cents < other.cents

    def __str__(self) -> str:
        return f"{format_amount(self.amount, self.currency.exponent)} {self.currency.iso_code}"

    def __repr__(self) -> str:
        return f"Money({self.cents}, {self.currency.iso_code!r})"


__all__ = ["Money", "to_minor_units"]
