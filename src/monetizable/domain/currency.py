from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

if TYPE_CHECKING:
    from monetizable.config import MoneySettings


class UnknownCurrencyError(ValueError):
    def __init__(self, code: object) -> None:
        super().__init__(f"Unknown currency: {code!r}")
        self.code = code


class Currency(BaseModel):
    """ISO 4217 currency metadata.

    ``exponent`` is the number of decimal places of the minor unit, so an amount
    of ``1`` in major units is ``10 ** exponent`` minor units.
    """

    model_config = ConfigDict(frozen=True)

    iso_code: str
    name: str
    symbol: str
    exponent: int = 2

    @model_validator(mode="after")
    def _validate_fields(self) -> Currency:
        if len(self.iso_code) != 3 or not self.iso_code.isalpha() or not self.iso_code.isupper():
            raise ValueError("Currency.iso_code must be three uppercase letters")
        if self.exponent < 0:
            raise ValueError("Currency.exponent must be >= 0")
        return self

    @property
    def subunit_to_unit(self) -> int:
        return 10**self.exponent

    def __str__(self) -> str:
        return self.iso_code


CurrencyCode = Currency | str


def _catalogue(*currencies: Currency) -> Mapping[str, Currency]:
    return MappingProxyType({currency.iso_code: currency for currency in currencies})


CURRENCIES: Mapping[str, Currency] = _catalogue(
    Currency(iso_code="USD", name="United States Dollar", symbol="$"),
    Currency(iso_code="EUR", name="Euro", symbol="€"),
    Currency(iso_code="GBP", name="British Pound", symbol="£"),
    Currency(iso_code="CAD", name="Canadian Dollar", symbol="$"),
    Currency(iso_code="AUD", name="Australian Dollar", symbol="$"),
    Currency(iso_code="NZD", name="New Zealand Dollar", symbol="$"),
    Currency(iso_code="CHF", name="Swiss Franc", symbol="CHF"),
    Currency(iso_code="JPY", name="Japanese Yen", symbol="¥", exponent=0),
    Currency(iso_code="KRW", name="South Korean Won", symbol="₩", exponent=0),
    Currency(iso_code="CNY", name="Chinese Renminbi Yuan", symbol="¥"),
    Currency(iso_code="INR", name="Indian Rupee", symbol="₹"),
    Currency(iso_code="PLN", name="Polish Złoty", symbol="zł"),
    Currency(iso_code="CZK", name="Czech Koruna", symbol="Kč"),
    Currency(iso_code="HUF", name="Hungarian Forint", symbol="Ft"),
    Currency(iso_code="SEK", name="Swedish Krona", symbol="kr"),
    Currency(iso_code="NOK", name="Norwegian Krone", symbol="kr"),
    Currency(iso_code="DKK", name="Danish Krone", symbol="kr"),
    Currency(iso_code="BRL", name="Brazilian Real", symbol="R$"),
    Currency(iso_code="MXN", name="Mexican Peso", symbol="$"),
    Currency(iso_code="BHD", name="Bahraini Dinar", symbol="ب.د", exponent=3),
    Currency(iso_code="KWD", name="Kuwaiti Dinar", symbol="د.ك", exponent=3),
)


def find_currency(code: CurrencyCode) -> Currency:
    """Look up a currency by ISO code, ignoring case and surrounding whitespace.

    Accepts ``Currency`` instances, plain strings and string enum members.
    """
    if isinstance(code, Currency):
        return code
    if isinstance(code, Enum):
        code = code.value
    if not isinstance(code, str):
        raise UnknownCurrencyError(code)
    currency = CURRENCIES.get(code.strip().upper())
    if currency is None:
        raise UnknownCurrencyError(code)
    return currency


@dataclass(frozen=True)
class CurrencyRegistry:
    """Currency lookup together with the fallback currency used when nothing else applies."""

    default_currency: Currency
    rounding: str

    @classmethod
    def create(cls, default_currency: CurrencyCode = "USD", *, rounding: str = "ROUND_HALF_UP") -> CurrencyRegistry:
        return cls(default_currency=find_currency(default_currency), rounding=rounding)

    @classmethod
    def from_settings(cls, settings: MoneySettings) -> CurrencyRegistry:
        return cls.create(settings.default_currency, rounding=settings.rounding)

    def find(self, code: CurrencyCode) -> Currency:
        return find_currency(code)


__all__ = ["CURRENCIES", "Currency", "CurrencyCode", "CurrencyRegistry", "UnknownCurrencyError", "find_currency"]
