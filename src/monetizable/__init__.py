"""Money attributes for SQLAlchemy models backed by integer minor-units columns."""

from monetizable.db.monetize import Monetizable, declare_monetary_field, monetize, register_currency
from monetizable.domain.currency import Currency, CurrencyRegistry, find_currency
from monetizable.domain.money import Money
from monetizable.errors import ConfigurationError, CurrencyMismatchError, InvalidAssignment, MoneyValidationError

__all__ = [
    "ConfigurationError",
    "Currency",
    "CurrencyMismatchError",
    "CurrencyRegistry",
    "InvalidAssignment",
    "Money",
    "MoneyValidationError",
    "Monetizable",
    "declare_monetary_field",
    "find_currency",
    "monetize",
    "register_currency",
]
