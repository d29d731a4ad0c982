"""SQLAlchemy integration: money attributes on mapped classes and their validation."""

from monetizable.db.monetize import (
    MonetaryField,
    Monetizable,
    declare_monetary_field,
    monetize,
    monetized_fields,
    register_currency,
)
from monetizable.db.persistence import RecordRepository
from monetizable.db.validation import FieldError, install_flush_guard, remove_flush_guard, validate_record

__all__ = [
    "FieldError",
    "MonetaryField",
    "Monetizable",
    "RecordRepository",
    "declare_monetary_field",
    "install_flush_guard",
    "monetize",
    "monetized_fields",
    "register_currency",
    "remove_flush_guard",
    "validate_record",
]
