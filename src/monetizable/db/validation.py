from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from itertools import chain
from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session, UOWTransaction

from monetizable.db.monetize import monetized_fields
from monetizable.errors import MoneyValidationError

logger = logging.getLogger(__name__)

_INTEGER_TEXT = re.compile(r"^\s*[+-]?\d+\s*$")
_NUMERIC_TEXT = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

NOT_A_NUMBER = "is not a number"
NOT_AN_INTEGER = "must be an integer"
BLANK = "can't be blank"


@dataclass(frozen=True)
class FieldError:
    model: str
    attribute: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        return f"{self.model}.{self.attribute} {self.message}"


def check_numericality(value: object, *, allow_nil: bool) -> str | None:
    """Return the reason ``value`` is not an acceptable minor-units value, or ``None``."""
    if value is None:
        return None if allow_nil else BLANK
    if isinstance(value, bool):
        return NOT_A_NUMBER
    if isinstance(value, int):
        return None
    if isinstance(value, str):
        if _INTEGER_TEXT.match(value):
            return None
        if not value.strip():
            return None if allow_nil else BLANK
        if _NUMERIC_TEXT.match(value):
            return NOT_AN_INTEGER
        return NOT_A_NUMBER
    if isinstance(value, float | Decimal):
        return NOT_AN_INTEGER
    return NOT_A_NUMBER


def validate_record(record: object) -> list[FieldError]:
    """Check every money backing column of ``record`` and collect all failures."""
    errors: list[FieldError] = []
    model = type(record)
    for field in monetized_fields(model).values():
        value = getattr(record, field.backing_column)
        message = check_numericality(value, allow_nil=field.allow_nil)
        if message is not None:
            errors.append(FieldError(model=model.__name__, attribute=field.backing_column, message=message, value=value))
    return errors


def _guard_flush(session: Session, flush_context: UOWTransaction, instances: object) -> None:
    errors = list(chain.from_iterable(validate_record(record) for record in chain(session.new, session.dirty)))
    if errors:
        logger.info("Refusing to flush %d invalid money value(s): %s", len(errors), "; ".join(map(str, errors)))
        raise MoneyValidationError(errors)


def install_flush_guard(target: Any = Session) -> None:
    """Validate money columns of new and modified records before every flush of ``target``.

    ``target`` is anything SQLAlchemy session events can be attached to: a
    ``Session`` instance, a ``sessionmaker`` or the ``Session`` class.
    """
    if not event.contains(target, "before_flush", _guard_flush):
        event.listen(target, "before_flush", _guard_flush)


def remove_flush_guard(target: Any = Session) -> None:
    if event.contains(target, "before_flush", _guard_flush):
        event.remove(target, "before_flush", _guard_flush)


__all__ = [
    "BLANK",
    "NOT_AN_INTEGER",
    "NOT_A_NUMBER",
    "FieldError",
    "check_numericality",
    "install_flush_guard",
    "remove_flush_guard",
    "validate_record",
]
