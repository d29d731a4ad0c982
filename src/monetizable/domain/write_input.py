"""Values accepted by a monetized attribute setter.

Assignments from application code arrive as arbitrary Python objects. They are
normalized once, at the attribute boundary, into one of the variants below so
that the setter only ever deals with a closed set of shapes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from monetizable.domain.money import Money
from monetizable.errors import InvalidAssignment


@dataclass(frozen=True)
class MoneyInput:
    value: Money


@dataclass(frozen=True)
class IntegerAmount:
    """Whole amount in major units."""

    value: int


@dataclass(frozen=True)
class DecimalAmount:
    """Fractional amount in major units."""

    value: Decimal


@dataclass(frozen=True)
class TextAmount:
    """Non-blank text, numeric or not; parsing happens in the setter."""

    text: str


@dataclass(frozen=True)
class Empty:
    pass


WriteInput = MoneyInput | IntegerAmount | DecimalAmount | TextAmount | Empty

EMPTY = Empty()


def coerce_write_input(value: object, *, field: str | None = None) -> WriteInput:
    if isinstance(value, WriteInput):
        return value
    if value is None:
        return EMPTY
    if isinstance(value, Money):
        return MoneyInput(value)
    # bool is an int subclass but never an amount.
    if isinstance(value, bool):
        raise InvalidAssignment(f"Cannot assign a boolean to a money attribute: {value!r}", field=field, value=value)
    if isinstance(value, int):
        return IntegerAmount(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidAssignment(f"Cannot assign a non-finite amount: {value}", field=field, value=value)
        return DecimalAmount(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAssignment(f"Cannot assign a non-finite amount: {value}", field=field, value=value)
        return DecimalAmount(Decimal(str(value)))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return EMPTY
        return TextAmount(text)
    raise InvalidAssignment(
        f"Cannot assign {type(value).__name__} to a money attribute", field=field, value=value
    )


__all__ = [
    "EMPTY",
    "DecimalAmount",
    "Empty",
    "IntegerAmount",
    "MoneyInput",
    "TextAmount",
    "WriteInput",
    "coerce_write_input",
]
