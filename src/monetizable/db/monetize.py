from __future__ import annotations

import logging
from typing import Any, ClassVar, overload

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from sqlalchemy import Integer
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import DeclarativeBase

from monetizable.config import config
from monetizable.domain.currency import Currency, CurrencyCode, CurrencyRegistry, UnknownCurrencyError
from monetizable.domain.money import Money, to_minor_units
from monetizable.domain.write_input import (
    DecimalAmount,
    Empty,
    IntegerAmount,
    MoneyInput,
    TextAmount,
    WriteInput,
    coerce_write_input,
)
from monetizable.errors import ConfigurationError, CurrencyMismatchError, InvalidAssignment

logger = logging.getLogger(__name__)

CENTS_SUFFIX = "_cents"


class FieldOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    with_currency: str | None = None
    allow_nil: bool = False
    currency_column: str | None = None
    strict: bool = False

    @field_validator("with_currency", mode="before")
    @classmethod
    def _normalize_currency(cls, value: Any) -> Any:
        if isinstance(value, Currency):
            return value.iso_code
        if isinstance(value, str):
            return value.strip().upper()
        return value


def accessor_name_for(backing_column: str) -> str:
    if backing_column.endswith(CENTS_SUFFIX) and len(backing_column) > len(CENTS_SUFFIX):
        return backing_column[: -len(CENTS_SUFFIX)]
    return backing_column


class MonetaryField:
    """Exposes an integer minor-units column as a ``Money`` value.

    Reads build a fresh ``Money`` from the backing column and the currency in
    effect for the row. Writes accept ``Money``, whole or fractional major-unit
    amounts (numbers or numeric text) and blanks, and store minor units in the
    backing column. Validity of the stored value is checked when the record is
    saved, see ``monetizable.db.validation``.
    """

    def __init__(
        self,
        backing_column: str,
        *,
        with_currency: CurrencyCode | None = None,
        allow_nil: bool = False,
        currency_column: str | None = None,
        strict: bool = False,
    ) -> None:
        try:
            self.options = FieldOptions(
                with_currency=with_currency,
                allow_nil=allow_nil,
                currency_column=currency_column,
                strict=strict,
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid options for money field {backing_column!r}: {exc}") from exc
        self.backing_column = backing_column
        self.name: str | None = None
        self.owner: type | None = None
        self.currency_column: str | None = None
        self.fixed_currency: Currency | None = None
        self._registry: CurrencyRegistry | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def copy(self) -> MonetaryField:
        """Unbound field with the same column and options, for another owner."""
        field = MonetaryField(self.backing_column, **self.options.model_dump())
        field.name = self.name
        return field

    @property
    def allow_nil(self) -> bool:
        return self.options.allow_nil

    @property
    def registry(self) -> CurrencyRegistry:
        if self._registry is None:
            raise ConfigurationError(f"Money field {self.backing_column!r} is not bound to a model")
        return self._registry

    @property
    def qualified_name(self) -> str:
        owner = self.owner.__name__ if self.owner is not None else "?"
        return f"{owner}.{self.name}"

    def bind(self, owner: type, registry: CurrencyRegistry) -> None:
        if self.owner is not None and self.owner is not owner:
            raise ConfigurationError(
                f"Money field {self.qualified_name} is already bound", model=owner.__name__, field=self.name
            )
        if self.name is None or self.name == self.backing_column:
            raise ConfigurationError(
                f"Money accessor for {self.backing_column!r} needs a name different from its column",
                model=owner.__name__,
                field=self.name,
            )

        fixed_currency = None
        if self.options.with_currency is not None:
            try:
                fixed_currency = registry.find(self.options.with_currency)
            except UnknownCurrencyError as exc:
                raise ConfigurationError(str(exc), model=owner.__name__, field=self.name) from exc

        currency_column = self.options.currency_column or getattr(owner, "__money_currency_column__", None)
        if self.options.strict and currency_column is None:
            raise ConfigurationError(
                "strict money fields need a per-row currency column", model=owner.__name__, field=self.name
            )

        _check_mapped_columns(owner, self.backing_column, currency_column, field=self.name)

        self.owner = owner
        self._registry = registry
        self.fixed_currency = fixed_currency
        self.currency_column = currency_column
        logger.debug(
            "Bound money field %s.%s to column %s (currency=%s, currency_column=%s, allow_nil=%s)",
            owner.__name__,
            self.name,
            self.backing_column,
            fixed_currency,
            currency_column,
            self.allow_nil,
        )

    def resolve_currency(self, instance: object) -> Currency:
        """Currency in effect for ``instance``: row column, field, model, then registry default."""
        if self.currency_column is not None:
            row_currency = getattr(instance, self.currency_column, None)
            if row_currency is not None and not (isinstance(row_currency, str) and not row_currency.strip()):
                return self.registry.find(row_currency)
        if self.fixed_currency is not None:
            return self.fixed_currency
        model_currency = getattr(type(instance), "_money_currency", None)
        if model_currency is not None:
            return model_currency
        return self.registry.default_currency

    @overload
    def __get__(self, instance: None, owner: type | None = None) -> MonetaryField: ...

    @overload
    def __get__(self, instance: object, owner: type | None = None) -> Money | None: ...

    def __get__(self, instance: object | None, owner: type | None = None) -> MonetaryField | Money | None:
        if instance is None:
            return self
        cents = _as_integer(getattr(instance, self.backing_column))
        # Blank or not-yet-validated values have no money representation.
        if cents is None:
            return None
        return Money(cents, self.resolve_currency(instance))

    def __set__(self, instance: object, value: object) -> None:
        write = coerce_write_input(value, field=self.qualified_name)
        if self.options.strict and not isinstance(write, MoneyInput | Empty):
            raise InvalidAssignment(
                f"{self.qualified_name} only accepts Money values, got {type(value).__name__}",
                field=self.qualified_name,
                value=value,
            )
        setattr(instance, self.backing_column, self._minor_units_for(instance, write))

    def _minor_units_for(self, instance: object, write: WriteInput) -> int | str | None:
        if isinstance(write, Empty):
            return None
        if isinstance(write, MoneyInput):
            return self._accept_money(instance, write.value)

        currency = self.resolve_currency(instance)
        if isinstance(write, IntegerAmount | DecimalAmount):
            try:
                return to_minor_units(write.value, currency, rounding=self.registry.rounding)
            except ValueError as exc:
                raise InvalidAssignment(str(exc), field=self.qualified_name, value=write.value) from exc
        if isinstance(write, TextAmount):
            try:
                return to_minor_units(write.text, currency, rounding=self.registry.rounding)
            except ValueError:
                # Kept as-is so that validation reports it on save.
                logger.debug("Non-numeric value %r assigned to %s", write.text, self.qualified_name)
                return write.text
        raise InvalidAssignment(f"Unsupported write input {write!r}", field=self.qualified_name, value=write)

    def _accept_money(self, instance: object, money: Money) -> int:
        if self.currency_column is not None:
            setattr(instance, self.currency_column, money.currency_as_string)
            return money.cents
        expected = self.resolve_currency(instance)
        if money.currency != expected:
            raise CurrencyMismatchError(
                expected=expected.iso_code,
                actual=money.currency_as_string,
                field=self.qualified_name,
                value=money,
            )
        return money.cents

    def __repr__(self) -> str:
        return f"MonetaryField({self.backing_column!r}, name={self.name!r}, options={self.options!r})"


def _as_integer(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("+-").isdigit():
            return int(text)
    return None


def _check_mapped_columns(owner: type, backing_column: str, currency_column: str | None, *, field: str | None) -> None:
    mapper = sa_inspect(owner, raiseerr=False)
    if mapper is None:
        return
    columns = mapper.columns
    if backing_column not in columns:
        raise ConfigurationError(
            f"{owner.__name__} has no column {backing_column!r} to store money in", model=owner.__name__, field=field
        )
    if not isinstance(columns[backing_column].type, Integer):
        raise ConfigurationError(
            f"{owner.__name__}.{backing_column} must be an integer column", model=owner.__name__, field=field
        )
    if currency_column is not None and currency_column not in columns:
        raise ConfigurationError(
            f"{owner.__name__} has no currency column {currency_column!r}", model=owner.__name__, field=field
        )


def monetize(
    backing_column: str,
    *,
    with_currency: CurrencyCode | None = None,
    allow_nil: bool = False,
    currency_column: str | None = None,
    strict: bool = False,
) -> Any:
    """Declare a money attribute in a ``Monetizable`` class body.

    ``price = monetize("price_cents")`` exposes ``price_cents`` as ``price``.
    """
    return MonetaryField(
        backing_column,
        with_currency=with_currency,
        allow_nil=allow_nil,
        currency_column=currency_column,
        strict=strict,
    )


def _registry_for(model: type) -> CurrencyRegistry:
    registry = getattr(model, "__currency_registry__", None)
    if registry is None:
        try:
            registry = CurrencyRegistry.from_settings(config())
        except (UnknownCurrencyError, ValidationError) as exc:
            raise ConfigurationError(f"Invalid money settings: {exc}", model=model.__name__) from exc
    return registry


def _monetized_fields_of(model: type) -> dict[str, MonetaryField]:
    if "__monetized_fields__" not in model.__dict__:
        inherited = getattr(model, "__monetized_fields__", {})
        setattr(model, "__monetized_fields__", dict(inherited))
    return model.__dict__["__monetized_fields__"]


def declare_monetary_field(
    model: type,
    backing_column: str,
    *,
    as_: str | None = None,
    with_currency: CurrencyCode | None = None,
    allow_nil: bool = False,
    currency_column: str | None = None,
    strict: bool = False,
) -> MonetaryField:
    """Install a money attribute on an already defined model.

    The accessor name defaults to ``backing_column`` without its ``_cents``
    suffix.
    """
    name = as_ or accessor_name_for(backing_column)
    existing = model.__dict__.get(name)
    if existing is not None and not isinstance(existing, MonetaryField):
        raise ConfigurationError(f"{model.__name__}.{name} is already defined", model=model.__name__, field=name)

    field = MonetaryField(
        backing_column,
        with_currency=with_currency,
        allow_nil=allow_nil,
        currency_column=currency_column,
        strict=strict,
    )
    field.__set_name__(model, name)
    field.bind(model, _registry_for(model))
    setattr(model, name, field)
    _monetized_fields_of(model)[name] = field
    return field


def register_currency(model: type, code: CurrencyCode) -> Currency:
    """Set the currency used by ``model``'s money fields that have no fixed or per-row currency."""
    try:
        currency = _registry_for(model).find(code)
    except UnknownCurrencyError as exc:
        raise ConfigurationError(str(exc), model=model.__name__) from exc
    setattr(model, "_money_currency", currency)
    logger.debug("Registered currency %s for %s", currency.iso_code, model.__name__)
    return currency


def monetized_fields(model: type) -> dict[str, MonetaryField]:
    return dict(getattr(model, "__monetized_fields__", {}))


def _mixin_fields(cls: type) -> dict[str, MonetaryField]:
    """Fields visible on ``cls`` that come from bases outside the ``Monetizable`` hierarchy."""
    found: dict[str, MonetaryField] = {}
    for base in cls.__mro__[1:]:
        if issubclass(base, Monetizable):
            continue
        for name, value in vars(base).items():
            if isinstance(value, MonetaryField) and name not in found and getattr(cls, name, None) is value:
                found[name] = value
    return found


def monetized_constructor(self: Any, **kwargs: Any) -> None:
    """Keyword constructor for declarative bases.

    Works like SQLAlchemy's default constructor, except that per-row currency
    columns are assigned before any other keyword so that amounts passed
    alongside them are read in the row currency.
    """
    cls = type(self)
    currency_columns = {field.currency_column for field in monetized_fields(cls).values() if field.currency_column}
    for key in sorted(kwargs, key=lambda key: key not in currency_columns):
        if not hasattr(cls, key):
            raise TypeError(f"{key!r} is an invalid keyword argument for {cls.__name__}")
        setattr(self, key, kwargs[key])


class Monetizable:
    """Mixin for mapped classes declaring money attributes.

    Class level settings:

    - ``__currency_registry__``: registry providing the default currency and
      rounding. Defaults to one built from ``MoneySettings``.
    - ``__money_currency__``: currency code registered for the model.
    - ``__money_currency_column__``: name of a per-row currency column shared
      by all money fields of the model.
    """

    __currency_registry__: ClassVar[CurrencyRegistry | None] = None
    __money_currency__: ClassVar[str | None] = None
    __money_currency_column__: ClassVar[str | None] = None
    __monetized_fields__: ClassVar[dict[str, MonetaryField]] = {}
    _money_currency: ClassVar[Currency | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        defines_init = "__init__" in cls.__dict__
        super().__init_subclass__(**kwargs)
        if not defines_init and DeclarativeBase in cls.__bases__:
            setattr(cls, "__init__", monetized_constructor)

        if cls.__dict__.get("__money_currency__") is not None:
            register_currency(cls, cls.__dict__["__money_currency__"])

        fields = _monetized_fields_of(cls)
        new_fields = {name: value for name, value in cls.__dict__.items() if isinstance(value, MonetaryField)}
        for name, field in _mixin_fields(cls).items():
            if name in fields or name in new_fields:
                continue
            # Each model owns its copy of a field declared on a plain mixin.
            own_copy = field.copy()
            setattr(cls, name, own_copy)
            new_fields[name] = own_copy
        if not new_fields:
            return
        registry = _registry_for(cls)
        for name, field in new_fields.items():
            field.bind(cls, registry)
            fields[name] = field

    @classmethod
    def register_currency(cls, code: CurrencyCode) -> Currency:
        return register_currency(cls, code)

    @classmethod
    def model_currency(cls) -> Currency | None:
        return cls._money_currency

    @classmethod
    def monetized_fields(cls) -> dict[str, MonetaryField]:
        return monetized_fields(cls)


__all__ = [
    "CENTS_SUFFIX",
    "FieldOptions",
    "MonetaryField",
    "Monetizable",
    "accessor_name_for",
    "declare_monetary_field",
    "monetize",
    "monetized_constructor",
    "monetized_fields",
    "register_currency",
]
