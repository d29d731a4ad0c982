from __future__ import annotations

from typing import Any, Sequence


class ConfigurationError(Exception):
    """Raised while a record class is being defined with malformed money fields."""

    def __init__(self, message: str, *, model: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.model = model
        self.field = field


class InvalidAssignment(TypeError):
    def __init__(self, message: str, *, field: str | None = None, value: Any | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class CurrencyMismatchError(InvalidAssignment):
    def __init__(self, *, expected: str, actual: str, field: str | None = None, value: Any | None = None) -> None:
        self.expected = expected
        self.actual = actual
        message = f"Currency mismatch: expected {expected}, got {actual}"
        if field is not None:
            message = f"{message} (field={field})"
        super().__init__(message, field=field, value=value)


class MoneyValidationError(Exception):
    """Raised by the flush guard when records with invalid money columns are about to be written."""

    def __init__(self, errors: Sequence[Any]) -> None:
        self.errors = list(errors)
        details = "; ".join(str(error) for error in self.errors)
        super().__init__(f"{len(self.errors)} money validation error(s): {details}")


__all__ = ["ConfigurationError", "CurrencyMismatchError", "InvalidAssignment", "MoneyValidationError"]
