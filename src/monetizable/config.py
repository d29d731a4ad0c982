from __future__ import annotations

import decimal
from functools import cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MoneySettings(BaseSettings):
    default_currency: str = "USD"
    rounding: str = decimal.ROUND_HALF_UP

    model_config = SettingsConfigDict(env_prefix="MONEY_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("default_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized:
            raise ValueError("default_currency must be non-empty")
        return normalized

    @field_validator("rounding")
    @classmethod
    def _validate_rounding(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized.startswith("ROUND_") or not hasattr(decimal, normalized):
            raise ValueError(f"Unknown decimal rounding mode: {value}")
        return normalized


@cache
def config() -> MoneySettings:
    return MoneySettings()
