from typing import Generator

import pytest
from pydantic import ValidationError

from monetizable.config import MoneySettings, config
from monetizable.db.monetize import Monetizable, monetize
from monetizable.domain.money import Money
from monetizable.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _fresh_config() -> Generator[None, None, None]:
    config.cache_clear()
    yield
    config.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MONEY_DEFAULT_CURRENCY", raising=False)
    monkeypatch.delenv("MONEY_ROUNDING", raising=False)

    settings = MoneySettings(_env_file=None)  # type: ignore[call-arg]

    assert settings.default_currency == "USD"
    assert settings.rounding == "ROUND_HALF_UP"


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONEY_DEFAULT_CURRENCY", " chf ")
    monkeypatch.setenv("MONEY_ROUNDING", "round_down")

    settings = config()

    assert settings.default_currency == "CHF"
    assert settings.rounding == "ROUND_DOWN"
    assert config() is settings


@pytest.mark.parametrize("rounding", ["ROUND_SIDEWAYS", "HALF_UP", "getcontext"])
def test_rejects_unknown_rounding(rounding: str) -> None:
    with pytest.raises(ValidationError):
        MoneySettings(rounding=rounding)


def test_models_without_registry_use_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONEY_DEFAULT_CURRENCY", "sek")
    monkeypatch.setenv("MONEY_ROUNDING", "ROUND_DOWN")

    class Fee(Monetizable):
        amount = monetize("amount_cents")

        def __init__(self) -> None:
            self.amount_cents: int | None = None

    fee = Fee()
    fee.amount = "1.999"

    assert fee.amount_cents == 199
    assert fee.amount == Money(199, "SEK")


def test_unknown_default_currency_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONEY_DEFAULT_CURRENCY", "zzz")

    with pytest.raises(ConfigurationError, match="Invalid money settings"):

        class Fee(Monetizable):
            amount = monetize("amount_cents")
