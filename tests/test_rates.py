"""Tests for the exchange rate table."""

import logging
from decimal import Decimal

import pytest

from sarrafi.domain.entities import Currency, ExchangeRate
from sarrafi.domain.errors import ValidationError
from sarrafi.domain.rates import RateTable, validate_rate


class TestRateTable:
    """Tests for RateTable conversion."""

    def test_reference_rate_is_always_one(self):
        table = RateTable({Currency.USD: Decimal("5"), Currency.EUR: Decimal("0.9")})
        assert table.rate(Currency.USD) == Decimal("1")
        assert table.convert(Decimal("250"), Currency.USD) == Decimal("250")

    def test_convert_divides_by_rate(self):
        table = RateTable({Currency.AFN: Decimal("70")})
        assert table.convert(Decimal("7000"), Currency.AFN) == Decimal("100")

    def test_round_trip_within_tolerance(self):
        table = RateTable({Currency.EUR: Decimal("0.9"), Currency.IRT_BANK: Decimal("585000")})
        for currency in (Currency.EUR, Currency.IRT_BANK):
            amount = Decimal("12345.67")
            back = table.convert(amount, currency) * table.rate(currency)
            assert abs(back - amount) < Decimal("1e-9")

    def test_missing_rate_converts_to_zero_and_warns(self, caplog):
        table = RateTable({})
        with caplog.at_level(logging.WARNING, logger="sarrafi.domain.rates"):
            assert table.convert(Decimal("500"), Currency.PKR) == Decimal("0")
        assert "PKR" in caplog.text

    def test_zero_rate_is_treated_as_missing(self):
        table = RateTable({Currency.PKR: Decimal("0")})
        assert table.convert(Decimal("500"), Currency.PKR) == Decimal("0")
        assert not table.has_rate(Currency.PKR)
        assert table.missing_rates([Currency.PKR, Currency.USD]) == (Currency.PKR,)

    def test_missing_rates_in_canonical_order(self):
        table = RateTable({Currency.EUR: Decimal("0.9")})
        missing = table.missing_rates([Currency.IRT_CASH, Currency.AFN, Currency.EUR])
        assert missing == (Currency.AFN, Currency.IRT_CASH)

    def test_from_exchange_rates(self):
        table = RateTable.from_exchange_rates(
            [ExchangeRate(Currency.EUR, Decimal("0.9")), ExchangeRate(Currency.AFN, Decimal("70"))]
        )
        assert table.as_dict() == {
            Currency.USD: Decimal("1"),
            Currency.EUR: Decimal("0.9"),
            Currency.AFN: Decimal("70"),
        }


class TestValidateRate:
    """Tests for operator-entered rates."""

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-1"), Decimal("NaN")])
    def test_rejects_non_positive(self, rate):
        with pytest.raises(ValidationError):
            validate_rate(rate)

    def test_accepts_positive(self):
        assert validate_rate(Decimal("0.92")) == Decimal("0.92")
