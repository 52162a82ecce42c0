"""Exchange rate table and reference-currency conversion."""

import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from sarrafi.domain.entities import Currency, ExchangeRate, REFERENCE_CURRENCY
from sarrafi.domain.errors import ValidationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class RateTable:
    """Immutable snapshot of rates relative to one reference currency.

    A rate is the number of units of a currency per one unit of the
    reference currency, so converting to the reference divides by the rate.
    """

    def __init__(
        self,
        rates: Optional[Mapping[Currency, Decimal]] = None,
        reference: Currency = REFERENCE_CURRENCY,
    ):
        table = {Currency(c): Decimal(r) for c, r in (rates or {}).items()}
        table[reference] = Decimal("1")
        self._rates = table
        self.reference = reference

    @classmethod
    def from_exchange_rates(
        cls, rates: Iterable[ExchangeRate], reference: Currency = REFERENCE_CURRENCY
    ) -> "RateTable":
        return cls({r.currency: r.rate_to_reference for r in rates}, reference=reference)

    def rate(self, currency: Currency) -> Optional[Decimal]:
        """Return the stored rate, or None when there is none."""
        return self._rates.get(currency)

    def has_rate(self, currency: Currency) -> bool:
        rate = self._rates.get(currency)
        return rate is not None and not rate.is_nan() and rate > 0

    def convert(self, amount: Decimal, from_currency: Currency) -> Decimal:
        """Convert an amount to the reference currency.

        A missing or zero rate yields 0 instead of raising, which silently
        drops the amount from totals; the condition is logged so it can be
        audited, and ``missing_rates`` reports it to callers.
        """
        if not self.has_rate(from_currency):
            if amount:
                logger.warning(
                    "No usable rate for %s; %s %s converted as 0 %s",
                    from_currency.value,
                    amount,
                    from_currency.value,
                    self.reference.value,
                )
            return ZERO
        return Decimal(amount) / self._rates[from_currency]

    def missing_rates(self, currencies: Iterable[Currency]) -> tuple[Currency, ...]:
        """Return currencies, in canonical order, that have no usable rate."""
        wanted = set(currencies)
        return tuple(c for c in Currency if c in wanted and not self.has_rate(c))

    def as_dict(self) -> dict[Currency, Decimal]:
        return {c: self._rates[c] for c in Currency if c in self._rates}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RateTable):
            return NotImplemented
        return self.reference == other.reference and self._rates == other._rates

    def __repr__(self) -> str:
        return f"RateTable(reference={self.reference.value}, rates={self.as_dict()!r})"


def validate_rate(rate: Decimal) -> Decimal:
    """Validate a rate entered by an operator.

    Raises:
        ValidationError: If the rate is not a positive number
    """
    if rate is None or Decimal(rate).is_nan() or Decimal(rate) <= 0:
        raise ValidationError(f"Exchange rate must be a positive number, got '{rate}'")
    return Decimal(rate)
