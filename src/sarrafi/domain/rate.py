"""Exchange rate domain service."""

import logging
from decimal import Decimal

from sarrafi.database.base import Database
from sarrafi.domain.entities import REFERENCE_CURRENCY, Currency, ExchangeRate
from sarrafi.domain.errors import ValidationError
from sarrafi.domain.rates import RateTable, validate_rate

logger = logging.getLogger(__name__)


class RateService:
    """Service for maintaining exchange rates."""

    def __init__(self, db: Database):
        """Initialize rate service.

        Args:
            db: Database instance
        """
        self.db = db

    def set_rate(self, currency: Currency, rate: Decimal) -> None:
        """Set units of ``currency`` per one USD.

        Raises:
            ValidationError: If the rate is not positive, or the currency is USD
        """
        if currency == REFERENCE_CURRENCY:
            raise ValidationError(f"The {REFERENCE_CURRENCY.value} rate is fixed at 1")
        rate = validate_rate(rate)
        self.db.set_exchange_rate(currency, rate)
        logger.info("Set %s rate to %s per %s", currency.value, rate, REFERENCE_CURRENCY.value)

    def list_rates(self) -> list[ExchangeRate]:
        """Stored rates in canonical currency order."""
        stored = {r.currency: r for r in self.db.list_exchange_rates()}
        return [stored[c] for c in Currency if c in stored]

    def rate_table(self) -> RateTable:
        return RateTable.from_exchange_rates(self.db.list_exchange_rates())
