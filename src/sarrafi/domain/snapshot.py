"""Balance snapshots: dated captures of an entity's balances."""

import logging
from decimal import Decimal
from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.entities import BalanceSnapshot, Currency
from sarrafi.domain.ledger_service import LedgerService
from sarrafi.domain.reports import format_compact

logger = logging.getLogger(__name__)

ZERO_BALANCE_TEXT = "zero balance"


def snapshot_summary(main_balances: dict[Currency, Decimal], rented_balance: Decimal) -> str:
    """One-line summary such as ``1,000 USD | -50 EUR | 2,000 IRT_BANK (rented)``."""
    parts = [
        f"{format_compact(main_balances[c])} {c.value}"
        for c in Currency
        if main_balances.get(c, 0) != 0
    ]
    if rented_balance != 0:
        parts.append(f"{format_compact(rented_balance)} {Currency.IRT_BANK.value} (rented)")
    return " | ".join(parts) if parts else ZERO_BALANCE_TEXT


class BalanceSnapshotService:
    """Service for recording and listing balance snapshots."""

    def __init__(self, db: Database):
        """Initialize balance snapshot service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = LedgerService(db)

    def create_snapshot(
        self,
        entity_id: int,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Capture the current main and rented balances of an entity.

        Args:
            entity_id: Customer or partner ID
            notes: Optional free-text notes
            created_by: Operator name

        Returns:
            Snapshot ID

        Raises:
            NotFoundError: If the entity does not exist
            DataSourceError: If balances cannot be read
        """
        unified = self.ledger.unified_balance(entity_id)
        main_balances = {c: v for c, v in unified.main_balances.items() if v != 0}
        summary = snapshot_summary(main_balances, unified.rented_balance)
        snapshot_id = self.db.create_balance_snapshot(
            entity_id=entity_id,
            main_balances=main_balances,
            rented_balance=unified.rented_balance,
            summary_text=summary,
            notes=notes,
            created_by=created_by,
        )
        logger.info("Recorded balance snapshot %s for entity %s: %s", snapshot_id, entity_id, summary)
        return snapshot_id

    def list_snapshots(self, entity_id: Optional[int] = None) -> list[BalanceSnapshot]:
        """List snapshots, newest first."""
        return self.db.list_balance_snapshots(entity_id=entity_id)
