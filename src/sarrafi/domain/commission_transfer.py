"""Commission transfer domain service.

A commission transfer is money a customer or partner sends in to be paid out
elsewhere, less a commission. The service moves transfers through their
workflow and records payment details; bank movements are posted separately
as ordinary deposits and withdrawals linked to the transfer.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.commission import commission_split, transition
from sarrafi.domain.entities import (
    CommissionTransfer,
    CommissionTransferStatus,
    Currency,
    OwnerKind,
)
from sarrafi.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    commission_transfer_not_found,
    entity_not_found,
)
from sarrafi.domain.ledger import validate_amount

logger = logging.getLogger(__name__)

Status = CommissionTransferStatus


class CommissionTransferService:
    """Service for the commission transfer workflow."""

    def __init__(self, db: Database):
        """Initialize commission transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, transfer_id: int) -> CommissionTransfer:
        transfer = self.db.get_commission_transfer(transfer_id)
        if transfer is None:
            raise NotFoundError(commission_transfer_not_found(transfer_id))
        return transfer

    def _require_account(self, account_id: int) -> None:
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

    def _move(self, transfer: CommissionTransfer, target: CommissionTransferStatus) -> CommissionTransfer:
        moved = transition(transfer, target)
        self.db.save_commission_transfer(moved)
        logger.info("Commission transfer %s: %s -> %s", transfer.id, transfer.status.value, target.value)
        return moved

    def log_transfer(
        self,
        initiator_id: Optional[int],
        amount: Decimal,
        currency: Currency,
        commission_percentage: Decimal,
        source_account_number: Optional[str] = None,
        received_into_account_id: Optional[int] = None,
        receipt_serial: Optional[str] = None,
    ) -> int:
        """Log an incoming commission transfer, awaiting deposit approval.

        Args:
            initiator_id: Customer or partner sending the money, or None for a walk-in
            amount: Amount received
            currency: Currency of the amount
            commission_percentage: Commission kept, 0 to 100
            source_account_number: Account the money comes from
            received_into_account_id: Our account receiving the money
            receipt_serial: Deposit receipt serial

        Returns:
            Commission transfer ID

        Raises:
            ValidationError: If amount or percentage is invalid
            NotFoundError: If the initiator or receiving account does not exist
        """
        amount = validate_amount(amount)
        commission_split(amount, commission_percentage)

        initiator_kind = OwnerKind.GUEST
        if initiator_id is not None:
            entity = self.db.get_entity(initiator_id)
            if entity is None:
                raise NotFoundError(entity_not_found(initiator_id))
            initiator_kind = entity.kind
        if received_into_account_id is not None:
            self._require_account(received_into_account_id)

        transfer_id = self.db.create_commission_transfer(
            initiator_kind=initiator_kind,
            initiator_id=initiator_id,
            amount=amount,
            currency=currency,
            commission_percentage=Decimal(commission_percentage),
            source_account_number=source_account_number,
            received_into_account_id=received_into_account_id,
            receipt_serial=receipt_serial,
        )
        logger.info("Logged commission transfer %s of %s %s", transfer_id, amount, currency.value)
        return transfer_id

    def approve_deposit(self, transfer_id: int) -> CommissionTransfer:
        """Confirm the money arrived; the transfer now awaits execution.

        Raises:
            NotFoundError: If the transfer does not exist
            InvalidTransitionError: If the transfer is not awaiting deposit approval
        """
        return self._move(self._require(transfer_id), Status.PENDING_EXECUTION)

    def execute(
        self,
        transfer_id: int,
        paid_from_account_id: int,
        destination_account_number: str,
        execution_receipt_serial: Optional[str] = None,
    ) -> CommissionTransfer:
        """Issue the payout; the transfer then awaits withdrawal approval.

        Records the commission kept and the final amount paid.

        Raises:
            NotFoundError: If the transfer or paying account does not exist
            ValidationError: If no destination account is given
            InvalidTransitionError: If the transfer is not awaiting execution
        """
        transfer = self._require(transfer_id)
        self._require_account(paid_from_account_id)
        if not destination_account_number:
            raise ValidationError("Destination account number is required")
        commission, principal = commission_split(transfer.amount, transfer.commission_percentage)
        executed = replace(
            transfer,
            paid_from_account_id=paid_from_account_id,
            destination_account_number=destination_account_number,
            execution_receipt_serial=execution_receipt_serial,
            commission_amount=commission,
            final_amount_paid=principal,
        )
        return self._move(executed, Status.PENDING_WITHDRAWAL_APPROVAL)

    def approve_withdrawal(self, transfer_id: int) -> CommissionTransfer:
        """Confirm the payout left; the transfer is completed."""
        return self._move(self._require(transfer_id), Status.COMPLETED)

    def reject(self, transfer_id: int) -> CommissionTransfer:
        """Reject a transfer that has not completed."""
        return self._move(self._require(transfer_id), Status.REJECTED)

    def get_transfer(self, transfer_id: int) -> Optional[CommissionTransfer]:
        return self.db.get_commission_transfer(transfer_id)

    def list_transfers(self, status: Optional[CommissionTransferStatus] = None) -> list[CommissionTransfer]:
        """List transfers, newest first."""
        return self.db.list_commission_transfers(status=status)
