"""Commission transfer workflow."""

from dataclasses import replace
from decimal import Decimal

from sarrafi.domain.entities import CommissionTransfer, CommissionTransferStatus
from sarrafi.domain.errors import InvalidTransitionError, ValidationError, invalid_transition

HUNDRED = Decimal("100")

Status = CommissionTransferStatus

TRANSITIONS: dict[CommissionTransferStatus, frozenset[CommissionTransferStatus]] = {
    Status.PENDING_DEPOSIT_APPROVAL: frozenset({Status.PENDING_EXECUTION, Status.REJECTED}),
    Status.PENDING_EXECUTION: frozenset({Status.PENDING_WITHDRAWAL_APPROVAL, Status.REJECTED}),
    Status.PENDING_WITHDRAWAL_APPROVAL: frozenset({Status.COMPLETED, Status.REJECTED}),
    Status.COMPLETED: frozenset(),
    Status.REJECTED: frozenset(),
}

# Funds received but not yet paid out.
LIABILITY_STATUSES = frozenset({Status.PENDING_EXECUTION, Status.PENDING_WITHDRAWAL_APPROVAL})


def can_transition(current: CommissionTransferStatus, target: CommissionTransferStatus) -> bool:
    return target in TRANSITIONS[current]


def transition(transfer: CommissionTransfer, target: CommissionTransferStatus) -> CommissionTransfer:
    """Return a copy of the transfer in the target status.

    Raises:
        InvalidTransitionError: If the workflow does not allow the move
    """
    if not can_transition(transfer.status, target):
        raise InvalidTransitionError(
            invalid_transition(transfer.id, transfer.status.value, target.value)
        )
    return replace(transfer, status=target)


def is_pending_liability(transfer: CommissionTransfer) -> bool:
    return transfer.status in LIABILITY_STATUSES


def commission_split(amount: Decimal, percentage: Decimal) -> tuple[Decimal, Decimal]:
    """Split a received amount into (commission, principal still owed).

    Raises:
        ValidationError: If the percentage is outside 0..100
    """
    percentage = Decimal(percentage)
    if percentage.is_nan() or percentage < 0 or percentage > HUNDRED:
        raise ValidationError(f"Commission percentage must be between 0 and 100, got '{percentage}'")
    commission = amount * percentage / HUNDRED
    return commission, amount - commission
