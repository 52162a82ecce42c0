"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as duplicate receipt serials or closed accounts."""


class InvalidTransitionError(DomainError):
    """Commission transfer status change not allowed by the workflow."""


class DataSourceError(DomainError):
    """The backing data source failed; no data for this refresh cycle."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def entity_not_found(entity_id: int) -> str:
    """Return message for missing customer or partner."""
    return f"Entity {entity_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing ledger transaction."""
    return f"Transaction {transaction_id} not found"


def commission_transfer_not_found(transfer_id: int) -> str:
    """Return message for missing commission transfer."""
    return f"Commission transfer {transfer_id} not found"


def duplicate_receipt_serial(receipt_serial: str, namespace: str) -> str:
    """Return message for a receipt serial already used in a namespace."""
    return f"Receipt serial '{receipt_serial}' is already recorded in the {namespace} ledger"


def account_inactive(account_id: int) -> str:
    """Return message when posting against a deactivated account."""
    return f"Account {account_id} is inactive"


def invalid_amount(amount: object) -> str:
    """Return message for a non-positive or non-numeric amount."""
    return f"Amount must be a positive number, got '{amount}'"


def invalid_transition(transfer_id: int, current: str, target: str) -> str:
    """Return message for a forbidden commission transfer status change."""
    return f"Commission transfer {transfer_id} cannot move from {current} to {target}"
