"""Account domain service."""

import logging
from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.entities import (
    Account,
    AccountKind,
    AccountStatus,
    Currency,
    Namespace,
    OwnerKind,
)
from sarrafi.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    entity_not_found,
)

logger = logging.getLogger(__name__)

# Ledger namespace each account kind posts into.
ACCOUNT_NAMESPACES = {
    AccountKind.CASHBOX: Namespace.TREASURY,
    AccountKind.BANK: Namespace.TREASURY,
    AccountKind.RENTED: Namespace.RENTED,
    AccountKind.DEDICATED: Namespace.DEDICATED,
}


def namespace_for(account: Account) -> Namespace:
    return ACCOUNT_NAMESPACES[account.kind]


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        kind: AccountKind,
        currency: Currency,
        owner_id: Optional[int] = None,
        bank_name: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Rented accounts always hold IRT_BANK. Dedicated accounts belong to one
        customer or partner; other kinds belong to the business.

        Args:
            name: Account name
            kind: Account kind
            currency: Account currency
            owner_id: Owning entity, required for dedicated accounts
            bank_name: Optional bank name

        Returns:
            Account ID

        Raises:
            ValidationError: If ownership or currency does not fit the kind
            NotFoundError: If the owning entity does not exist
            ConflictError: If account name already exists
        """
        if kind == AccountKind.RENTED and currency != Currency.IRT_BANK:
            raise ValidationError("Rented accounts must hold IRT_BANK")

        owner_kind = OwnerKind.NONE
        if kind == AccountKind.DEDICATED:
            if owner_id is None:
                raise ValidationError("Dedicated accounts need an owning customer or partner")
            owner = self.db.get_entity(owner_id)
            if owner is None:
                raise NotFoundError(entity_not_found(owner_id))
            owner_kind = owner.kind
        elif owner_id is not None:
            raise ValidationError(f"{kind.value.capitalize()} accounts belong to the business")

        # Check if account with same name exists
        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        account_id = self.db.create_account(
            name=name,
            kind=kind,
            currency=currency,
            owner_kind=owner_kind,
            owner_id=owner_id,
            bank_name=bank_name,
        )
        logger.info("Created %s account %s (%s)", kind.value, account_id, currency.value)
        return account_id

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, kind: Optional[AccountKind] = None) -> list[Account]:
        """List accounts, optionally filtered by kind."""
        return self.db.list_accounts(kind=kind)

    def deactivate_account(self, account_id: int) -> None:
        """Deactivate an account. Accounts are never deleted.

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(account_id)
        self.db.update_account_status(account_id, AccountStatus.INACTIVE)
        logger.info("Deactivated account %s", account_id)

    def activate_account(self, account_id: int) -> None:
        """Reactivate a deactivated account.

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(account_id)
        self.db.update_account_status(account_id, AccountStatus.ACTIVE)
        logger.info("Activated account %s", account_id)
