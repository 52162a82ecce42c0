"""Utilities for resolving account and entity references to IDs."""

from sarrafi.domain.account import AccountService
from sarrafi.domain.entity import EntityService
from sarrafi.domain.errors import NotFoundError, ValidationError


def _as_id(reference: str | int) -> int | None:
    if isinstance(reference, int):
        return reference
    try:
        return int(reference)
    except (ValueError, TypeError):
        return None


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name, or ID as int or numeric string

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    account_id = _as_id(account)
    if account_id is not None:
        if account_service.get_account(account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    for acc in account_service.list_accounts():
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")


def resolve_entity(entity_service: EntityService, entity: str | int) -> int:
    """Resolve a customer or partner by ID, code or name.

    Names must be unique to resolve; codes always are.

    Raises:
        NotFoundError: If nothing matches
        ValidationError: If a name matches more than one entity
    """
    entity_id = _as_id(entity)
    if entity_id is not None:
        if entity_service.get_entity(entity_id) is None:
            raise NotFoundError(f"Entity ID {entity_id} not found")
        return entity_id

    entities = entity_service.list_entities()
    for ent in entities:
        if ent.code is not None and ent.code == entity:
            return ent.id

    matches = [ent for ent in entities if ent.name == entity]
    if len(matches) > 1:
        ids = ", ".join(str(ent.id) for ent in matches)
        raise ValidationError(f"Name '{entity}' matches several entities ({ids}); use an ID or code")
    if matches:
        return matches[0].id

    raise NotFoundError(f"Entity '{entity}' not found")
