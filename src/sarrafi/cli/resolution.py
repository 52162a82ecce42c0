"""CLI helpers for account and entity resolution."""

from __future__ import annotations

import click

from sarrafi.cli.error_handling import handle_domain_error
from sarrafi.domain.account import AccountService
from sarrafi.domain.entity import EntityService
from sarrafi.utils.resolvers import resolve_account, resolve_entity


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_entity_or_exit(
    ctx: click.Context, entity_service: EntityService, entity: str | int
) -> int:
    """Resolve customer/partner ID, code or name, or exit with a CLI error."""
    try:
        return resolve_entity(entity_service, entity)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
