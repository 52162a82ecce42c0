"""Customer and partner domain service."""

from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.entities import Entity, OwnerKind
from sarrafi.domain.errors import ConflictError, NotFoundError, ValidationError, entity_not_found

ENTITY_KINDS = (OwnerKind.CUSTOMER, OwnerKind.PARTNER)


class EntityService:
    """Service for managing customers and partners."""

    def __init__(self, db: Database):
        """Initialize entity service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_entity(self, kind: OwnerKind, name: str, code: Optional[str] = None) -> int:
        """Create a customer or partner.

        Args:
            kind: OwnerKind.CUSTOMER or OwnerKind.PARTNER
            name: Display name
            code: Optional unique customer code

        Returns:
            Entity ID

        Raises:
            ValidationError: If kind is not customer/partner or name is empty
            ConflictError: If the code is already in use
        """
        if kind not in ENTITY_KINDS:
            raise ValidationError(f"Entity kind must be Customer or Partner, got '{kind.value}'")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Entity name must not be empty")

        if code is not None:
            for existing in self.db.list_entities():
                if existing.code == code:
                    raise ConflictError(f"Entity code '{code}' is already in use")

        return self.db.create_entity(kind=kind, name=name, code=code)

    def get_entity(self, entity_id: int) -> Optional[Entity]:
        """Get entity by ID, or None if not found."""
        return self.db.get_entity(entity_id)

    def require_entity(self, entity_id: int) -> Entity:
        """Get entity by ID.

        Raises:
            NotFoundError: If the entity does not exist
        """
        entity = self.db.get_entity(entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(entity_id))
        return entity

    def list_entities(self, kind: Optional[OwnerKind] = None) -> list[Entity]:
        """List customers and partners, optionally by kind."""
        return self.db.list_entities(kind=kind)
