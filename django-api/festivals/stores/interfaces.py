"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Field names in
``fields``, ``changes`` and ``filters`` are domain model attribute names.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from festivals.domain import Festival, FestivalId, Performance, PerformanceId, User, UserId

Entity = User | Festival | Performance
EntityId = UserId | FestivalId | PerformanceId


class EntityKind(Enum):
    USER = "User"
    FESTIVAL = "Festival"
    PERFORMANCE = "Performance"


# The attribute a compare-and-swap guards on, per kind.
STATE_FIELDS: dict[EntityKind, str] = {
    EntityKind.USER: "account_status",
    EntityKind.FESTIVAL: "phase",
    EntityKind.PERFORMANCE: "phase",
}

# Unique constraints, each a tuple of attribute names.
UNIQUE_FIELDS: dict[EntityKind, tuple[tuple[str, ...], ...]] = {
    EntityKind.USER: (("username",),),
    EntityKind.FESTIVAL: (("name",),),
    EntityKind.PERFORMANCE: (("festival_id", "name"),),
}


class EntityStore(ABC):
    """Interface for User, Festival and Performance persistence."""

    @abstractmethod
    def get(self, kind: EntityKind, entity_id: EntityId) -> Entity:
        """Return the entity.

        Raises:
            NotFoundError: If no entity has this id.
        """
        ...

    @abstractmethod
    def create(self, kind: EntityKind, fields: dict[str, Any]) -> Entity:
        """Persist a new entity, assigning its id and creation time.

        Raises:
            ConflictError: If a unique constraint would be violated.
        """
        ...

    @abstractmethod
    def compare_and_swap(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum,
        changes: dict[str, Any],
    ) -> Entity:
        """Apply changes only if the entity's state still equals expected_state.

        Raises:
            NotFoundError: If the entity no longer exists.
            ConflictError: If the state changed concurrently, or the changes
                violate a unique constraint.
        """
        ...

    @abstractmethod
    def delete(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum | None = None,
    ) -> None:
        """Remove the entity.

        Deleting a festival removes its performances. Deleting a user removes
        the performances they created, clears staff_assigned_id where they
        were the assigned staff and drops them from festival organizers.
        When expected_state is given the delete is a compare-and-swap too.

        Raises:
            NotFoundError: If the entity does not exist.
            ConflictError: If expected_state no longer matches.
        """
        ...

    @abstractmethod
    def find_one(self, kind: EntityKind, filters: dict[str, Any]) -> Entity | None:
        """Return the first entity whose attributes equal filters, or None."""
        ...

    @abstractmethod
    def find_all(self, kind: EntityKind, filters: dict[str, Any] | None = None) -> list[Entity]:
        """Return matching entities, newest first where entities carry created_at."""
        ...
