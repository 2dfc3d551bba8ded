"""In-process EntityStore.

Holds domain models in dicts guarded by a single lock, so every
compare-and-swap is atomic within the process. Used to exercise the
workflow service without a database.
"""

import dataclasses
import logging
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from festivals.domain import FestivalId, PerformanceId, UserId
from festivals.domain.errors import ConflictError, NotFoundError
from festivals.domain.models import Festival, Performance, User
from festivals.stores.interfaces import (
    STATE_FIELDS,
    UNIQUE_FIELDS,
    Entity,
    EntityId,
    EntityKind,
    EntityStore,
)

logger = logging.getLogger(__name__)

_MODELS = {
    EntityKind.USER: (User, UserId),
    EntityKind.FESTIVAL: (Festival, FestivalId),
    EntityKind.PERFORMANCE: (Performance, PerformanceId),
}


class InMemoryEntityStore(EntityStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entities: dict[EntityKind, dict[EntityId, Entity]] = {kind: {} for kind in EntityKind}

    def get(self, kind: EntityKind, entity_id: EntityId) -> Entity:
        with self._lock:
            entity = self._entities[kind].get(entity_id)
        if entity is None:
            raise NotFoundError(kind.value, entity_id)
        return entity

    def create(self, kind: EntityKind, fields: dict[str, Any]) -> Entity:
        model, id_type = _MODELS[kind]
        values = dict(fields)
        values["id"] = id_type(value=uuid.uuid4())
        if kind is not EntityKind.USER:
            values["created_at"] = datetime.now(timezone.utc)
        entity = model(**values)

        with self._lock:
            self._check_unique(kind, entity)
            self._entities[kind][entity.id] = entity
        return entity

    def compare_and_swap(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum,
        changes: dict[str, Any],
    ) -> Entity:
        state_field = STATE_FIELDS[kind]
        with self._lock:
            current = self._entities[kind].get(entity_id)
            if current is None:
                raise NotFoundError(kind.value, entity_id)
            if getattr(current, state_field) is not expected_state:
                logger.warning(
                    "compare-and-swap conflict on %s %s: expected %s, found %s",
                    kind.value,
                    entity_id,
                    expected_state.value,
                    getattr(current, state_field).value,
                )
                raise ConflictError(f"{kind.value} was modified concurrently")
            updated = dataclasses.replace(current, **changes)
            self._check_unique(kind, updated)
            self._entities[kind][entity_id] = updated
        return updated

    def delete(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum | None = None,
    ) -> None:
        with self._lock:
            current = self._entities[kind].get(entity_id)
            if current is None:
                raise NotFoundError(kind.value, entity_id)
            if expected_state is not None and getattr(current, STATE_FIELDS[kind]) is not expected_state:
                raise ConflictError(f"{kind.value} was modified concurrently")
            del self._entities[kind][entity_id]
            if kind is EntityKind.FESTIVAL:
                self._delete_performances(lambda p: p.festival_id == entity_id)
            elif kind is EntityKind.USER:
                self._remove_user_references(entity_id)

    def find_one(self, kind: EntityKind, filters: dict[str, Any]) -> Entity | None:
        matches = self.find_all(kind, filters)
        return matches[0] if matches else None

    def find_all(self, kind: EntityKind, filters: dict[str, Any] | None = None) -> list[Entity]:
        filters = filters or {}
        with self._lock:
            entities = list(self._entities[kind].values())
        matches = [
            entity
            for entity in entities
            if all(getattr(entity, name) == value for name, value in filters.items())
        ]
        if kind is EntityKind.USER:
            return sorted(matches, key=lambda user: user.username)
        return sorted(matches, key=lambda entity: entity.created_at, reverse=True)

    def _delete_performances(self, predicate) -> None:
        """Must be called with the lock held."""
        performances = self._entities[EntityKind.PERFORMANCE]
        for performance_id in [p.id for p in performances.values() if predicate(p)]:
            del performances[performance_id]

    def _remove_user_references(self, user_id: UserId) -> None:
        """Drop the user's performances, unassign them and remove them as organizer.

        Must be called with the lock held.
        """
        self._delete_performances(lambda p: p.creator_id == user_id)
        performances = self._entities[EntityKind.PERFORMANCE]
        for performance in list(performances.values()):
            if performance.staff_assigned_id == user_id:
                performances[performance.id] = dataclasses.replace(performance, staff_assigned_id=None)
        festivals = self._entities[EntityKind.FESTIVAL]
        for festival in list(festivals.values()):
            if user_id in festival.organizer_ids:
                festivals[festival.id] = dataclasses.replace(
                    festival,
                    organizer_ids=tuple(pk for pk in festival.organizer_ids if pk != user_id),
                )

    def _check_unique(self, kind: EntityKind, entity: Entity) -> None:
        """Must be called with the lock held."""
        for fields in UNIQUE_FIELDS[kind]:
            key = tuple(getattr(entity, name) for name in fields)
            for other in self._entities[kind].values():
                if other.id != entity.id and tuple(getattr(other, name) for name in fields) == key:
                    raise ConflictError(
                        f"{kind.value} with this {' and '.join(fields)} already exists"
                    )
