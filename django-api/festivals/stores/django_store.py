"""Django ORM implementation of the EntityStore.

Compare-and-swap is a conditional ``UPDATE ... WHERE id = %s AND phase = %s``;
zero affected rows means another writer got there first.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from festivals import cache, models
from festivals.domain import (
    AccountStatus,
    DateRange,
    Festival,
    FestivalId,
    FestivalPhase,
    Performance,
    PerformanceId,
    PerformancePhase,
    Review,
    Role,
    User,
    UserId,
)
from festivals.domain.errors import ConflictError, NotFoundError
from festivals.stores.interfaces import STATE_FIELDS, Entity, EntityId, EntityKind, EntityStore

logger = logging.getLogger(__name__)

_MODELS = {
    EntityKind.USER: models.User,
    EntityKind.FESTIVAL: models.Festival,
    EntityKind.PERFORMANCE: models.Performance,
}

FestivalOrganizer = models.Festival.organizers.through


def _to_user(row: models.User) -> User:
    return User(
        id=UserId(value=row.id),
        username=row.username,
        password_hash=row.password_hash,
        role=Role(row.role),
        account_status=AccountStatus(row.account_status),
    )


def _organizer_ids_by_festival(festival_pks) -> dict[Any, list[Any]]:
    """Organizer ids per festival in insertion order, in one query."""
    grouped: dict[Any, list[Any]] = defaultdict(list)
    rows = (
        FestivalOrganizer.objects.filter(festival_id__in=festival_pks)
        .order_by("pk")
        .values_list("festival_id", "user_id")
    )
    for festival_pk, user_pk in rows:
        grouped[festival_pk].append(user_pk)
    return grouped


def _to_festival(row: models.Festival, organizer_ids=None) -> Festival:
    if organizer_ids is None:
        organizer_ids = _organizer_ids_by_festival([row.pk])[row.pk]
    return Festival(
        id=FestivalId(value=row.id),
        name=row.name,
        description=row.description,
        dates=DateRange(start=row.start_date, end=row.end_date),
        venue=row.venue,
        organizer_ids=tuple(UserId(value=pk) for pk in organizer_ids),
        phase=FestivalPhase(row.phase),
        created_at=row.created_at,
    )


def _to_performance(row: models.Performance) -> Performance:
    review = None
    if row.review_score is not None:
        review = Review(score=row.review_score, comments=row.review_comments or "")
    return Performance(
        id=PerformanceId(value=row.id),
        festival_id=FestivalId(value=row.festival_id),
        name=row.name,
        description=row.description,
        genre=row.genre,
        duration=row.duration,
        band_members=tuple(row.band_members),
        creator_id=UserId(value=row.creator_id),
        phase=PerformancePhase(row.phase),
        created_at=row.created_at,
        staff_assigned_id=UserId(value=row.staff_assigned_id) if row.staff_assigned_id else None,
        review=review,
        setlist=tuple(row.setlist),
        preferred_rehearsal_slots=tuple(row.preferred_rehearsal_slots),
        preferred_performance_slots=tuple(row.preferred_performance_slots),
    )


_CONVERTERS = {
    EntityKind.USER: _to_user,
    EntityKind.FESTIVAL: _to_festival,
    EntityKind.PERFORMANCE: _to_performance,
}


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UserId, FestivalId, PerformanceId)):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


def _columns(fields: dict[str, Any]) -> dict[str, Any]:
    """Translate domain attribute names and values into ORM columns."""
    columns: dict[str, Any] = {}
    for name, value in fields.items():
        if name == "organizer_ids":
            continue
        if name == "id":
            columns["pk"] = _column_value(value)
        elif name == "dates":
            columns["start_date"] = value.start
            columns["end_date"] = value.end
        elif name == "review":
            columns["review_score"] = value.score if value else None
            columns["review_comments"] = value.comments if value else None
        else:
            columns[name] = _column_value(value)
    return columns


class DjangoEntityStore(EntityStore):
    """Database-backed entity store using Django ORM."""

    def get(self, kind: EntityKind, entity_id: EntityId) -> Entity:
        try:
            row = _MODELS[kind].objects.get(pk=entity_id.value)
        except _MODELS[kind].DoesNotExist:
            raise NotFoundError(kind.value, entity_id) from None
        return _CONVERTERS[kind](row)

    def create(self, kind: EntityKind, fields: dict[str, Any]) -> Entity:
        try:
            with transaction.atomic():
                row = _MODELS[kind].objects.create(**_columns(fields))
                for organizer_id in fields.get("organizer_ids", ()):
                    FestivalOrganizer.objects.create(festival_id=row.pk, user_id=organizer_id.value)
        except IntegrityError as exc:
            raise ConflictError(f"{kind.value} already exists") from exc
        return _CONVERTERS[kind](row)

    def compare_and_swap(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum,
        changes: dict[str, Any],
    ) -> Entity:
        model = _MODELS[kind]
        state_field = STATE_FIELDS[kind]
        columns = {state_field: expected_state.value, **_columns(changes)}
        if kind is not EntityKind.USER:
            columns["updated_at"] = timezone.now()

        try:
            with transaction.atomic():
                updated = model.objects.filter(
                    pk=entity_id.value, **{state_field: expected_state.value}
                ).update(**columns)
                if not updated:
                    if not model.objects.filter(pk=entity_id.value).exists():
                        raise NotFoundError(kind.value, entity_id)
                    logger.warning(
                        "compare-and-swap conflict on %s %s: expected %s",
                        kind.value,
                        entity_id,
                        expected_state.value,
                    )
                    raise ConflictError(f"{kind.value} was modified concurrently")
                if "organizer_ids" in changes:
                    self._append_organizers(entity_id, changes["organizer_ids"])
        except IntegrityError as exc:
            raise ConflictError(f"{kind.value} already exists") from exc

        entity = self.get(kind, entity_id)
        if kind is EntityKind.FESTIVAL:
            cache.invalidate_festival(entity_id.value)
        elif kind is EntityKind.PERFORMANCE:
            cache.invalidate_performance(entity_id.value, entity.festival_id.value)
        return entity

    def delete(
        self,
        kind: EntityKind,
        entity_id: EntityId,
        expected_state: Enum | None = None,
    ) -> None:
        model = _MODELS[kind]
        queryset = model.objects.filter(pk=entity_id.value)
        if expected_state is not None:
            queryset = queryset.filter(**{STATE_FIELDS[kind]: expected_state.value})

        with transaction.atomic():
            deleted, _ = queryset.delete()
            if not deleted:
                if not model.objects.filter(pk=entity_id.value).exists():
                    raise NotFoundError(kind.value, entity_id)
                raise ConflictError(f"{kind.value} was modified concurrently")

    def find_one(self, kind: EntityKind, filters: dict[str, Any]) -> Entity | None:
        row = _MODELS[kind].objects.filter(**_columns(filters)).first()
        return _CONVERTERS[kind](row) if row else None

    def find_all(self, kind: EntityKind, filters: dict[str, Any] | None = None) -> list[Entity]:
        rows = list(_MODELS[kind].objects.filter(**_columns(filters or {})))
        if kind is EntityKind.FESTIVAL:
            organizers = _organizer_ids_by_festival([row.pk for row in rows])
            return [_to_festival(row, organizers[row.pk]) for row in rows]
        return [_CONVERTERS[kind](row) for row in rows]

    def _append_organizers(self, festival_id: FestivalId, organizer_ids: tuple[UserId, ...]) -> None:
        existing = set(
            FestivalOrganizer.objects.filter(festival_id=festival_id.value).values_list(
                "user_id", flat=True
            )
        )
        for organizer_id in organizer_ids:
            if organizer_id.value not in existing:
                FestivalOrganizer.objects.create(
                    festival_id=festival_id.value, user_id=organizer_id.value
                )
