"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in festivals/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime

from festivals.domain.value_objects import (
    AccountStatus,
    DateRange,
    FestivalId,
    FestivalPhase,
    PerformanceId,
    PerformancePhase,
    Review,
    Role,
    UserId,
)


@dataclass(frozen=True)
class User:
    """Domain representation of a User account."""

    id: UserId
    username: str
    password_hash: str
    role: Role
    account_status: AccountStatus = AccountStatus.ACTIVE

    @property
    def phase(self) -> AccountStatus:
        """Account status is the state a user compare-and-swap guards on."""
        return self.account_status


@dataclass(frozen=True)
class Festival:
    """Domain representation of a Festival."""

    id: FestivalId
    name: str
    description: str
    dates: DateRange
    venue: str
    organizer_ids: tuple[UserId, ...]
    phase: FestivalPhase
    created_at: datetime

    def is_organized_by(self, user_id: UserId) -> bool:
        return user_id in self.organizer_ids


@dataclass(frozen=True)
class Performance:
    """Domain representation of a Performance submitted to a Festival."""

    id: PerformanceId
    festival_id: FestivalId
    name: str
    description: str
    genre: str
    duration: int | None
    band_members: tuple[str, ...]
    creator_id: UserId
    phase: PerformancePhase
    created_at: datetime
    staff_assigned_id: UserId | None = None
    review: Review | None = None
    setlist: tuple[str, ...] = ()
    preferred_rehearsal_slots: tuple[str, ...] = ()
    preferred_performance_slots: tuple[str, ...] = ()
