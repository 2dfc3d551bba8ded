"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class UserId:
    """Unique identifier for a User."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FestivalId:
    """Unique identifier for a Festival."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class PerformanceId:
    """Unique identifier for a Performance."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


class Role(Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    ARTIST = "ARTIST"
    STAFF = "STAFF"
    ORGANIZER = "ORGANIZER"


class AccountStatus(Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class FestivalPhase(Enum):
    """Festival phases in their strict linear order."""

    CREATED = "CREATED"
    SUBMISSION = "SUBMISSION"
    ASSIGNMENT = "ASSIGNMENT"
    REVIEW = "REVIEW"
    SCHEDULING = "SCHEDULING"
    FINAL_SUBMISSION = "FINAL_SUBMISSION"
    DECISION = "DECISION"
    ANNOUNCED = "ANNOUNCED"

    @property
    def position(self) -> int:
        return list(FestivalPhase).index(self)

    def successor(self) -> "FestivalPhase | None":
        """Return the next phase, or None for the terminal phase."""
        phases = list(FestivalPhase)
        if self.position + 1 == len(phases):
            return None
        return phases[self.position + 1]


class PerformancePhase(Enum):
    CREATED = "CREATED"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SCHEDULED = "SCHEDULED"
    FINAL_SUBMITTED = "FINAL_SUBMITTED"


@dataclass(frozen=True)
class DateRange:
    """Festival dates; start must not fall after end."""

    start: date | None
    end: date | None

    def __post_init__(self) -> None:
        if self.start and self.end and self.start > self.end:
            raise ValueError("Date range start cannot be after its end")


@dataclass(frozen=True)
class Review:
    """Staff review of a performance."""

    score: int | float
    comments: str

    def __post_init__(self) -> None:
        if isinstance(self.score, bool) or not isinstance(self.score, (int, float)):
            raise ValueError("Review score must be a number")
        if not isinstance(self.comments, str) or not self.comments.strip():
            raise ValueError("Review comments cannot be empty")


@dataclass(frozen=True)
class Principal:
    """Authenticated actor performing a request."""

    identity: UserId
    role: Role

    @property
    def is_authenticated(self) -> bool:
        # Lets DRF permission classes treat the principal as request.user.
        return True
