from festivals.domain.models import Festival, Performance, User
from festivals.domain.policy import Action, permit
from festivals.domain.value_objects import (
    AccountStatus,
    DateRange,
    FestivalId,
    FestivalPhase,
    PerformanceId,
    PerformancePhase,
    Principal,
    Review,
    Role,
    UserId,
)

__all__ = [
    "User",
    "Festival",
    "Performance",
    "Action",
    "permit",
    "AccountStatus",
    "DateRange",
    "FestivalId",
    "FestivalPhase",
    "PerformanceId",
    "PerformancePhase",
    "Principal",
    "Review",
    "Role",
    "UserId",
]
