"""Festival lifecycle: a strictly linear, forward-only state machine.

CREATED -> SUBMISSION -> ASSIGNMENT -> REVIEW -> SCHEDULING
        -> FINAL_SUBMISSION -> DECISION -> ANNOUNCED
"""

from datetime import date
from typing import Any

from festivals.domain.errors import ForbiddenError, InvalidTransitionError, ValidationFailedError
from festivals.domain.models import Festival, User
from festivals.domain.policy import Action
from festivals.domain.value_objects import DateRange, FestivalPhase, Principal, Role

INITIAL_PHASE = FestivalPhase.CREATED

# action -> phase the festival must currently be in
TRANSITIONS: dict[Action, FestivalPhase] = {
    Action.START_SUBMISSION: FestivalPhase.CREATED,
    Action.START_ASSIGNMENT: FestivalPhase.SUBMISSION,
    Action.START_REVIEW: FestivalPhase.ASSIGNMENT,
    Action.START_SCHEDULING: FestivalPhase.REVIEW,
    Action.START_FINAL_SUBMISSION: FestivalPhase.SCHEDULING,
    Action.START_DECISION: FestivalPhase.FINAL_SUBMISSION,
    Action.ANNOUNCE: FestivalPhase.DECISION,
}

EDITABLE_FIELDS = frozenset({"description", "dates", "venue"})


def is_transition(action: Action) -> bool:
    return action in TRANSITIONS


def advance(festival: Festival, action: Action) -> dict[str, Any]:
    """Return the field changes for moving the festival one phase forward.

    Raises:
        InvalidTransitionError: If the festival is not in the action's
            predecessor phase.
    """
    required = TRANSITIONS[action]
    if festival.phase is not required:
        raise InvalidTransitionError(
            action=action.value,
            current_phase=festival.phase,
            message=f"Festival must be in {required.value} phase to {action.value}",
        )
    return {"phase": required.successor()}


def _as_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def parse_dates(raw: Any) -> DateRange:
    """Build a DateRange from a {"start", "end"} mapping."""
    if raw is None:
        return DateRange(start=None, end=None)
    if isinstance(raw, DateRange):
        return raw
    if not isinstance(raw, dict):
        raise ValidationFailedError("Dates must provide start and end", "dates")
    try:
        return DateRange(start=_as_date(raw.get("start")), end=_as_date(raw.get("end")))
    except ValueError as exc:
        raise ValidationFailedError(str(exc), "dates") from exc


def creation_fields(principal: Principal, payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a create payload and return the initial festival fields.

    The creator becomes the first organizer.
    """
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValidationFailedError("Festival name is required", "name")
    return {
        "name": name,
        "description": payload.get("description") or "",
        "dates": parse_dates(payload.get("dates")),
        "venue": payload.get("venue") or "",
        "organizer_ids": (principal.identity,),
        "phase": INITIAL_PHASE,
    }


def require_organizer(festival: Festival, principal: Principal) -> None:
    """ADMINs manage any festival; organizers only the ones they are listed on."""
    if principal.role is Role.ADMIN:
        return
    if not festival.is_organized_by(principal.identity):
        raise ForbiddenError("Only an organizer of this festival can modify it")


def update_fields(festival: Festival, principal: Principal, payload: dict[str, Any]) -> dict[str, Any]:
    require_organizer(festival, principal)
    unknown = set(payload) - EDITABLE_FIELDS
    if unknown:
        field_name = sorted(unknown)[0]
        raise ValidationFailedError(f"Field '{field_name}' cannot be updated", field_name)

    changes: dict[str, Any] = {}
    if "description" in payload:
        changes["description"] = payload["description"] or ""
    if "venue" in payload:
        changes["venue"] = payload["venue"] or ""
    if "dates" in payload:
        raw = payload["dates"]
        if isinstance(raw, dict):
            # A bound missing from the patch keeps its stored value.
            raw = {
                "start": raw["start"] if "start" in raw else festival.dates.start,
                "end": raw["end"] if "end" in raw else festival.dates.end,
            }
        changes["dates"] = parse_dates(raw)
    return changes


def add_organizer_fields(festival: Festival, principal: Principal, organizer: User) -> dict[str, Any]:
    """Append an ORGANIZER to the festival's organizers. The set never shrinks."""
    require_organizer(festival, principal)
    if organizer.role is not Role.ORGANIZER:
        raise ValidationFailedError("User is not an organizer", "organizer_id")
    if festival.is_organized_by(organizer.id):
        return {}
    return {"organizer_ids": festival.organizer_ids + (organizer.id,)}


def check_deletable(festival: Festival) -> None:
    if festival.phase is not INITIAL_PHASE:
        raise InvalidTransitionError(
            action=Action.DELETE_FESTIVAL.value,
            current_phase=festival.phase,
            message="Only a festival in CREATED phase can be deleted",
        )
