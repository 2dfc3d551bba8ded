"""Performance lifecycle and its guard table.

Every performance transition is guarded on three axes, checked in this
order: the performance's own phase, the parent festival's phase, and the
identity of the actor. Role checks happen earlier, in the access policy.

    CREATED -> SUBMITTED -> REVIEWED -> APPROVED -> FINAL_SUBMITTED
                           REVIEWED -> REJECTED
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from festivals.domain.errors import ForbiddenError, InvalidTransitionError, ValidationFailedError
from festivals.domain.models import Festival, Performance, User
from festivals.domain.policy import Action
from festivals.domain.value_objects import FestivalPhase, PerformancePhase, Principal, Review, Role

INITIAL_PHASE = PerformancePhase.CREATED

EDITABLE_FIELDS = frozenset({"name", "description", "genre", "duration", "band_members"})
FINAL_SUBMISSION_FIELDS = ("setlist", "preferred_rehearsal_slots", "preferred_performance_slots")


class Actor(Enum):
    """Who, beyond their role, may fire a transition."""

    ANY = "any"
    CREATOR = "creator"
    ASSIGNED_STAFF = "assigned_staff"


@dataclass(frozen=True)
class Guard:
    actor: Actor
    from_phases: frozenset[PerformancePhase]
    festival_phase: FestivalPhase | None = None
    to_phase: PerformancePhase | None = None


ALL_PHASES = frozenset(PerformancePhase)

GUARDS: dict[Action, Guard] = {
    Action.SUBMIT_PERFORMANCE: Guard(
        actor=Actor.CREATOR,
        from_phases=frozenset({PerformancePhase.CREATED}),
        festival_phase=FestivalPhase.SUBMISSION,
        to_phase=PerformancePhase.SUBMITTED,
    ),
    Action.REVIEW_PERFORMANCE: Guard(
        actor=Actor.ASSIGNED_STAFF,
        from_phases=frozenset({PerformancePhase.SUBMITTED}),
        to_phase=PerformancePhase.REVIEWED,
    ),
    Action.APPROVE_PERFORMANCE: Guard(
        actor=Actor.ANY,
        from_phases=frozenset({PerformancePhase.REVIEWED}),
        to_phase=PerformancePhase.APPROVED,
    ),
    Action.REJECT_PERFORMANCE: Guard(
        actor=Actor.ANY,
        from_phases=frozenset({PerformancePhase.REVIEWED}),
        to_phase=PerformancePhase.REJECTED,
    ),
    Action.FINAL_SUBMIT_PERFORMANCE: Guard(
        actor=Actor.CREATOR,
        from_phases=frozenset({PerformancePhase.APPROVED}),
        to_phase=PerformancePhase.FINAL_SUBMITTED,
    ),
    Action.ASSIGN_STAFF: Guard(actor=Actor.ANY, from_phases=ALL_PHASES),
    Action.UPDATE_PERFORMANCE: Guard(actor=Actor.CREATOR, from_phases=ALL_PHASES),
    Action.WITHDRAW_PERFORMANCE: Guard(
        actor=Actor.CREATOR,
        from_phases=ALL_PHASES - {PerformancePhase.SUBMITTED},
    ),
}

_ACTOR_MESSAGES = {
    Actor.CREATOR: "Only the creator can {verb} this performance",
    Actor.ASSIGNED_STAFF: "Only the assigned staff member can {verb} this performance",
}

_VERBS = {
    Action.SUBMIT_PERFORMANCE: "submit",
    Action.REVIEW_PERFORMANCE: "review",
    Action.FINAL_SUBMIT_PERFORMANCE: "final-submit",
    Action.UPDATE_PERFORMANCE: "update",
    Action.WITHDRAW_PERFORMANCE: "withdraw",
}


def check_guards(
    action: Action,
    performance: Performance,
    festival: Festival,
    principal: Principal,
) -> Guard:
    """Evaluate the guard row for an action, raising on the first failure."""
    guard = GUARDS[action]

    if performance.phase not in guard.from_phases:
        allowed = ", ".join(sorted(p.value for p in guard.from_phases))
        raise InvalidTransitionError(
            action=action.value,
            current_phase=performance.phase,
            message=f"Performance must be in {allowed} phase to {action.value}",
        )

    if guard.festival_phase is not None and festival.phase is not guard.festival_phase:
        raise InvalidTransitionError(
            action=action.value,
            current_phase=festival.phase,
            message=f"Festival is not in {guard.festival_phase.value} phase",
        )

    if guard.actor is Actor.CREATOR:
        allowed_actor = performance.creator_id == principal.identity
    elif guard.actor is Actor.ASSIGNED_STAFF:
        # An unassigned performance matches nobody.
        allowed_actor = (
            performance.staff_assigned_id is not None
            and performance.staff_assigned_id == principal.identity
        )
    else:
        allowed_actor = True
    if not allowed_actor:
        raise ForbiddenError(
            _ACTOR_MESSAGES[guard.actor].format(verb=_VERBS.get(action, action.value))
        )

    return guard


def _string_list(payload: dict[str, Any], field_name: str, required: bool) -> tuple[str, ...]:
    value = payload.get(field_name)
    if value is None or value == [] or value == ():
        if required:
            raise ValidationFailedError(f"'{field_name}' is required", field_name)
        return ()
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(item, str) and item.strip() for item in value
    ):
        raise ValidationFailedError(f"'{field_name}' must be a list of strings", field_name)
    return tuple(value)


def _duration(payload: dict[str, Any]) -> int | None:
    value = payload.get("duration")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationFailedError("Duration must be a non-negative integer", "duration")
    return value


def _review(payload: dict[str, Any]) -> Review:
    score = payload.get("score")
    comments = payload.get("comments")
    if score is None or not comments:
        raise ValidationFailedError(
            "Score and comments are required for review",
            "score" if score is None else "comments",
        )
    try:
        return Review(score=score, comments=comments)
    except ValueError as exc:
        raise ValidationFailedError(str(exc), "review") from exc


def transition(
    action: Action,
    performance: Performance,
    festival: Festival,
    principal: Principal,
    payload: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the field changes for a phase-changing transition.

    Covers submit, review, approve, reject and final submit.
    """
    guard = check_guards(action, performance, festival, principal)
    payload = payload or {}
    changes: dict[str, Any] = {"phase": guard.to_phase}

    if action is Action.REVIEW_PERFORMANCE:
        changes["review"] = _review(payload)
    elif action is Action.FINAL_SUBMIT_PERFORMANCE:
        for field_name in FINAL_SUBMISSION_FIELDS:
            changes[field_name] = _string_list(payload, field_name, required=True)

    return changes


def assign_staff(
    performance: Performance,
    festival: Festival,
    principal: Principal,
    staff: User,
) -> dict[str, Any]:
    check_guards(Action.ASSIGN_STAFF, performance, festival, principal)
    if staff.role is not Role.STAFF:
        raise ValidationFailedError("Invalid staff member", "staff_id")
    return {"staff_assigned_id": staff.id}


def update_fields(
    performance: Performance,
    festival: Festival,
    principal: Principal,
    payload: dict[str, Any],
) -> dict[str, Any]:
    """Validate a free-form edit. Phase and workflow fields stay untouched."""
    check_guards(Action.UPDATE_PERFORMANCE, performance, festival, principal)
    unknown = set(payload) - EDITABLE_FIELDS
    if unknown:
        field_name = sorted(unknown)[0]
        raise ValidationFailedError(f"Field '{field_name}' cannot be updated", field_name)

    changes: dict[str, Any] = {}
    if "name" in payload:
        name = (payload["name"] or "").strip()
        if not name:
            raise ValidationFailedError("Performance name is required", "name")
        changes["name"] = name
    if "description" in payload:
        changes["description"] = payload["description"] or ""
    if "genre" in payload:
        changes["genre"] = payload["genre"] or ""
    if "duration" in payload:
        changes["duration"] = _duration(payload)
    if "band_members" in payload:
        changes["band_members"] = _string_list(payload, "band_members", required=False)
    return changes


def check_withdrawable(performance: Performance, festival: Festival, principal: Principal) -> None:
    check_guards(Action.WITHDRAW_PERFORMANCE, performance, festival, principal)


def creation_fields(festival: Festival, principal: Principal, payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a create payload. The requesting principal becomes the creator."""
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValidationFailedError("Performance name is required", "name")
    return {
        "festival_id": festival.id,
        "name": name,
        "description": payload.get("description") or "",
        "genre": payload.get("genre") or "",
        "duration": _duration(payload),
        "band_members": _string_list(payload, "band_members", required=False),
        "creator_id": principal.identity,
        "phase": INITIAL_PHASE,
    }
