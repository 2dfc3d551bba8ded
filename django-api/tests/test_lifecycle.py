"""Unit tests for the festival and performance state machines.

These exercise the guard tables directly, with no store involved.
Run with: pytest tests/test_lifecycle.py -v
"""

import dataclasses
import uuid
from datetime import date, datetime, timezone

import pytest

from festivals.domain import (
    Action,
    DateRange,
    Festival,
    FestivalId,
    FestivalPhase,
    Performance,
    PerformanceId,
    PerformancePhase,
    Principal,
    Role,
    User,
    UserId,
    festival_lifecycle,
    performance_lifecycle,
)
from festivals.domain.errors import ForbiddenError, InvalidTransitionError, ValidationFailedError


def new_user_id() -> UserId:
    return UserId(value=uuid.uuid4())


ORGANIZER = Principal(identity=new_user_id(), role=Role.ORGANIZER)
ARTIST = Principal(identity=new_user_id(), role=Role.ARTIST)
OTHER_ARTIST = Principal(identity=new_user_id(), role=Role.ARTIST)
STAFF = Principal(identity=new_user_id(), role=Role.STAFF)


def make_festival(phase: FestivalPhase = FestivalPhase.CREATED) -> Festival:
    return Festival(
        id=FestivalId(value=uuid.uuid4()),
        name="Rockwave",
        description="",
        dates=DateRange(start=None, end=None),
        venue="Harbour",
        organizer_ids=(ORGANIZER.identity,),
        phase=phase,
        created_at=datetime.now(timezone.utc),
    )


def make_performance(
    phase: PerformancePhase = PerformancePhase.CREATED,
    staff_assigned_id: UserId | None = None,
) -> Performance:
    return Performance(
        id=PerformanceId(value=uuid.uuid4()),
        festival_id=FestivalId(value=uuid.uuid4()),
        name="Night Set",
        description="",
        genre="rock",
        duration=45,
        band_members=("Arlo",),
        creator_id=ARTIST.identity,
        phase=phase,
        created_at=datetime.now(timezone.utc),
        staff_assigned_id=staff_assigned_id,
    )


FINAL_PAYLOAD = {
    "setlist": ["Song1"],
    "preferred_rehearsal_slots": ["Fri 10:00"],
    "preferred_performance_slots": ["Sat 21:00"],
}


class TestFestivalLifecycle:
    def test_walks_every_phase_in_order(self):
        """Each transition moves exactly one step forward."""
        festival = make_festival()
        seen = [festival.phase]
        for action in festival_lifecycle.TRANSITIONS:
            changes = festival_lifecycle.advance(festival, action)
            assert set(changes) == {"phase"}
            festival = dataclasses.replace(festival, **changes)
            seen.append(festival.phase)
        assert seen == list(FestivalPhase)

    @pytest.mark.parametrize("action,required", list(festival_lifecycle.TRANSITIONS.items()))
    def test_rejects_every_phase_but_the_predecessor(self, action, required):
        for phase in FestivalPhase:
            if phase is required:
                continue
            with pytest.raises(InvalidTransitionError) as excinfo:
                festival_lifecycle.advance(make_festival(phase), action)
            assert excinfo.value.current_phase is phase

    def test_same_transition_cannot_fire_twice(self):
        festival = make_festival()
        changes = festival_lifecycle.advance(festival, Action.START_SUBMISSION)
        advanced = dataclasses.replace(festival, **changes)
        with pytest.raises(InvalidTransitionError):
            festival_lifecycle.advance(advanced, Action.START_SUBMISSION)

    def test_announced_is_terminal(self):
        announced = make_festival(FestivalPhase.ANNOUNCED)
        for action in festival_lifecycle.TRANSITIONS:
            with pytest.raises(InvalidTransitionError):
                festival_lifecycle.advance(announced, action)

    def test_creation_sets_creator_as_organizer(self):
        fields = festival_lifecycle.creation_fields(ORGANIZER, {"name": " Rockwave "})
        assert fields["name"] == "Rockwave"
        assert fields["organizer_ids"] == (ORGANIZER.identity,)
        assert fields["phase"] is FestivalPhase.CREATED

    def test_creation_requires_name(self):
        with pytest.raises(ValidationFailedError):
            festival_lifecycle.creation_fields(ORGANIZER, {"name": "  "})

    def test_creation_rejects_inverted_dates(self):
        with pytest.raises(ValidationFailedError) as excinfo:
            festival_lifecycle.creation_fields(
                ORGANIZER, {"name": "Rockwave", "dates": {"start": "2026-07-03", "end": "2026-07-01"}}
            )
        assert excinfo.value.field == "dates"

    def test_update_by_unlisted_organizer_is_forbidden(self):
        outsider = Principal(identity=new_user_id(), role=Role.ORGANIZER)
        with pytest.raises(ForbiddenError):
            festival_lifecycle.update_fields(make_festival(), outsider, {"venue": "Dock"})

    def test_update_cannot_touch_phase(self):
        with pytest.raises(ValidationFailedError):
            festival_lifecycle.update_fields(make_festival(), ORGANIZER, {"phase": "ANNOUNCED"})

    def test_update_keeps_missing_date_bound(self):
        festival = dataclasses.replace(
            make_festival(), dates=DateRange(start=date(2026, 7, 1), end=date(2026, 7, 3))
        )
        changes = festival_lifecycle.update_fields(festival, ORGANIZER, {"dates": {"start": date(2026, 7, 2)}})
        assert changes["dates"] == DateRange(start=date(2026, 7, 2), end=date(2026, 7, 3))

    def test_update_rejects_partial_dates_past_stored_end(self):
        festival = dataclasses.replace(
            make_festival(), dates=DateRange(start=date(2026, 7, 1), end=date(2026, 7, 3))
        )
        with pytest.raises(ValidationFailedError):
            festival_lifecycle.update_fields(festival, ORGANIZER, {"dates": {"start": "2026-07-09"}})

    def test_add_organizer_appends(self):
        newcomer = User(id=new_user_id(), username="nia", password_hash="x", role=Role.ORGANIZER)
        changes = festival_lifecycle.add_organizer_fields(make_festival(), ORGANIZER, newcomer)
        assert changes["organizer_ids"] == (ORGANIZER.identity, newcomer.id)

    def test_add_organizer_requires_organizer_role(self):
        artist = User(id=ARTIST.identity, username="arlo", password_hash="x", role=Role.ARTIST)
        with pytest.raises(ValidationFailedError):
            festival_lifecycle.add_organizer_fields(make_festival(), ORGANIZER, artist)

    def test_only_created_festival_is_deletable(self):
        festival_lifecycle.check_deletable(make_festival())
        with pytest.raises(InvalidTransitionError):
            festival_lifecycle.check_deletable(make_festival(FestivalPhase.SUBMISSION))


class TestSubmitGuard:
    """submit needs creator AND festival SUBMISSION AND performance CREATED."""

    def test_all_guards_hold(self):
        changes = performance_lifecycle.transition(
            Action.SUBMIT_PERFORMANCE, make_performance(), make_festival(FestivalPhase.SUBMISSION), ARTIST
        )
        assert changes == {"phase": PerformancePhase.SUBMITTED}

    def test_festival_not_in_submission(self):
        with pytest.raises(InvalidTransitionError) as excinfo:
            performance_lifecycle.transition(
                Action.SUBMIT_PERFORMANCE, make_performance(), make_festival(FestivalPhase.CREATED), ARTIST
            )
        assert excinfo.value.current_phase is FestivalPhase.CREATED

    def test_performance_not_created(self):
        with pytest.raises(InvalidTransitionError) as excinfo:
            performance_lifecycle.transition(
                Action.SUBMIT_PERFORMANCE,
                make_performance(PerformancePhase.SUBMITTED),
                make_festival(FestivalPhase.SUBMISSION),
                ARTIST,
            )
        assert excinfo.value.current_phase is PerformancePhase.SUBMITTED

    def test_actor_not_creator(self):
        with pytest.raises(ForbiddenError):
            performance_lifecycle.transition(
                Action.SUBMIT_PERFORMANCE, make_performance(), make_festival(FestivalPhase.SUBMISSION), OTHER_ARTIST
            )


class TestReviewGuard:
    def test_review_sets_review_and_phase(self):
        performance = make_performance(PerformancePhase.SUBMITTED, staff_assigned_id=STAFF.identity)
        changes = performance_lifecycle.transition(
            Action.REVIEW_PERFORMANCE, performance, make_festival(), STAFF, {"score": 8, "comments": "good"}
        )
        assert changes["phase"] is PerformancePhase.REVIEWED
        assert changes["review"].score == 8
        assert changes["review"].comments == "good"

    @pytest.mark.parametrize("payload", [{"comments": "good"}, {"score": 8}, {"score": 8, "comments": ""}, {}])
    def test_missing_score_or_comments(self, payload):
        performance = make_performance(PerformancePhase.SUBMITTED, staff_assigned_id=STAFF.identity)
        with pytest.raises(ValidationFailedError):
            performance_lifecycle.transition(
                Action.REVIEW_PERFORMANCE, performance, make_festival(), STAFF, payload
            )

    def test_unassigned_performance_is_forbidden(self):
        performance = make_performance(PerformancePhase.SUBMITTED)
        with pytest.raises(ForbiddenError):
            performance_lifecycle.transition(
                Action.REVIEW_PERFORMANCE, performance, make_festival(), STAFF, {"score": 8, "comments": "good"}
            )

    def test_other_staff_is_forbidden(self):
        performance = make_performance(PerformancePhase.SUBMITTED, staff_assigned_id=new_user_id())
        with pytest.raises(ForbiddenError):
            performance_lifecycle.transition(
                Action.REVIEW_PERFORMANCE, performance, make_festival(), STAFF, {"score": 8, "comments": "good"}
            )

    def test_review_ignores_festival_phase(self):
        """Review may lag behind the festival's later phases."""
        performance = make_performance(PerformancePhase.SUBMITTED, staff_assigned_id=STAFF.identity)
        changes = performance_lifecycle.transition(
            Action.REVIEW_PERFORMANCE,
            performance,
            make_festival(FestivalPhase.ANNOUNCED),
            STAFF,
            {"score": 3, "comments": "late"},
        )
        assert changes["phase"] is PerformancePhase.REVIEWED


class TestDecisionGuards:
    @pytest.mark.parametrize(
        "action,target",
        [
            (Action.APPROVE_PERFORMANCE, PerformancePhase.APPROVED),
            (Action.REJECT_PERFORMANCE, PerformancePhase.REJECTED),
        ],
    )
    def test_from_reviewed(self, action, target):
        changes = performance_lifecycle.transition(
            action, make_performance(PerformancePhase.REVIEWED), make_festival(), ORGANIZER
        )
        assert changes == {"phase": target}

    @pytest.mark.parametrize("phase", [p for p in PerformancePhase if p is not PerformancePhase.REVIEWED])
    def test_approve_needs_reviewed(self, phase):
        with pytest.raises(InvalidTransitionError):
            performance_lifecycle.transition(
                Action.APPROVE_PERFORMANCE, make_performance(phase), make_festival(), ORGANIZER
            )


class TestFinalSubmitGuard:
    def test_sets_all_three_fields(self):
        changes = performance_lifecycle.transition(
            Action.FINAL_SUBMIT_PERFORMANCE,
            make_performance(PerformancePhase.APPROVED),
            make_festival(),
            ARTIST,
            FINAL_PAYLOAD,
        )
        assert changes == {
            "phase": PerformancePhase.FINAL_SUBMITTED,
            "setlist": ("Song1",),
            "preferred_rehearsal_slots": ("Fri 10:00",),
            "preferred_performance_slots": ("Sat 21:00",),
        }

    @pytest.mark.parametrize("field_name", list(FINAL_PAYLOAD))
    def test_each_field_must_be_non_empty(self, field_name):
        payload = {**FINAL_PAYLOAD, field_name: []}
        with pytest.raises(ValidationFailedError) as excinfo:
            performance_lifecycle.transition(
                Action.FINAL_SUBMIT_PERFORMANCE,
                make_performance(PerformancePhase.APPROVED),
                make_festival(),
                ARTIST,
                payload,
            )
        assert excinfo.value.field == field_name

    def test_only_creator(self):
        with pytest.raises(ForbiddenError):
            performance_lifecycle.transition(
                Action.FINAL_SUBMIT_PERFORMANCE,
                make_performance(PerformancePhase.APPROVED),
                make_festival(),
                OTHER_ARTIST,
                FINAL_PAYLOAD,
            )

    def test_requires_approved(self):
        with pytest.raises(InvalidTransitionError):
            performance_lifecycle.transition(
                Action.FINAL_SUBMIT_PERFORMANCE,
                make_performance(PerformancePhase.REVIEWED),
                make_festival(),
                ARTIST,
                FINAL_PAYLOAD,
            )


class TestWithdrawGuard:
    @pytest.mark.parametrize("phase", [p for p in PerformancePhase if p is not PerformancePhase.SUBMITTED])
    def test_creator_may_withdraw_outside_submitted(self, phase):
        performance_lifecycle.check_withdrawable(make_performance(phase), make_festival(), ARTIST)

    @pytest.mark.parametrize("actor", [ARTIST, OTHER_ARTIST])
    def test_submitted_cannot_be_withdrawn_by_anyone(self, actor):
        with pytest.raises(InvalidTransitionError):
            performance_lifecycle.check_withdrawable(
                make_performance(PerformancePhase.SUBMITTED), make_festival(), actor
            )

    def test_non_creator_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            performance_lifecycle.check_withdrawable(make_performance(), make_festival(), OTHER_ARTIST)


class TestAssignStaffAndUpdate:
    def test_assign_staff(self):
        staff_user = User(id=STAFF.identity, username="sam", password_hash="x", role=Role.STAFF)
        changes = performance_lifecycle.assign_staff(make_performance(), make_festival(), ORGANIZER, staff_user)
        assert changes == {"staff_assigned_id": STAFF.identity}

    def test_assign_non_staff_fails_validation(self):
        artist_user = User(id=ARTIST.identity, username="arlo", password_hash="x", role=Role.ARTIST)
        with pytest.raises(ValidationFailedError):
            performance_lifecycle.assign_staff(make_performance(), make_festival(), ORGANIZER, artist_user)

    def test_update_editable_fields(self):
        changes = performance_lifecycle.update_fields(
            make_performance(), make_festival(), ARTIST, {"genre": "jazz", "duration": 30, "band_members": ["A", "B"]}
        )
        assert changes == {"genre": "jazz", "duration": 30, "band_members": ("A", "B")}

    @pytest.mark.parametrize("field_name", ["phase", "creator_id", "festival_id", "review", "staff_assigned_id"])
    def test_update_rejects_workflow_fields(self, field_name):
        with pytest.raises(ValidationFailedError) as excinfo:
            performance_lifecycle.update_fields(make_performance(), make_festival(), ARTIST, {field_name: "x"})
        assert excinfo.value.field == field_name

    def test_update_rejects_negative_duration(self):
        with pytest.raises(ValidationFailedError):
            performance_lifecycle.update_fields(make_performance(), make_festival(), ARTIST, {"duration": -5})

    def test_update_only_by_creator(self):
        with pytest.raises(ForbiddenError):
            performance_lifecycle.update_fields(make_performance(), make_festival(), OTHER_ARTIST, {"genre": "jazz"})
