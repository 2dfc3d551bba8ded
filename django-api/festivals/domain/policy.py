"""Access policy: which roles may request which actions.

Role checks only. Ownership checks (creator, assigned staff, listed
organizer) depend on entity data and live in the lifecycle modules.
"""

from enum import Enum

from festivals.domain.value_objects import Role


class Action(Enum):
    """Every action the workflow service exposes."""

    # Users
    GET_USER = "get_user"
    CHANGE_PASSWORD = "change_password"
    SET_ACCOUNT_STATUS = "set_account_status"
    DELETE_USER = "delete_user"

    # Festivals
    CREATE_FESTIVAL = "create_festival"
    GET_FESTIVAL = "get_festival"
    LIST_FESTIVALS = "list_festivals"
    UPDATE_FESTIVAL = "update_festival"
    ADD_ORGANIZER = "add_organizer"
    DELETE_FESTIVAL = "delete_festival"
    START_SUBMISSION = "start_submission"
    START_ASSIGNMENT = "start_assignment"
    START_REVIEW = "start_review"
    START_SCHEDULING = "start_scheduling"
    START_FINAL_SUBMISSION = "start_final_submission"
    START_DECISION = "start_decision"
    ANNOUNCE = "announce"

    # Performances
    CREATE_PERFORMANCE = "create_performance"
    GET_PERFORMANCE = "get_performance"
    LIST_PERFORMANCES = "list_performances"
    UPDATE_PERFORMANCE = "update_performance"
    WITHDRAW_PERFORMANCE = "withdraw_performance"
    SUBMIT_PERFORMANCE = "submit_performance"
    ASSIGN_STAFF = "assign_staff"
    REVIEW_PERFORMANCE = "review_performance"
    APPROVE_PERFORMANCE = "approve_performance"
    REJECT_PERFORMANCE = "reject_performance"
    FINAL_SUBMIT_PERFORMANCE = "final_submit_performance"


ANY_ROLE = frozenset(Role)
ORGANIZERS = frozenset({Role.ORGANIZER})

POLICY: dict[Action, frozenset[Role]] = {
    Action.GET_USER: ANY_ROLE,
    Action.CHANGE_PASSWORD: ANY_ROLE,
    Action.SET_ACCOUNT_STATUS: frozenset({Role.ADMIN}),
    Action.DELETE_USER: frozenset({Role.ADMIN}),
    Action.CREATE_FESTIVAL: frozenset({Role.ADMIN, Role.ORGANIZER}),
    Action.GET_FESTIVAL: ANY_ROLE,
    Action.LIST_FESTIVALS: ANY_ROLE,
    Action.UPDATE_FESTIVAL: frozenset({Role.ADMIN, Role.ORGANIZER}),
    Action.ADD_ORGANIZER: frozenset({Role.ADMIN, Role.ORGANIZER}),
    Action.DELETE_FESTIVAL: frozenset({Role.ADMIN}),
    Action.START_SUBMISSION: ORGANIZERS,
    Action.START_ASSIGNMENT: ORGANIZERS,
    Action.START_REVIEW: ORGANIZERS,
    Action.START_SCHEDULING: ORGANIZERS,
    Action.START_FINAL_SUBMISSION: ORGANIZERS,
    Action.START_DECISION: ORGANIZERS,
    Action.ANNOUNCE: ORGANIZERS,
    Action.CREATE_PERFORMANCE: ANY_ROLE,
    Action.GET_PERFORMANCE: ANY_ROLE,
    Action.LIST_PERFORMANCES: ANY_ROLE,
    Action.UPDATE_PERFORMANCE: ANY_ROLE,
    Action.WITHDRAW_PERFORMANCE: ANY_ROLE,
    Action.SUBMIT_PERFORMANCE: ANY_ROLE,
    Action.ASSIGN_STAFF: ORGANIZERS,
    Action.REVIEW_PERFORMANCE: frozenset({Role.STAFF}),
    Action.APPROVE_PERFORMANCE: ORGANIZERS,
    Action.REJECT_PERFORMANCE: ORGANIZERS,
    Action.FINAL_SUBMIT_PERFORMANCE: ANY_ROLE,
}


def permit(role: Role, action: Action) -> bool:
    """Return True if the role may request the action. Unknown pairs deny."""
    if not isinstance(role, Role) or not isinstance(action, Action):
        return False
    return role in POLICY.get(action, frozenset())
