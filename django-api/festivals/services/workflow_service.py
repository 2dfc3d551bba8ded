"""Workflow service - all business logic lives here.

The service:
- Depends only on interfaces (entity store, credentials, tokens)
- Consults the access policy before anything else
- Delegates guards and field changes to the lifecycle modules
- Persists each action as a single store write (create, compare-and-swap
  or delete), so a failed request leaves nothing behind
- Returns domain models or raises domain errors; it never retries
"""

import logging
from functools import partial
from typing import Any, Callable

from festivals.domain import (
    AccountStatus,
    Action,
    Festival,
    FestivalId,
    Performance,
    PerformanceId,
    Principal,
    Role,
    User,
    UserId,
    festival_lifecycle,
    performance_lifecycle,
    permit,
)
from festivals.domain.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from festivals.services.credentials import CredentialService
from festivals.services.tokens import TokenService
from festivals.stores.interfaces import Entity, EntityKind, EntityStore

logger = logging.getLogger(__name__)

Handler = Callable[[Principal, Any, dict[str, Any]], Any]


def _parse_id(id_type, kind: EntityKind, raw: Any):
    """Accept a typed id or its string form; anything else does not exist."""
    if isinstance(raw, id_type):
        return raw
    try:
        return id_type.from_string(raw)
    except (TypeError, ValueError, AttributeError):
        raise NotFoundError(kind.value, raw) from None


def _required(payload: dict[str, Any], field_name: str) -> Any:
    value = payload.get(field_name)
    if value is None or value == "":
        raise ValidationFailedError(f"'{field_name}' is required", field_name)
    return value


class WorkflowService:
    """Coordinates user, festival and performance actions.

    Usage:
        >>> service = WorkflowService(store, credentials, tokens)
        >>> service.execute(principal, Action.START_SUBMISSION, festival_id)
    """

    def __init__(
        self,
        store: EntityStore,
        credentials: CredentialService,
        tokens: TokenService,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._tokens = tokens

        self._handlers: dict[Action, Handler] = {
            Action.GET_USER: self._get_user,
            Action.CHANGE_PASSWORD: self._change_password,
            Action.SET_ACCOUNT_STATUS: self._set_account_status,
            Action.DELETE_USER: self._delete_user,
            Action.CREATE_FESTIVAL: self._create_festival,
            Action.GET_FESTIVAL: self._get_festival,
            Action.LIST_FESTIVALS: self._list_festivals,
            Action.UPDATE_FESTIVAL: self._update_festival,
            Action.ADD_ORGANIZER: self._add_organizer,
            Action.DELETE_FESTIVAL: self._delete_festival,
            Action.CREATE_PERFORMANCE: self._create_performance,
            Action.GET_PERFORMANCE: self._get_performance,
            Action.LIST_PERFORMANCES: self._list_performances,
            Action.UPDATE_PERFORMANCE: self._update_performance,
            Action.WITHDRAW_PERFORMANCE: self._withdraw_performance,
            Action.ASSIGN_STAFF: self._assign_staff,
        }
        for action in festival_lifecycle.TRANSITIONS:
            self._handlers[action] = partial(self._advance_festival, action)
        for action in (
            Action.SUBMIT_PERFORMANCE,
            Action.REVIEW_PERFORMANCE,
            Action.APPROVE_PERFORMANCE,
            Action.REJECT_PERFORMANCE,
            Action.FINAL_SUBMIT_PERFORMANCE,
        ):
            self._handlers[action] = partial(self._transition_performance, action)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def execute(
        self,
        principal: Principal,
        action: Action,
        target_id: Any = None,
        payload: dict[str, Any] | None = None,
    ) -> Entity | list[Entity] | None:
        """Run one action on behalf of a principal.

        Raises:
            ForbiddenError: If the role or an ownership guard denies the action.
            NotFoundError: If the target (or a referenced entity) does not exist.
            InvalidTransitionError: If an entity is in the wrong phase.
            ValidationFailedError: If the payload is incomplete or malformed.
            ConflictError: On a uniqueness violation or a lost race.
        """
        try:
            self.authorize(principal, action)
            return self._handlers[action](principal, target_id, payload or {})
        except DomainError as exc:
            logger.warning(
                "%s on %s by %s rejected: %s",
                action.value,
                target_id,
                principal.identity,
                exc.code.value,
            )
            raise

    def authorize(self, principal: Principal, action: Action) -> None:
        """Raise ForbiddenError unless the principal's role may request the action."""
        if not permit(principal.role, action) or action not in self._handlers:
            raise ForbiddenError(f"Role {principal.role.value} may not {action.value}")

    def register(self, payload: dict[str, Any]) -> User:
        """Create an ACTIVE account. No principal is needed."""
        username = str(_required(payload, "username")).strip()
        password = _required(payload, "password")
        try:
            role = Role(_required(payload, "role"))
        except ValueError:
            raise ValidationFailedError("Unknown role", "role") from None

        if self._store.find_one(EntityKind.USER, {"username": username}):
            raise ConflictError("Username is already taken")
        user = self._store.create(
            EntityKind.USER,
            {
                "username": username,
                "password_hash": self._credentials.hash(password),
                "role": role,
                "account_status": AccountStatus.ACTIVE,
            },
        )
        logger.info("registered user %s with role %s", user.id, role.value)
        return user

    def login(self, username: str, password: str) -> str:
        """Verify credentials and return a principal token.

        Raises:
            AuthenticationError: If the username or password is wrong.
            ForbiddenError: If the account is INACTIVE.
        """
        user = self._store.find_one(EntityKind.USER, {"username": username})
        if user is None or not self._credentials.verify(password or "", user.password_hash):
            raise AuthenticationError()
        if user.account_status is AccountStatus.INACTIVE:
            raise ForbiddenError("Account is inactive. Contact an administrator.")
        return self._tokens.issue(user)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def _get_user(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> User:
        user_id = _parse_id(UserId, EntityKind.USER, target_id)
        if principal.role is not Role.ADMIN and principal.identity != user_id:
            raise ForbiddenError("Users can only view their own account")
        return self._store.get(EntityKind.USER, user_id)

    def _change_password(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> User:
        if not payload.get("old_password") or not payload.get("new_password"):
            raise ValidationFailedError("Old password and new password are required", "new_password")
        user = self._store.get(EntityKind.USER, principal.identity)
        if not self._credentials.verify(payload["old_password"], user.password_hash):
            raise ValidationFailedError("Old password is incorrect", "old_password")
        return self._store.compare_and_swap(
            EntityKind.USER,
            user.id,
            user.account_status,
            {"password_hash": self._credentials.hash(payload["new_password"])},
        )

    def _set_account_status(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> User:
        try:
            status = AccountStatus(payload.get("status"))
        except ValueError:
            raise ValidationFailedError("Invalid status. Use 'ACTIVE' or 'INACTIVE'.", "status") from None
        user = self._store.get(EntityKind.USER, _parse_id(UserId, EntityKind.USER, target_id))
        updated = self._store.compare_and_swap(
            EntityKind.USER, user.id, user.account_status, {"account_status": status}
        )
        logger.info("user %s status %s -> %s", user.id, user.account_status.value, status.value)
        return updated

    def _delete_user(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> None:
        user_id = _parse_id(UserId, EntityKind.USER, target_id)
        self._store.delete(EntityKind.USER, user_id)
        logger.info("deleted user %s", user_id)

    # ------------------------------------------------------------------
    # Festivals
    # ------------------------------------------------------------------

    def _load_festival(self, target_id: Any) -> Festival:
        return self._store.get(EntityKind.FESTIVAL, _parse_id(FestivalId, EntityKind.FESTIVAL, target_id))

    def _create_festival(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Festival:
        fields = festival_lifecycle.creation_fields(principal, payload)
        if self._store.find_one(EntityKind.FESTIVAL, {"name": fields["name"]}):
            raise ConflictError("Festival name must be unique")
        festival = self._store.create(EntityKind.FESTIVAL, fields)
        logger.info("festival %s created by %s", festival.id, principal.identity)
        return festival

    def _get_festival(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Festival:
        return self._load_festival(target_id)

    def _list_festivals(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> list[Festival]:
        return self._store.find_all(EntityKind.FESTIVAL)

    def _update_festival(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Festival:
        festival = self._load_festival(target_id)
        changes = festival_lifecycle.update_fields(festival, principal, payload)
        if not changes:
            return festival
        return self._store.compare_and_swap(EntityKind.FESTIVAL, festival.id, festival.phase, changes)

    def _add_organizer(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Festival:
        festival = self._load_festival(target_id)
        organizer_id = _parse_id(UserId, EntityKind.USER, _required(payload, "organizer_id"))
        organizer = self._store.get(EntityKind.USER, organizer_id)
        changes = festival_lifecycle.add_organizer_fields(festival, principal, organizer)
        if not changes:
            return festival
        return self._store.compare_and_swap(EntityKind.FESTIVAL, festival.id, festival.phase, changes)

    def _delete_festival(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> None:
        festival = self._load_festival(target_id)
        festival_lifecycle.check_deletable(festival)
        self._store.delete(EntityKind.FESTIVAL, festival.id, expected_state=festival.phase)
        logger.info("festival %s deleted by %s", festival.id, principal.identity)

    def _advance_festival(
        self, action: Action, principal: Principal, target_id: Any, payload: dict[str, Any]
    ) -> Festival:
        festival = self._load_festival(target_id)
        changes = festival_lifecycle.advance(festival, action)
        updated = self._store.compare_and_swap(EntityKind.FESTIVAL, festival.id, festival.phase, changes)
        logger.info(
            "festival %s %s: %s -> %s by %s",
            festival.id,
            action.value,
            festival.phase.value,
            updated.phase.value,
            principal.identity,
        )
        return updated

    # ------------------------------------------------------------------
    # Performances
    # ------------------------------------------------------------------

    def _load_performance(self, target_id: Any) -> tuple[Performance, Festival]:
        performance = self._store.get(
            EntityKind.PERFORMANCE, _parse_id(PerformanceId, EntityKind.PERFORMANCE, target_id)
        )
        festival = self._store.get(EntityKind.FESTIVAL, performance.festival_id)
        return performance, festival

    def _check_unique_name(self, festival_id: FestivalId, name: str) -> None:
        if self._store.find_one(EntityKind.PERFORMANCE, {"festival_id": festival_id, "name": name}):
            raise ConflictError("Performance name must be unique within the festival")

    def _create_performance(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Performance:
        festival = self._load_festival(_required(payload, "festival_id"))
        fields = performance_lifecycle.creation_fields(
            festival, principal, {k: v for k, v in payload.items() if k != "festival_id"}
        )
        self._check_unique_name(festival.id, fields["name"])
        performance = self._store.create(EntityKind.PERFORMANCE, fields)
        logger.info("performance %s created in festival %s by %s", performance.id, festival.id, principal.identity)
        return performance

    def _get_performance(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Performance:
        performance, _ = self._load_performance(target_id)
        return performance

    def _list_performances(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> list[Performance]:
        festival = self._load_festival(target_id)
        return self._store.find_all(EntityKind.PERFORMANCE, {"festival_id": festival.id})

    def _update_performance(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Performance:
        performance, festival = self._load_performance(target_id)
        changes = performance_lifecycle.update_fields(performance, festival, principal, payload)
        if not changes:
            return performance
        if changes.get("name", performance.name) != performance.name:
            self._check_unique_name(festival.id, changes["name"])
        return self._store.compare_and_swap(
            EntityKind.PERFORMANCE, performance.id, performance.phase, changes
        )

    def _withdraw_performance(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> None:
        performance, festival = self._load_performance(target_id)
        performance_lifecycle.check_withdrawable(performance, festival, principal)
        self._store.delete(EntityKind.PERFORMANCE, performance.id, expected_state=performance.phase)
        logger.info("performance %s withdrawn by %s", performance.id, principal.identity)

    def _assign_staff(self, principal: Principal, target_id: Any, payload: dict[str, Any]) -> Performance:
        performance, festival = self._load_performance(target_id)
        staff_id = _parse_id(UserId, EntityKind.USER, _required(payload, "staff_id"))
        staff = self._store.get(EntityKind.USER, staff_id)
        changes = performance_lifecycle.assign_staff(performance, festival, principal, staff)
        updated = self._store.compare_and_swap(
            EntityKind.PERFORMANCE, performance.id, performance.phase, changes
        )
        logger.info("performance %s assigned to staff %s", performance.id, staff.id)
        return updated

    def _transition_performance(
        self, action: Action, principal: Principal, target_id: Any, payload: dict[str, Any]
    ) -> Performance:
        performance, festival = self._load_performance(target_id)
        changes = performance_lifecycle.transition(action, performance, festival, principal, payload)
        updated = self._store.compare_and_swap(
            EntityKind.PERFORMANCE, performance.id, performance.phase, changes
        )
        logger.info(
            "performance %s %s: %s -> %s by %s",
            performance.id,
            action.value,
            performance.phase.value,
            updated.phase.value,
            principal.identity,
        )
        return updated
