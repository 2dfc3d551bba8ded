"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call the workflow service for business logic
- Serve and fill the read cache
- Never contain business logic

Domain errors are mapped to responses by handlers.errors.exception_handler.
"""

from uuid import UUID

from django.core.cache import cache as response_cache
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from festivals import cache
from festivals.domain import Action
from festivals.handlers.dependencies import get_workflow_service
from festivals.handlers.serializers import (
    AccountStatusInputSerializer,
    AssignStaffInputSerializer,
    ChangePasswordInputSerializer,
    FestivalInputSerializer,
    FestivalSerializer,
    FinalSubmissionInputSerializer,
    LoginInputSerializer,
    OrganizerInputSerializer,
    PerformanceInputSerializer,
    PerformanceSerializer,
    RegisterInputSerializer,
    ReviewInputSerializer,
    UserSerializer,
)


def _payload(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


def _edit_payload(serializer_class, request: Request) -> dict:
    """Coerce the fields present in an edit body.

    Unknown fields are passed through so the service can reject them.
    """
    serializer = serializer_class(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    payload = dict(serializer.validated_data)
    payload.update({key: value for key, value in request.data.items() if key not in serializer.fields})
    return payload


def _canonical_id(raw: str) -> str | None:
    try:
        return str(UUID(raw))
    except ValueError:
        return None


class WorkflowView(APIView):
    """Base view exposing the workflow service."""

    @property
    def service(self):
        return get_workflow_service()

    def cached(self, action: Action, key: str | None, load, serializer_class, **kwargs) -> Response:
        """Return cached response data, loading and serializing it on a miss."""
        service = self.service
        service.authorize(self.request.user, action)
        data = response_cache.get(key) if key else None
        if data is None:
            result = load(service)
            data = serializer_class(result, **kwargs).data
            if key:
                response_cache.set(key, data, cache.timeout())
        return Response(data)


# Users


class RegisterView(WorkflowView):
    """Handler for POST /api/users/register"""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        user = self.service.register(_payload(RegisterInputSerializer, request))
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(WorkflowView):
    """Handler for POST /api/users/login"""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        payload = _payload(LoginInputSerializer, request)
        token = self.service.login(payload["username"], payload["password"])
        return Response({"token": token})


class ChangePasswordView(WorkflowView):
    """Handler for POST /api/users/change-password"""

    def post(self, request: Request) -> Response:
        payload = _payload(ChangePasswordInputSerializer, request)
        user = self.service.execute(request.user, Action.CHANGE_PASSWORD, payload=payload)
        return Response(UserSerializer(user).data)


class UserDetailView(WorkflowView):
    """Handler for GET/DELETE /api/users/{user_id}"""

    def get(self, request: Request, user_id: str) -> Response:
        user = self.service.execute(request.user, Action.GET_USER, user_id)
        return Response(UserSerializer(user).data)

    def delete(self, request: Request, user_id: str) -> Response:
        self.service.execute(request.user, Action.DELETE_USER, user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserStatusView(WorkflowView):
    """Handler for POST /api/users/{user_id}/status"""

    def post(self, request: Request, user_id: str) -> Response:
        payload = _payload(AccountStatusInputSerializer, request)
        user = self.service.execute(request.user, Action.SET_ACCOUNT_STATUS, user_id, payload)
        return Response(UserSerializer(user).data)


# Festivals


class FestivalListView(WorkflowView):
    """Handler for GET/POST /api/festivals"""

    def get(self, request: Request) -> Response:
        return self.cached(
            Action.LIST_FESTIVALS,
            cache.FESTIVAL_LIST_KEY,
            lambda service: service.execute(request.user, Action.LIST_FESTIVALS),
            FestivalSerializer,
            many=True,
        )

    def post(self, request: Request) -> Response:
        payload = _payload(FestivalInputSerializer, request)
        festival = self.service.execute(request.user, Action.CREATE_FESTIVAL, payload=payload)
        return Response(FestivalSerializer(festival).data, status=status.HTTP_201_CREATED)


class FestivalDetailView(WorkflowView):
    """Handler for GET/PATCH/DELETE /api/festivals/{festival_id}"""

    def get(self, request: Request, festival_id: str) -> Response:
        canonical = _canonical_id(festival_id)
        return self.cached(
            Action.GET_FESTIVAL,
            cache.festival_key(canonical) if canonical else None,
            lambda service: service.execute(request.user, Action.GET_FESTIVAL, festival_id),
            FestivalSerializer,
        )

    def patch(self, request: Request, festival_id: str) -> Response:
        payload = _edit_payload(FestivalInputSerializer, request)
        festival = self.service.execute(request.user, Action.UPDATE_FESTIVAL, festival_id, payload)
        return Response(FestivalSerializer(festival).data)

    def delete(self, request: Request, festival_id: str) -> Response:
        self.service.execute(request.user, Action.DELETE_FESTIVAL, festival_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FestivalOrganizersView(WorkflowView):
    """Handler for POST /api/festivals/{festival_id}/organizers"""

    def post(self, request: Request, festival_id: str) -> Response:
        payload = _payload(OrganizerInputSerializer, request)
        festival = self.service.execute(request.user, Action.ADD_ORGANIZER, festival_id, payload)
        return Response(FestivalSerializer(festival).data)


class FestivalTransitionView(WorkflowView):
    """Handler for POST /api/festivals/{festival_id}/{transition}"""

    workflow_action: Action | None = None

    def post(self, request: Request, festival_id: str) -> Response:
        festival = self.service.execute(request.user, self.workflow_action, festival_id)
        return Response(FestivalSerializer(festival).data)


class FestivalPerformancesView(WorkflowView):
    """Handler for GET /api/festivals/{festival_id}/performances"""

    def get(self, request: Request, festival_id: str) -> Response:
        canonical = _canonical_id(festival_id)
        return self.cached(
            Action.LIST_PERFORMANCES,
            cache.festival_performances_key(canonical) if canonical else None,
            lambda service: service.execute(request.user, Action.LIST_PERFORMANCES, festival_id),
            PerformanceSerializer,
            many=True,
        )


# Performances


class PerformanceCreateView(WorkflowView):
    """Handler for POST /api/performances"""

    def post(self, request: Request) -> Response:
        payload = _payload(PerformanceInputSerializer, request)
        performance = self.service.execute(request.user, Action.CREATE_PERFORMANCE, payload=payload)
        return Response(PerformanceSerializer(performance).data, status=status.HTTP_201_CREATED)


class PerformanceDetailView(WorkflowView):
    """Handler for GET/PUT/DELETE /api/performances/{performance_id}"""

    def get(self, request: Request, performance_id: str) -> Response:
        canonical = _canonical_id(performance_id)
        return self.cached(
            Action.GET_PERFORMANCE,
            cache.performance_key(canonical) if canonical else None,
            lambda service: service.execute(request.user, Action.GET_PERFORMANCE, performance_id),
            PerformanceSerializer,
        )

    def put(self, request: Request, performance_id: str) -> Response:
        payload = _edit_payload(PerformanceInputSerializer, request)
        performance = self.service.execute(
            request.user, Action.UPDATE_PERFORMANCE, performance_id, payload
        )
        return Response(PerformanceSerializer(performance).data)

    def delete(self, request: Request, performance_id: str) -> Response:
        self.service.execute(request.user, Action.WITHDRAW_PERFORMANCE, performance_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PerformanceTransitionView(WorkflowView):
    """Handler for POST /api/performances/{performance_id}/{transition}"""

    workflow_action: Action | None = None
    input_serializer = None

    def post(self, request: Request, performance_id: str) -> Response:
        payload = _payload(self.input_serializer, request) if self.input_serializer else {}
        performance = self.service.execute(
            request.user, self.workflow_action, performance_id, payload
        )
        return Response(PerformanceSerializer(performance).data)
