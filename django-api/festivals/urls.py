from django.urls import path

from festivals.domain import Action
from festivals.handlers import (
    ChangePasswordView,
    FestivalDetailView,
    FestivalListView,
    FestivalOrganizersView,
    FestivalPerformancesView,
    FestivalTransitionView,
    LoginView,
    PerformanceCreateView,
    PerformanceDetailView,
    PerformanceTransitionView,
    RegisterView,
    UserDetailView,
    UserStatusView,
)
from festivals.handlers.serializers import (
    AssignStaffInputSerializer,
    FinalSubmissionInputSerializer,
    ReviewInputSerializer,
)

FESTIVAL_TRANSITIONS = {
    "start-submission": Action.START_SUBMISSION,
    "start-assignment": Action.START_ASSIGNMENT,
    "start-review": Action.START_REVIEW,
    "start-scheduling": Action.START_SCHEDULING,
    "start-final-submission": Action.START_FINAL_SUBMISSION,
    "start-decision": Action.START_DECISION,
    "announce": Action.ANNOUNCE,
}

PERFORMANCE_TRANSITIONS = {
    "submit": (Action.SUBMIT_PERFORMANCE, None),
    "review": (Action.REVIEW_PERFORMANCE, ReviewInputSerializer),
    "approve": (Action.APPROVE_PERFORMANCE, None),
    "reject": (Action.REJECT_PERFORMANCE, None),
    "final-submit": (Action.FINAL_SUBMIT_PERFORMANCE, FinalSubmissionInputSerializer),
    "assign-staff": (Action.ASSIGN_STAFF, AssignStaffInputSerializer),
}

urlpatterns = [
    path("users/register", RegisterView.as_view(), name="user-register"),
    path("users/login", LoginView.as_view(), name="user-login"),
    path("users/change-password", ChangePasswordView.as_view(), name="user-change-password"),
    path("users/<str:user_id>", UserDetailView.as_view(), name="user-detail"),
    path("users/<str:user_id>/status", UserStatusView.as_view(), name="user-status"),
    path("festivals", FestivalListView.as_view(), name="festival-list"),
    path("festivals/<str:festival_id>", FestivalDetailView.as_view(), name="festival-detail"),
    path(
        "festivals/<str:festival_id>/organizers",
        FestivalOrganizersView.as_view(),
        name="festival-organizers",
    ),
    path(
        "festivals/<str:festival_id>/performances",
        FestivalPerformancesView.as_view(),
        name="festival-performances",
    ),
    path("performances", PerformanceCreateView.as_view(), name="performance-create"),
    path(
        "performances/<str:performance_id>",
        PerformanceDetailView.as_view(),
        name="performance-detail",
    ),
]

urlpatterns += [
    path(
        f"festivals/<str:festival_id>/{segment}",
        FestivalTransitionView.as_view(workflow_action=action),
        name=f"festival-{segment}",
    )
    for segment, action in FESTIVAL_TRANSITIONS.items()
]

urlpatterns += [
    path(
        f"performances/<str:performance_id>/{segment}",
        PerformanceTransitionView.as_view(workflow_action=action, input_serializer=serializer),
        name=f"performance-{segment}",
    )
    for segment, (action, serializer) in PERFORMANCE_TRANSITIONS.items()
]
