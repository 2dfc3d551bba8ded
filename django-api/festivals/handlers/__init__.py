from festivals.handlers.views import (
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

__all__ = [
    "ChangePasswordView",
    "FestivalDetailView",
    "FestivalListView",
    "FestivalOrganizersView",
    "FestivalPerformancesView",
    "FestivalTransitionView",
    "LoginView",
    "PerformanceCreateView",
    "PerformanceDetailView",
    "PerformanceTransitionView",
    "RegisterView",
    "UserDetailView",
    "UserStatusView",
]
