from django.urls import path

from .views import ChangePasswordView, CurrentRoleView, RoleLoginView, RoleLogoutView

app_name = "users"

urlpatterns = [
    path("login/", RoleLoginView.as_view(), name="login"),
    path("logout/", RoleLogoutView.as_view(), name="logout"),
    path("me/", CurrentRoleView.as_view(), name="current-role"),
    path("change-password/", ChangePasswordView.as_view(), name="change-password"),
]
