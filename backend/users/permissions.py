from rest_framework import permissions

from .models import Role
from .services import RoleSessionService


class HasRoleSession(permissions.BasePermission):
    """Any logged-in staff role (Manager, Kitchen or Cashier)."""

    message = "Staff login required."

    def has_permission(self, request, view):
        return RoleSessionService.current_role(request) is not None


class IsManagerSession(permissions.BasePermission):
    message = "Manager login required."

    def has_permission(self, request, view):
        return RoleSessionService.current_role(request) == Role.MANAGER
