from rest_framework import permissions

from .models import CustomUser

Role = CustomUser.Role


class HasRole(permissions.BasePermission):
    """Allow authenticated users whose role is in ``allowed_roles``"""
    allowed_roles = ()

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role in self.allowed_roles


class IsRegistrar(HasRole):
    allowed_roles = (Role.DIRECTOR, Role.MANAGER, Role.GENERAL_SUPERVISOR, Role.SUPERVISOR)


class IsApprover(HasRole):
    allowed_roles = (Role.DIRECTOR, Role.MANAGER, Role.GENERAL_SUPERVISOR, Role.DEVELOPER)


class IsOversight(HasRole):
    allowed_roles = (Role.DIRECTOR, Role.MANAGER, Role.ADMIN, Role.DEVELOPER)
