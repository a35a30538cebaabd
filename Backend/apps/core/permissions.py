from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """Permission class to check if user is an active course administrator."""

    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_admin and
            request.user.is_active
        )
