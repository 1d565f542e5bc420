"""
Custom permission classes for the marketplace API.
"""

from rest_framework import permissions


def _is_admin(user):
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or getattr(user, 'role', None) == 'ADMIN'


class IsAdminRole(permissions.BasePermission):
    """
    Permission class that allows only administrators to access the endpoint.

    A user is an administrator when their role is 'ADMIN' (superusers are
    always treated as administrators). Returns 403 Forbidden otherwise.

    Usage:
        class MyView(APIView):
            permission_classes = [IsAuthenticated, IsAdminRole]
    """

    message = 'You do not have permission to perform this action. Administrator role required.'

    def has_permission(self, request, view):
        """
        Check if user is authenticated and has the ADMIN role.

        Args:
            request: HTTP request object
            view: View being accessed

        Returns:
            bool: True if user is an administrator, False otherwise
        """
        return _is_admin(request.user)


class IsAdminRoleOrReadOnly(permissions.BasePermission):
    """
    Read access for everyone, writes for administrators only.

    Used by the catalog endpoints.
    """

    message = 'Only administrators can modify the catalog.'

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return _is_admin(request.user)


class IsReviewAuthor(permissions.BasePermission):
    """
    Object-level permission: only the author of a review may change it.

    Usage:
        class MyView(APIView):
            permission_classes = [IsAuthenticated, IsReviewAuthor]
    """

    message = 'You can only modify your own reviews.'

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.user_id == request.user.id
