"""
Users — DRF Permission Classes

Admin gating for content management endpoints.

@file users/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, 'is_admin', False))


class IsAdminRole(BasePermission):
    """User must be a superuser or hold the ADMIN role."""

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdminOrReadOnly(BasePermission):
    """Reads for any authenticated user; writes for admins only."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return is_admin(request.user)
