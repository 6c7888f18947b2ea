"""
Locations — Permissions

Any signed-in user can browse the location tree. Only admins can
create, rename, move or delete locations.

@file locations/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

from users.permissions import is_admin


class CanModifyLocations(BasePermission):
    """Only admins and superusers can change the location tree."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_admin(request.user)
