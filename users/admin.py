"""
Users — Django Admin Configuration

@file users/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Accounts are created through the register endpoint; admin edits roles and profile."""

    list_display = ('email', 'display_name', 'role', 'is_active', 'is_staff', 'date_joined')
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'display_name')
    ordering = ('-created_at',)
    readonly_fields = ('id', 'date_joined', 'last_login', 'created_at', 'updated_at')
    filter_horizontal = ('groups', 'user_permissions')

    fieldsets = (
        (None, {'fields': ('id', 'email')}),
        (_('Profile'), {'fields': ('display_name', 'photo_url', 'role')}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Dates'), {'fields': ('date_joined', 'last_login', 'created_at', 'updated_at')}),
    )
