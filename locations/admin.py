"""
Locations — Django Admin Configuration

@file locations/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Location

TYPE_COLORS = {
    'country': '#1d4ed8',
    'province': '#7c3aed',
    'city': '#65a30d',
}


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    """
    Read-mostly view of the location tree. Structural edits belong in
    the API so cascades to posts and descendants run.
    """

    list_display = ('name', 'type_badge', 'parent_display', 'children_count', 'version', 'updated_at')
    list_filter = ('location_type',)
    search_fields = ('name',)
    readonly_fields = (
        'id', 'location_type', 'parent', 'country', 'province', 'version',
        'created_at', 'updated_at', 'created_by', 'updated_by',
    )
    show_full_result_count = False
    list_per_page = 50
    ordering = ('location_type', 'name')

    fieldsets = (
        (None, {
            'fields': ('id', 'name', 'location_type', 'parent', 'country', 'province', 'version'),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description=_('Type'))
    def type_badge(self, obj):
        color = TYPE_COLORS.get(obj.location_type, '#6b7280')
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:4px; font-size:11px; font-weight:600;">{}</span>',
            color, obj.get_location_type_display(),
        )

    @admin.display(description=_('Parent'))
    def parent_display(self, obj):
        parent = Location.objects.filter(pk=obj.parent_id).first() if obj.parent_id else None
        return parent.name if parent else '-'

    @admin.display(description=_('Children'))
    def children_count(self, obj):
        return Location.objects.filter(parent_id=obj.pk).count()
