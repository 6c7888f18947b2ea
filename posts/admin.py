"""
Posts — Django Admin Configuration

Post admin with type and publication badges, and a simple category
admin.

@file posts/admin.py
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Category, Post

TYPE_COLORS = {
    'article': '#1d4ed8',
    'audio': '#7c3aed',
    'video': '#dc2626',
    'directory': '#0891b2',
}


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'post_count', 'created_at')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
    ordering = ('name',)

    @admin.display(description=_('Posts'))
    def post_count(self, obj):
        return obj.posts.count()


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('title', 'type_badge', 'published_badge', 'featured', 'location_display', 'published_at')
    list_filter = ('post_type', 'published', 'featured')
    search_fields = ('title', 'summary')
    readonly_fields = ('id', 'location', 'created_at', 'updated_at', 'created_by', 'updated_by')
    filter_horizontal = ('categories',)
    show_full_result_count = False
    list_per_page = 30
    date_hierarchy = 'created_at'
    ordering = ('-created_at',)

    fieldsets = (
        (None, {
            'fields': ('id', 'title', 'post_type', 'summary', 'body', 'categories'),
        }),
        (_('Publication'), {
            'fields': ('published', 'published_at', 'featured'),
        }),
        (_('Media'), {
            'fields': ('image_url', 'media_url'),
        }),
        (_('Directory'), {
            'fields': ('location',),
            'classes': ('collapse',),
        }),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(description=_('Type'))
    def type_badge(self, obj):
        color = TYPE_COLORS.get(obj.post_type, '#6b7280')
        return format_html(
            '<span style="background:{};color:#fff;padding:2px 8px;'
            'border-radius:4px;font-size:11px;font-weight:600;">{}</span>',
            color, obj.get_post_type_display(),
        )

    @admin.display(description=_('Status'))
    def published_badge(self, obj):
        color, label = ('#22c55e', _('Published')) if obj.published else ('#f59e0b', _('Draft'))
        return format_html(
            '<span style="color:{};font-weight:600;">{}</span>',
            color, label,
        )

    @admin.display(description=_('Location'))
    def location_display(self, obj):
        location = obj.location or {}
        parts = [location.get(key) for key in ('country_name', 'province_name', 'city_name')]
        return ' > '.join(part for part in parts if part) or '-'
