"""
Favorites — Django Admin Configuration

@file favorites/admin.py
"""

from django.contrib import admin

from .models import Favorite


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ('user', 'title', 'post_type', 'created_at')
    list_filter = ('post_type',)
    search_fields = ('title', 'user__email')
    raw_id_fields = ('user', 'post')
    list_select_related = ('user',)
    readonly_fields = ('id', 'created_at')
    ordering = ('-created_at',)
