"""
Favorites — Serializers

@file favorites/serializers.py
"""

from rest_framework import serializers

from core.constants import FAVORITES_PAGE_SIZE


class FavoriteItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    post_id = serializers.CharField()
    title = serializers.CharField(allow_blank=True)
    type = serializers.CharField(allow_blank=True)
    thumbnail_url = serializers.CharField(allow_blank=True)
    created_at = serializers.CharField(allow_null=True)


class FavoriteCreateSerializer(serializers.Serializer):
    post_id = serializers.CharField()


class FavoriteListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    page_size = serializers.IntegerField(required=False, min_value=1, max_value=100, default=FAVORITES_PAGE_SIZE)
    search = serializers.CharField(required=False, allow_blank=True, default='')
