"""
Posts — Serializers

Read serializers for list / detail payloads and input serializers whose
validated data is handed to PostService and CategoryService.

@file posts/serializers.py
"""

from rest_framework import serializers

from .models import Category, Post


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'created_at']
        read_only_fields = ['id', 'created_at']


class PostLocationSerializer(serializers.Serializer):
    """Input shape of Post.location. Names are filled in by the service."""

    country_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    province_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    city_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class PostListSerializer(serializers.ModelSerializer):
    """Card-sized representation used by rows, category pages and the directory."""

    type = serializers.CharField(source='post_type', read_only=True)

    class Meta:
        model = Post
        fields = [
            'id', 'title', 'summary', 'type', 'image_url',
            'featured', 'published', 'published_at', 'location',
        ]
        read_only_fields = fields


class PostReadSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='post_type', read_only=True)
    categories = CategorySerializer(many=True, read_only=True)

    class Meta:
        model = Post
        fields = [
            'id', 'title', 'summary', 'body', 'type', 'categories',
            'published', 'published_at', 'featured',
            'image_url', 'media_url', 'location',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PostWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    summary = serializers.CharField(required=False, allow_blank=True)
    body = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=Post.TypeChoices.choices, source='post_type')
    categories = serializers.ListField(
        child=serializers.CharField(), required=False,
    )
    published = serializers.BooleanField(required=False)
    featured = serializers.BooleanField(required=False)
    image_url = serializers.URLField(required=False, allow_blank=True, max_length=500)
    media_url = serializers.URLField(required=False, allow_blank=True, max_length=500)
    location = PostLocationSerializer(required=False, allow_null=True)


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, allow_blank=True)


class ImageUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    postId = serializers.CharField(required=False, allow_blank=True, default='unspecified')


class FeedRowSerializer(serializers.Serializer):
    key = serializers.CharField()
    title = serializers.CharField()
    visible_count = serializers.IntegerField()
    show_arrows = serializers.BooleanField()
    items = PostListSerializer(many=True)
