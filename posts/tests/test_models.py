"""
Posts — Model Tests

@file posts/tests/test_models.py
"""

from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from posts.models import Category
from tests.factories import CategoryFactory, PostFactory


@pytest.mark.django_db
class TestPost:
    def test_recency_prefers_published_at(self):
        published_at = timezone.now() - timedelta(days=3)
        post = PostFactory(published_at=published_at)
        assert post.recency == published_at

    def test_recency_falls_back_to_created_at(self):
        post = PostFactory(published=False, published_at=None)
        assert post.recency == post.created_at

    def test_categories(self):
        calm = CategoryFactory(name='Calm')
        post = PostFactory(categories=[calm])
        assert list(post.categories.all()) == [calm]
        assert list(calm.posts.all()) == [post]

    def test_str(self):
        assert str(PostFactory(title='Breathe', post_type='audio')) == 'Breathe (Audio)'


@pytest.mark.django_db
class TestCategory:
    def test_unique_name(self):
        CategoryFactory(name='Sleep')
        with pytest.raises(IntegrityError):
            Category.objects.create(name='Sleep')
