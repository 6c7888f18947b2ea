"""
Favorites — Service Layer

Writes require an authenticated user and an online service. Reads
refresh a per-user read cache; when the database cannot be read the
cached list is served instead, and only when no cache exists does the
error reach the caller.

@file favorites/services.py
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from redis.exceptions import RedisError

from core.connectivity import ensure_online
from core.constants import FAVORITES_CACHE_KEY, FAVORITES_PAGE_SIZE
from core.exceptions import AuthenticationFailedError, BusinessRuleViolation
from posts.services import PostService

from .models import Favorite

logger = logging.getLogger('beinghappy')


def _authenticated(user) -> bool:
    return bool(user and getattr(user, 'is_authenticated', False))


def _matches(item: dict, needle: str) -> bool:
    return needle in (item.get('title') or '').lower() or needle in (item.get('id') or '').lower()


def _page(items: list[dict], page: int, page_size: int, search: str) -> dict:
    needle = (search or '').strip().lower()
    filtered = [item for item in items if _matches(item, needle)] if needle else items
    start = (max(page, 1) - 1) * page_size
    return {'total': len(filtered), 'items': filtered[start:start + page_size]}


class FavoriteCache:
    """Read-only cache of a user's favorites, used when the database is unreachable."""

    @staticmethod
    def key(user) -> str:
        return FAVORITES_CACHE_KEY.format(uid=user.pk)

    @classmethod
    def write(cls, user, items: list[dict]) -> None:
        try:
            cache.set(cls.key(user), items, timeout=settings.FAVORITES_CACHE_TIMEOUT)
        except RedisError as exc:
            logger.warning('Favorites cache write failed for user %s: %s', user.pk, exc)

    @classmethod
    def read(cls, user) -> list[dict]:
        try:
            return cache.get(cls.key(user)) or []
        except RedisError as exc:
            logger.warning('Favorites cache read failed for user %s: %s', user.pk, exc)
            return []


class FavoriteService:

    @staticmethod
    def add_favorite(user, post_id) -> tuple[Favorite, bool]:
        """Favorite a post. Adding an existing favorite returns it unchanged."""
        if not _authenticated(user):
            raise AuthenticationFailedError(detail='Authentication required to add favorites.')
        ensure_online('add favorites')
        if not post_id:
            raise BusinessRuleViolation(detail='Invalid post identifier.')

        post = PostService.get_post(post_id)
        favorite, created = Favorite.objects.get_or_create(
            user=user,
            post=post,
            defaults={
                'title': post.title,
                'post_type': post.post_type,
                'thumbnail_url': post.image_url,
            },
        )
        if created:
            logger.info('User %s favorited post %s.', user.pk, post.pk)
        return favorite, created

    @staticmethod
    def remove_favorite(user, post_id) -> bool:
        """Returns True when a favorite was removed."""
        if not _authenticated(user):
            raise AuthenticationFailedError(detail='Authentication required to remove favorites.')
        ensure_online('remove favorites')
        if not post_id:
            raise BusinessRuleViolation(detail='Invalid post identifier.')

        post = PostService.get_post(post_id)
        deleted, _ = Favorite.objects.filter(user=user, post=post).delete()
        if deleted:
            logger.info('User %s removed favorite %s.', user.pk, post.pk)
        return bool(deleted)

    @staticmethod
    def list_favorites(user, page=1, page_size=FAVORITES_PAGE_SIZE, search='') -> dict:
        """
        ``{'total': n, 'items': [...]}`` newest first. ``search`` matches
        the title or post id, case-insensitively.
        """
        if not _authenticated(user):
            return {'total': 0, 'items': []}

        try:
            items = [favorite.as_item() for favorite in Favorite.objects.filter(user=user).order_by('-created_at')]
        except DatabaseError as exc:
            logger.warning('list_favorites failed for user %s; attempting cached read: %s', user.pk, exc)
            cached = FavoriteCache.read(user)
            if cached:
                return _page(cached, page, page_size, search)
            raise

        FavoriteCache.write(user, items)
        return _page(items, page, page_size, search)

    @staticmethod
    def is_favorited(user, post_id) -> bool:
        if not _authenticated(user) or not post_id:
            return False
        try:
            return Favorite.objects.filter(user=user, post_id=post_id).exists()
        except ValidationError:
            return False
        except DatabaseError as exc:
            logger.warning('is_favorited failed for user %s; attempting cached read: %s', user.pk, exc)
            return any(item.get('id') == str(post_id) for item in FavoriteCache.read(user))
