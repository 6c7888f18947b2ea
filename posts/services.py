"""
Posts — Service Layer

Business logic for content posts and categories: validated writes,
resolution of directory locations against the live location tree,
listing queries with client-side fallbacks, image uploads and the home
feed rows.

@file posts/services.py
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from PIL import Image, UnidentifiedImageError

from carousels.layout import should_show_arrows, visible_count_for_width
from core.connectivity import ensure_online
from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_UPDATE,
    FEED_ROW_LIMIT,
    POSTS_ADMIN_ALL_LIMIT,
    POSTS_ADMIN_BY_TYPE_LIMIT,
    POSTS_BY_CATEGORY_FALLBACK_WINDOW,
    POSTS_BY_CATEGORY_LIMIT,
    POSTS_BY_TYPE_FALLBACK_WINDOW,
    POSTS_BY_TYPE_LIMIT,
    POSTS_FEATURED_LIMIT,
    POSTS_FEATURED_WINDOW,
)
from core.exceptions import BusinessRuleViolation, DuplicateResourceError, ResourceNotFoundError
from core.queries import query_with_fallback
from core.services import AuditService
from locations.models import Location

from .models import LOCATION_KEYS, Category, Post

logger = logging.getLogger('beinghappy')

EDITABLE_FIELDS = (
    'title', 'summary', 'body', 'post_type', 'published', 'featured',
    'image_url', 'media_url',
)

FEED_ROWS = (
    ('featured', 'Featured'),
    (Post.TypeChoices.ARTICLE, 'Articles'),
    (Post.TypeChoices.AUDIO, 'Guided audio'),
    (Post.TypeChoices.VIDEO, 'Videos'),
)

ALLOWED_IMAGE_FORMATS = {'JPEG', 'PNG', 'GIF', 'WEBP'}


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def _newest_first(posts):
    """Recency sort used by every fallback: published_at, else created_at."""
    return sorted(posts, key=lambda post: post.recency, reverse=True)


def _published_order():
    return [F('published_at').desc(nulls_last=True), '-created_at']


def _actor(actor):
    return actor if getattr(actor, 'is_authenticated', False) else None


# ---------------------------------------------------------------------------
# Directory location resolution
# ---------------------------------------------------------------------------

def _location_or_error(location_id, expected_type: str) -> Location:
    location = Location.objects.filter(pk=location_id).first() if _is_uuid(location_id) else None
    if location is None or location.location_type != expected_type:
        raise BusinessRuleViolation(detail=f'Unknown {expected_type}: {location_id}.')
    return location


def resolve_post_location(data) -> dict | None:
    """
    Turn ``{country_id, province_id, city_id}`` (any subset) into the
    full denormalised mapping stored on Post.location.

    Missing ancestors are derived from the most specific level given;
    supplied ancestors must agree with the tree.
    """
    if not data:
        return None

    country_id = data.get('country_id') or None
    province_id = data.get('province_id') or None
    city_id = data.get('city_id') or None
    if not (country_id or province_id or city_id):
        return None

    city = _location_or_error(city_id, Location.LocationType.CITY) if city_id else None
    if city is not None:
        if province_id and str(city.province_id) != str(province_id):
            raise BusinessRuleViolation(detail='City does not belong to the given province.')
        province_id = city.province_id

    province = _location_or_error(province_id, Location.LocationType.PROVINCE) if province_id else None
    if province is not None:
        if country_id and str(province.country_id) != str(country_id):
            raise BusinessRuleViolation(detail='Province does not belong to the given country.')
        country_id = province.country_id

    country = _location_or_error(country_id, Location.LocationType.COUNTRY) if country_id else None

    resolved = dict.fromkeys(LOCATION_KEYS)
    for prefix, node in (('country', country), ('province', province), ('city', city)):
        if node is not None:
            resolved[f'{prefix}_id'] = str(node.pk)
            resolved[f'{prefix}_name'] = node.name
    return resolved


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------

class PostService:
    """Post writes, reads and listing queries."""

    @staticmethod
    def get_post(post_id) -> Post:
        post = Post.objects.filter(pk=post_id).first() if _is_uuid(post_id) else None
        if post is None:
            raise ResourceNotFoundError(detail='Post not found.')
        return post

    @staticmethod
    def _validate(post: Post) -> None:
        if not (post.title or '').strip():
            raise BusinessRuleViolation(detail='Title is required.')
        if post.post_type not in Post.TypeChoices.values:
            raise BusinessRuleViolation(detail='Invalid type.')
        if post.published and post.published_at is None:
            post.published_at = timezone.now()

    @staticmethod
    def _categories(category_ids) -> list[Category]:
        ids = [cid for cid in category_ids or [] if cid]
        bad = [cid for cid in ids if not _is_uuid(cid)]
        categories = list(Category.objects.filter(pk__in=[cid for cid in ids if _is_uuid(cid)]))
        if bad or len(categories) != len(set(map(str, ids))):
            raise BusinessRuleViolation(detail='Unknown category.')
        return categories

    @classmethod
    def create_post(cls, *, actor=None, categories=None, location=None, **fields) -> Post:
        ensure_online('create posts')

        post = Post(**{key: value for key, value in fields.items() if key in EDITABLE_FIELDS})
        post.location = resolve_post_location(location)
        cls._validate(post)
        category_objs = cls._categories(categories)

        with transaction.atomic():
            post.created_by = _actor(actor)
            post.save()
            post.categories.set(category_objs)
            AuditService.record(
                post,
                actor=actor,
                action=AUDIT_ACTION_CREATE,
                new_values=AuditService.snapshot(post),
            )

        logger.info('Post %s (%s) created by %s.', post.pk, post.post_type, actor)
        return post

    @classmethod
    def update_post(cls, *, post_id, actor=None, **fields) -> Post:
        ensure_online('update posts')

        with transaction.atomic():
            post = cls.get_post(post_id)
            post = Post.objects.select_for_update().get(pk=post.pk)
            old_snapshot = AuditService.snapshot(post)

            for key in EDITABLE_FIELDS:
                if key in fields:
                    setattr(post, key, fields[key])
            if 'location' in fields:
                post.location = resolve_post_location(fields['location'])
            cls._validate(post)

            post.updated_by = _actor(actor)
            post.save()
            if 'categories' in fields:
                post.categories.set(cls._categories(fields['categories']))

            AuditService.record(
                post,
                actor=actor,
                action=AUDIT_ACTION_UPDATE,
                old_values=old_snapshot,
                new_values=AuditService.snapshot(post),
            )

        logger.info('Post %s updated by %s.', post.pk, actor)
        return post

    @classmethod
    def publish(cls, *, post_id, actor=None) -> Post:
        return cls.update_post(post_id=post_id, actor=actor, published=True)

    @classmethod
    def delete_post(cls, *, post_id, actor=None) -> None:
        ensure_online('delete posts')

        post = cls.get_post(post_id)
        post_pk = str(post.pk)
        snapshot = AuditService.snapshot(post)
        with transaction.atomic():
            post.delete()
            AuditService.record(
                post,
                actor=actor,
                action=AUDIT_ACTION_DELETE,
                object_id=post_pk,
                old_values=snapshot,
            )
        logger.info('Post %s deleted by %s.', post_pk, actor)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @staticmethod
    def list_by_type(post_type, limit=POSTS_BY_TYPE_LIMIT) -> list[Post]:
        """Published posts of one type, newest first."""
        if not post_type:
            return []
        window = max(limit, POSTS_BY_TYPE_FALLBACK_WINDOW)
        return query_with_fallback(
            lambda: Post.objects.filter(post_type=post_type, published=True).order_by(*_published_order())[:limit],
            lambda: _newest_first(
                post for post in Post.objects.filter(post_type=post_type)[:window] if post.published
            )[:limit],
            label='list_by_type',
        )

    @staticmethod
    def list_by_category(
        category_id,
        post_type=None,
        limit=POSTS_BY_CATEGORY_LIMIT,
        fetch_window=POSTS_BY_CATEGORY_FALLBACK_WINDOW,
    ) -> list[Post]:
        """Published posts tagged with a category, optionally narrowed to one type."""
        if not category_id or not _is_uuid(category_id):
            return []

        def primary():
            qs = Post.objects.filter(categories__id=category_id, published=True)
            if post_type:
                qs = qs.filter(post_type=post_type)
            return qs.order_by(*_published_order())[:limit]

        def fallback():
            window = Post.objects.prefetch_related('categories').order_by(*_published_order())[:fetch_window]
            matches = [
                post for post in window
                if post.published
                and any(str(cat.pk) == str(category_id) for cat in post.categories.all())
                and (not post_type or post.post_type == post_type)
            ]
            return _newest_first(matches)[:limit]

        return query_with_fallback(primary, fallback, label='list_by_category')

    @staticmethod
    def list_featured(limit=POSTS_FEATURED_LIMIT, fetch_window=POSTS_FEATURED_WINDOW) -> list[Post]:
        """Published, featured posts across every type."""
        return query_with_fallback(
            lambda: Post.objects.filter(featured=True, published=True).order_by(*_published_order())[:limit],
            lambda: _newest_first(
                post for post in Post.objects.order_by(*_published_order())[:fetch_window]
                if post.published and post.featured
            )[:limit],
            label='list_featured',
        )

    @staticmethod
    def list_by_type_admin(post_type, limit=POSTS_ADMIN_BY_TYPE_LIMIT) -> list[Post]:
        """Every post of one type, drafts included, newest created first."""
        return query_with_fallback(
            lambda: Post.objects.filter(post_type=post_type).order_by('-created_at')[:limit],
            None,
            label='list_by_type_admin',
        )

    @staticmethod
    def list_all_for_admin(limit=POSTS_ADMIN_ALL_LIMIT) -> list[Post]:
        return query_with_fallback(
            lambda: Post.objects.order_by('-created_at')[:limit],
            None,
            label='list_all_for_admin',
        )

    @staticmethod
    def list_by_location(location_id) -> list[Post]:
        """Published directory posts under a country, province or city."""
        location = Location.objects.filter(pk=location_id).first() if _is_uuid(location_id) else None
        if location is None:
            return []
        key = f'{location.location_type}_id'
        directory = Post.TypeChoices.DIRECTORY

        return query_with_fallback(
            lambda: Post.objects.filter(
                post_type=directory, published=True, **{f'location__{key}': str(location.pk)},
            ).order_by(*_published_order()),
            lambda: _newest_first(
                post for post in Post.objects.filter(post_type=directory)
                if post.published and (post.location or {}).get(key) == str(location.pk)
            ),
            label='list_by_location',
        )

    @classmethod
    def feed_rows(cls, width) -> list[dict]:
        """
        Home feed rows (featured, then one per content type) with the
        carousel layout hints for a viewport ``width`` pixels wide.
        """
        visible = visible_count_for_width(width)
        rows = []
        for key, title in FEED_ROWS:
            if key == 'featured':
                items = cls.list_featured(limit=FEED_ROW_LIMIT)
            else:
                items = cls.list_by_type(key, limit=FEED_ROW_LIMIT)
            rows.append({
                'key': str(key),
                'title': title,
                'visible_count': visible,
                'show_arrows': should_show_arrows(len(items), width),
                'items': items,
            })
        return rows


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class CategoryService:
    """Category CRUD. Writes require the service to be online."""

    @staticmethod
    def list_categories() -> list[Category]:
        return query_with_fallback(
            lambda: Category.objects.order_by('name'),
            None,
            label='list_categories',
        )

    @staticmethod
    def get_category(category_id) -> Category:
        category = Category.objects.filter(pk=category_id).first() if _is_uuid(category_id) else None
        if category is None:
            raise ResourceNotFoundError(detail='Category not found.')
        return category

    @staticmethod
    def _clean_name(name, *, exclude_id=None) -> str:
        name = (name or '').strip()
        if not name:
            raise BusinessRuleViolation(detail='Name is required.')
        clash = Category.objects.filter(name__iexact=name)
        if exclude_id is not None:
            clash = clash.exclude(pk=exclude_id)
        if clash.exists():
            raise DuplicateResourceError(detail=f'Category "{name}" already exists.')
        return name

    @classmethod
    def create_category(cls, *, name, actor=None) -> Category:
        ensure_online('create categories')
        name = cls._clean_name(name)
        try:
            with transaction.atomic():
                category = Category.objects.create(name=name, created_by=_actor(actor))
                AuditService.record(
                    category,
                    actor=actor,
                    action=AUDIT_ACTION_CREATE,
                    new_values={'name': name},
                )
        except IntegrityError:
            raise DuplicateResourceError(detail=f'Category "{name}" already exists.')
        logger.info('Category %s created by %s.', category.pk, actor)
        return category

    @classmethod
    def update_category(cls, *, category_id, name, actor=None) -> Category:
        ensure_online('update categories')
        category = cls.get_category(category_id)
        old_name = category.name
        category.name = cls._clean_name(name, exclude_id=category.pk)
        category.updated_by = _actor(actor)
        with transaction.atomic():
            category.save()
            AuditService.record(
                category,
                actor=actor,
                action=AUDIT_ACTION_UPDATE,
                old_values={'name': old_name},
                new_values={'name': category.name},
            )
        return category

    @classmethod
    def delete_category(cls, *, category_id, actor=None) -> None:
        ensure_online('delete categories')
        category = cls.get_category(category_id)
        with transaction.atomic():
            AuditService.record(
                category,
                actor=actor,
                action=AUDIT_ACTION_DELETE,
                old_values={'name': category.name},
            )
            category.delete()
        logger.info('Category %s deleted by %s.', category_id, actor)


# ---------------------------------------------------------------------------
# Image uploads
# ---------------------------------------------------------------------------

class ImageUploadService:
    """Validate and store post images under ``uploads/<postId>/``."""

    @staticmethod
    def _validate_image(upload) -> str:
        max_bytes = settings.UPLOAD_MAX_BYTES
        if upload.size > max_bytes:
            raise BusinessRuleViolation(detail=f'File too large. Maximum size is {max_bytes} bytes.')
        try:
            with Image.open(upload) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise BusinessRuleViolation(detail='Uploaded file is not a valid image.')
        finally:
            upload.seek(0)
        if image_format not in ALLOWED_IMAGE_FORMATS:
            raise BusinessRuleViolation(detail=f'Unsupported image format: {image_format}.')
        return image_format

    @classmethod
    def upload(cls, *, upload, post_id='unspecified', actor=None, build_url=None) -> dict:
        """
        Store ``upload`` and return ``{url, path, post_id}``. When
        ``post_id`` names an existing post, its image_url is updated.
        """
        ensure_online('upload images')
        if upload is None:
            raise BusinessRuleViolation(detail='No file provided.')

        image_format = cls._validate_image(upload)
        post_id = str(post_id or 'unspecified').strip() or 'unspecified'
        folder = ''.join(ch for ch in post_id if ch.isalnum() or ch in '-_') or 'unspecified'
        extension = os.path.splitext(upload.name or '')[1].lower() or f'.{image_format.lower()}'

        path = default_storage.save(f'uploads/{folder}/{uuid.uuid4().hex}{extension}', upload)
        url = default_storage.url(path)
        if build_url is not None:
            url = build_url(url)

        post = Post.objects.filter(pk=post_id).first() if _is_uuid(post_id) else None
        if post is not None:
            post.image_url = url
            post.updated_by = _actor(actor)
            post.save(update_fields=['image_url', 'updated_by', 'updated_at'])

        logger.info('Image stored at %s for post %s by %s.', path, post_id, actor)
        return {'url': url, 'path': path, 'post_id': post_id}
