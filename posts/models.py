"""
Posts — Models

Wellness content: articles, guided audio, videos and directory
listings, grouped by Category. Directory posts carry a denormalised
``location`` mapping pointing into the locations tree:

    {
        "country_id": "...",  "country_name": "...",
        "province_id": "...", "province_name": "...",
        "city_id": "...",     "city_name": "...",
    }

LocationService keeps these fields in sync when locations are renamed,
moved or deleted.

@file posts/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel

LOCATION_KEYS = (
    'country_id', 'country_name',
    'province_id', 'province_name',
    'city_id', 'city_name',
)


class Category(BaseModel):
    name = models.CharField(_('name'), max_length=120, unique=True)

    class Meta:
        verbose_name = _('category')
        verbose_name_plural = _('categories')
        ordering = ['name']

    def __str__(self):
        return self.name


class Post(BaseModel):
    """A piece of content shown in the app's rows, category pages and directory."""

    class TypeChoices(models.TextChoices):
        ARTICLE = 'article', _('Article')
        AUDIO = 'audio', _('Audio')
        VIDEO = 'video', _('Video')
        DIRECTORY = 'directory', _('Directory')

    title = models.CharField(_('title'), max_length=255)
    summary = models.TextField(_('summary'), blank=True)
    body = models.TextField(_('body'), blank=True)
    post_type = models.CharField(
        _('type'), max_length=12,
        choices=TypeChoices.choices, db_index=True,
    )
    categories = models.ManyToManyField(
        Category,
        blank=True,
        related_name='posts',
        verbose_name=_('categories'),
    )
    published = models.BooleanField(_('published'), default=False, db_index=True)
    published_at = models.DateTimeField(_('published at'), null=True, blank=True, db_index=True)
    featured = models.BooleanField(_('featured'), default=False)
    image_url = models.URLField(_('image URL'), max_length=500, blank=True)
    media_url = models.URLField(
        _('media URL'), max_length=500, blank=True,
        help_text=_('Audio or video source'),
    )
    location = models.JSONField(_('location'), null=True, blank=True)

    class Meta:
        verbose_name = _('post')
        verbose_name_plural = _('posts')
        ordering = ['-published_at', '-created_at']
        indexes = [
            models.Index(fields=['post_type', 'published', '-published_at']),
            models.Index(fields=['featured', 'published']),
        ]

    def __str__(self):
        return f'{self.title} ({self.get_post_type_display()})'

    @property
    def recency(self):
        """Sort key used by client-side fallbacks: published_at, else created_at."""
        return self.published_at or self.created_at
