"""
Favorites — Models

A user's bookmarked posts. Title, type and thumbnail are copied from
the post when it is favorited so the favorites list renders without
joining back to posts.

@file favorites/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from posts.models import Post


class Favorite(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='favorites',
        verbose_name=_('user'),
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='favorited_by',
        verbose_name=_('post'),
    )
    title = models.CharField(_('title'), max_length=255, blank=True)
    post_type = models.CharField(_('type'), max_length=12, blank=True)
    thumbnail_url = models.URLField(_('thumbnail URL'), max_length=500, blank=True)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _('favorite')
        verbose_name_plural = _('favorites')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'post'], name='favorite_unique_user_post'),
        ]

    def __str__(self):
        return f'{self.user_id} ♥ {self.post_id}'

    def as_item(self) -> dict:
        """JSON-safe representation, also the shape kept in the read cache."""
        return {
            'id': str(self.post_id),
            'post_id': str(self.post_id),
            'title': self.title,
            'type': self.post_type,
            'thumbnail_url': self.thumbnail_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
