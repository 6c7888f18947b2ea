"""
Users — Models

Custom User model with UUID PK, e-mail login, profile fields shown by
the app header (display name, photo) and a coarse role used to gate
content administration.

@file users/models.py
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel
from users.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    Being Happy account.

    Everyone registers as USER. ADMIN accounts (or superusers) manage
    locations, categories and posts through the admin panel API.
    """

    class RoleChoices(models.TextChoices):
        USER = 'user', _('User')
        ADMIN = 'admin', _('Admin')

    email = models.EmailField(_('email'), unique=True)
    display_name = models.CharField(_('display name'), max_length=150, blank=True)
    photo_url = models.URLField(_('photo URL'), max_length=500, blank=True)
    role = models.CharField(
        _('role'), max_length=10,
        choices=RoleChoices.choices, default=RoleChoices.USER,
        db_index=True,
    )

    is_staff = models.BooleanField(_('staff status'), default=False)
    is_active = models.BooleanField(_('active'), default=True)
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']

    def __str__(self):
        return self.display_name or self.email

    def get_full_name(self):
        return self.display_name or self.email

    def get_short_name(self):
        return self.display_name or self.email.split('@')[0]

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.role == self.RoleChoices.ADMIN
