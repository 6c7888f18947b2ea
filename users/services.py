"""
Users — Service Layer

Account registration, profile updates and auth event logging. No HTTP
context: services receive plain Python arguments and raise typed
exceptions.

@file users/services.py
"""

import logging

from django.db import transaction

from core.connectivity import ensure_online
from core.exceptions import DuplicateResourceError
from core.services import AuditService

from .models import User

logger = logging.getLogger('beinghappy')

PROFILE_FIELDS = ('display_name', 'photo_url')


class UserService:
    """Registration and profile management."""

    @staticmethod
    @transaction.atomic
    def register(*, email: str, password: str, display_name: str = '') -> User:
        ensure_online('register')
        email = email.strip().lower()
        if User.objects.filter(email=email).exists():
            raise DuplicateResourceError(detail=f'Email {email} already registered.')

        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name.strip(),
        )
        logger.info('User %s registered.', user.pk)
        return user

    @staticmethod
    def update_profile(*, user: User, **fields) -> User:
        ensure_online('update profile')
        changed = []
        for field in PROFILE_FIELDS:
            if field in fields:
                setattr(user, field, (fields[field] or '').strip())
                changed.append(field)
        if changed:
            user.save(update_fields=[*changed, 'updated_at'])
        return user


class AuthService:
    """Auth event bookkeeping."""

    @staticmethod
    def log_auth_event(*, action: str, user=None, ip_address=None, user_agent=''):
        AuditService.log(
            actor=user,
            action=action,
            model_name='User',
            object_id=str(user.pk) if user else '',
            ip_address=ip_address,
            user_agent=user_agent,
        )
