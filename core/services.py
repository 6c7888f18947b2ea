"""
Core — Audit Service

Writes audit log entries for structural mutations from any app.

@file core/services.py
"""

import logging
import uuid
from typing import Any

from django.forms.models import model_to_dict

from core.models import AuditLog

logger = logging.getLogger('beinghappy')


class AuditService:
    """Centralised audit logging for locations, posts and categories."""

    @staticmethod
    def log(
        *,
        actor,
        action: str,
        model_name: str,
        object_id: str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str = '',
    ) -> AuditLog:
        if actor is not None and not getattr(actor, 'is_authenticated', False):
            actor = None
        return AuditLog.objects.create(
            actor=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @classmethod
    def record(
        cls,
        instance,
        *,
        actor,
        action: str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        object_id=None,
    ) -> AuditLog:
        """
        Audit entry for a model instance. ``object_id`` is only needed
        once the instance is deleted and Django has cleared its pk.
        """
        return cls.log(
            actor=actor,
            action=action,
            model_name=instance._meta.object_name,
            object_id=object_id if object_id is not None else instance.pk,
            old_values=old_values,
            new_values=new_values,
        )

    @staticmethod
    def snapshot(instance, fields=None) -> dict[str, Any]:
        """
        Serialise a model instance to a JSON-safe dict. DateTimes are
        ISO-formatted, UUIDs stringified, M2M reduced to lists of PKs.
        """
        data = model_to_dict(instance, fields=fields)
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                cleaned[key] = None
            elif isinstance(value, uuid.UUID):
                cleaned[key] = str(value)
            elif hasattr(value, 'isoformat'):
                cleaned[key] = value.isoformat()
            elif isinstance(value, (list, tuple)):
                cleaned[key] = [str(v.pk) if hasattr(v, 'pk') else v for v in value]
            else:
                cleaned[key] = value
        return cleaned

    @staticmethod
    def get_client_ip(request) -> str | None:
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
