"""
Users — Service Tests

@file users/tests/test_services.py
"""

import pytest

from core.exceptions import DuplicateResourceError, OfflineError
from core.models import AuditLog
from tests.factories import UserFactory
from users.services import AuthService, UserService


@pytest.mark.django_db
class TestRegister:
    def test_register(self):
        user = UserService.register(email=' New@BeingHappy.test ', password='TestPass2026!', display_name=' Sam ')
        assert user.email == 'new@beinghappy.test'
        assert user.display_name == 'Sam'
        assert user.check_password('TestPass2026!')

    def test_duplicate_email(self):
        UserFactory(email='taken@beinghappy.test')
        with pytest.raises(DuplicateResourceError):
            UserService.register(email='TAKEN@beinghappy.test', password='TestPass2026!')

    def test_offline(self, offline):
        with pytest.raises(OfflineError, match='Online connection required to register.'):
            UserService.register(email='a@beinghappy.test', password='TestPass2026!')


@pytest.mark.django_db
class TestProfile:
    def test_update_profile(self, user):
        UserService.update_profile(user=user, display_name='  Sam  ', photo_url='https://cdn.test/sam.png')
        user.refresh_from_db()
        assert user.display_name == 'Sam'
        assert user.photo_url == 'https://cdn.test/sam.png'

    def test_ignores_unknown_fields(self, user):
        UserService.update_profile(user=user, role='admin')
        user.refresh_from_db()
        assert user.role == 'user'


@pytest.mark.django_db
class TestAuthEvents:
    def test_log_auth_event(self, user):
        AuthService.log_auth_event(action='LOGIN', user=user, ip_address='203.0.113.9')
        log = AuditLog.objects.get(model_name='User')
        assert log.object_id == str(user.pk)
        assert log.ip_address == '203.0.113.9'
