"""
Password reset: self-service request/confirm and the admin-triggered link.
"""
import re
from unittest.mock import patch

import pytest
from django.core import mail

from apps.accounts import services
from apps.accounts.credentials import verify_password
from apps.accounts.models import User
from apps.core.exceptions import AccountNotActive, EmailDeliveryError, InvalidResetLink

from conftest import PASSWORD

pytestmark = pytest.mark.django_db

RESET_LINK = re.compile(r'/reset-password\?uid=([A-Za-z0-9_-]+)&token=([A-Za-z0-9-]+)')


def _link_from_outbox():
    return RESET_LINK.search(mail.outbox[-1].body).groups()


# ============================================================================
# Service
# ============================================================================

class TestRequestPasswordReset:

    def test_sends_link_to_active_account(self, participant):
        services.request_password_reset('  PARTICIPANT@example.com ')

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [participant.email]
        assert 'http://testserver/reset-password?uid=' in mail.outbox[0].body

    def test_unknown_address_sends_nothing(self):
        services.request_password_reset('ghost@example.com')
        assert len(mail.outbox) == 0

    @pytest.mark.parametrize('status', [User.STATUS_INACTIVE, User.STATUS_INVITED])
    def test_non_active_account_sends_nothing(self, make_user, status):
        make_user(email='sleepy@example.com', status=status)

        services.request_password_reset('sleepy@example.com')

        assert len(mail.outbox) == 0

    def test_send_requires_active_account(self, make_user):
        user = make_user(status=User.STATUS_INACTIVE)

        with pytest.raises(AccountNotActive):
            services.send_password_reset(user)


class TestConfirmPasswordReset:

    def test_sets_new_password(self, participant):
        services.request_password_reset(participant.email)
        uid, token = _link_from_outbox()

        services.confirm_password_reset(uid, token, 'brand-new-pass-3')

        participant.refresh_from_db()
        assert verify_password('brand-new-pass-3', participant.password)

    def test_link_works_only_once(self, participant):
        services.request_password_reset(participant.email)
        uid, token = _link_from_outbox()
        services.confirm_password_reset(uid, token, 'brand-new-pass-3')

        with pytest.raises(InvalidResetLink):
            services.confirm_password_reset(uid, token, 'another-pass-4')

        participant.refresh_from_db()
        assert verify_password('brand-new-pass-3', participant.password)

    def test_expired_link(self, participant, settings):
        services.request_password_reset(participant.email)
        uid, token = _link_from_outbox()
        settings.PASSWORD_RESET_TIMEOUT = -1

        with pytest.raises(InvalidResetLink):
            services.confirm_password_reset(uid, token, 'brand-new-pass-3')

    @pytest.mark.parametrize('uid,token', [
        ('not-base64!', 'abc-123'),
        ('MTIzNDU2Nzg', 'abc-123'),
        ('', ''),
    ])
    def test_garbage_link(self, participant, uid, token):
        with pytest.raises(InvalidResetLink):
            services.confirm_password_reset(uid, token, 'brand-new-pass-3')

    def test_deactivated_account_cannot_use_link(self, participant):
        services.request_password_reset(participant.email)
        uid, token = _link_from_outbox()
        User.objects.filter(pk=participant.pk).update(status=User.STATUS_INACTIVE)

        with pytest.raises(InvalidResetLink):
            services.confirm_password_reset(uid, token, 'brand-new-pass-3')


# ============================================================================
# Public endpoints
# ============================================================================

class TestPasswordResetEndpoints:

    request_url = '/api/v1/auth/password-reset/'
    confirm_url = '/api/v1/auth/password-reset/confirm/'

    def test_same_response_for_known_and_unknown_addresses(self, api_client, participant):
        known = api_client.post(self.request_url, {'email': participant.email}, format='json')
        unknown = api_client.post(self.request_url, {'email': 'ghost@example.com'}, format='json')

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(mail.outbox) == 1

    def test_full_reset_then_login(self, api_client, participant):
        api_client.post(self.request_url, {'email': participant.email}, format='json')
        uid, token = _link_from_outbox()

        response = api_client.post(self.confirm_url, {
            'uid': uid, 'token': token, 'new_password': 'brand-new-pass-3',
        }, format='json')
        assert response.status_code == 200

        old = api_client.post('/api/v1/auth/login/', {'email': participant.email, 'password': PASSWORD}, format='json')
        new = api_client.post(
            '/api/v1/auth/login/', {'email': participant.email, 'password': 'brand-new-pass-3'}, format='json'
        )
        assert old.status_code == 401
        assert new.status_code == 200

    def test_invalid_link(self, api_client, participant):
        response = api_client.post(self.confirm_url, {
            'uid': 'MQ', 'token': 'nope-nope', 'new_password': 'brand-new-pass-3',
        }, format='json')

        assert response.status_code == 400
        assert response.json() == {'error': 'This password reset link is invalid or has expired.'}

    def test_weak_password_keeps_link_usable(self, api_client, participant):
        api_client.post(self.request_url, {'email': participant.email}, format='json')
        uid, token = _link_from_outbox()

        weak = api_client.post(self.confirm_url, {'uid': uid, 'token': token, 'new_password': '123'}, format='json')
        assert weak.status_code == 400
        assert 'new_password' in weak.json()['errors']

        strong = api_client.post(self.confirm_url, {
            'uid': uid, 'token': token, 'new_password': 'brand-new-pass-3',
        }, format='json')
        assert strong.status_code == 200

    def test_request_is_rate_limited(self, api_client):
        statuses = [
            api_client.post(self.request_url, {'email': 'ghost@example.com'}, format='json').status_code
            for _ in range(6)
        ]

        assert statuses == [200] * 5 + [429]

    def test_confirm_is_rate_limited(self, api_client):
        payload = {'uid': 'MQ', 'token': 'nope-nope', 'new_password': 'brand-new-pass-3'}

        statuses = [
            api_client.post(self.confirm_url, payload, format='json').status_code
            for _ in range(6)
        ]

        assert statuses == [400] * 5 + [429]


# ============================================================================
# Admin endpoint
# ============================================================================

class TestAdminPasswordReset:

    def _url(self, member):
        return f'/api/v1/admin/members/{member.pk}/password-reset/'

    def test_admin_sends_reset_link(self, admin_client, participant):
        response = admin_client.post(self._url(participant))

        assert response.status_code == 200
        assert response.json()['success'] is True
        assert mail.outbox[-1].to == [participant.email]

        uid, token = _link_from_outbox()
        services.confirm_password_reset(uid, token, 'brand-new-pass-3')
        participant.refresh_from_db()
        assert verify_password('brand-new-pass-3', participant.password)

    def test_participant_cannot_trigger(self, auth_client, participant):
        assert auth_client.post(self._url(participant)).status_code == 403
        assert len(mail.outbox) == 0

    def test_pending_invitation_is_refused(self, admin_client, make_user):
        invited = make_user(email='invited@example.com', status=User.STATUS_INVITED)

        response = admin_client.post(self._url(invited))

        assert response.status_code == 400
        assert len(mail.outbox) == 0

    def test_inactive_member_is_refused(self, admin_client, make_user):
        inactive = make_user(email='inactive@example.com', status=User.STATUS_INACTIVE)

        assert admin_client.post(self._url(inactive)).status_code == 400

    def test_admin_accounts_are_refused(self, admin_client, make_user):
        other_admin = make_user(email='second-admin@example.com', role=User.ROLE_ADMIN)

        assert admin_client.post(self._url(other_admin)).status_code == 400

    def test_unknown_member(self, admin_client):
        assert admin_client.post('/api/v1/admin/members/987654/password-reset/').status_code == 404

    def test_email_failure(self, admin_client, participant):
        with patch('apps.accounts.services.send_password_reset_email', side_effect=EmailDeliveryError()):
            response = admin_client.post(self._url(participant))

        assert response.status_code == 500
        assert response.json() == {'error': 'The email could not be sent. Please try again later.'}
