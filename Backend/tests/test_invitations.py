"""
Invitation workflow: create, validate, redeem, expire.
"""
import re
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core import mail
from django.template import TemplateDoesNotExist
from django.utils import timezone

from apps.accounts.credentials import verify_password
from apps.accounts.models import User
from apps.core.exceptions import (
    AlreadyRegistered,
    EmailDeliveryError,
    InvalidToken,
    InvitationExpired,
    InvitationNotFound,
    InviteAlreadyActive,
)
from apps.core.tokens import hash_token
from apps.members import services

pytestmark = pytest.mark.django_db

TOKEN_IN_URL = re.compile(r'token=([A-Za-z0-9_-]+)')


def _invite(email='alice@example.com', full_name='Alice', invited_by=None):
    result = services.invite_participant(email, full_name, invited_by)
    raw_token = TOKEN_IN_URL.search(mail.outbox[-1].body).group(1)
    return result, raw_token


# ============================================================================
# Invite
# ============================================================================

class TestInvite:

    def test_creates_invited_account_and_sends_email(self, admin_user):
        result, raw_token = _invite(invited_by=admin_user)
        user = result.user

        assert result.reactivated is False
        assert user.status == User.STATUS_INVITED
        assert user.role == User.ROLE_PARTICIPANT
        assert user.invited_by == admin_user
        assert user.has_usable_password() is False
        assert user.token_expires_at > timezone.now() + timedelta(hours=71)

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['alice@example.com']

    def test_email_carries_raw_token_and_only_hash_is_stored(self):
        result, raw_token = _invite()
        user = User.objects.get(pk=result.user.pk)

        assert user.invite_token_hash == hash_token(raw_token)
        assert raw_token not in user.invite_token_hash
        assert 'http://testserver/register/invite?token=' in mail.outbox[0].body

    def test_email_is_normalized(self):
        result, _ = _invite(email='  Alice@Example.COM ')
        assert result.user.email == 'alice@example.com'

    def test_active_account_is_already_registered(self, make_user):
        make_user(email='alice@example.com')

        with pytest.raises(AlreadyRegistered):
            services.invite_participant('ALICE@example.com')

        assert len(mail.outbox) == 0

    def test_inactive_account_is_reactivated_without_email(self, make_user):
        user = make_user(email='alice@example.com', status=User.STATUS_INACTIVE)

        result = services.invite_participant('alice@example.com')

        user.refresh_from_db()
        assert result.reactivated is True
        assert user.status == User.STATUS_ACTIVE
        assert user.invite_token_hash is None
        assert len(mail.outbox) == 0

    def test_open_invitation_blocks_second_invite(self):
        _invite()

        with pytest.raises(InviteAlreadyActive):
            services.invite_participant('alice@example.com')

        assert User.objects.filter(email='alice@example.com').count() == 1

    def test_pending_row_without_expiry_counts_as_open(self):
        User.objects.create(email='alice@example.com', status=User.STATUS_PENDING)

        with pytest.raises(InviteAlreadyActive):
            services.invite_participant('alice@example.com')

    def test_expired_invitation_is_replaced(self):
        first, first_token = _invite()
        User.objects.filter(pk=first.user.pk).update(token_expires_at=timezone.now() - timedelta(minutes=1))

        second, second_token = _invite()

        assert not User.objects.filter(pk=first.user.pk).exists()
        assert User.objects.filter(email='alice@example.com').count() == 1
        assert second_token != first_token
        assert second.user.invite_token_hash == hash_token(second_token)


class TestInviteEmailFailure:

    def test_failed_email_rolls_back_account(self):
        with patch('apps.members.services.send_invitation_email', side_effect=EmailDeliveryError()):
            with pytest.raises(EmailDeliveryError):
                services.invite_participant('alice@example.com', 'Alice')

        assert not User.objects.filter(email='alice@example.com').exists()

    def test_smtp_error_is_raised_as_delivery_error(self):
        with patch('django.core.mail.EmailMultiAlternatives.send', side_effect=OSError('connection refused')):
            with pytest.raises(EmailDeliveryError):
                services.invite_participant('alice@example.com')

        assert not User.objects.filter(email='alice@example.com').exists()

    def test_template_error_rolls_back_account(self):
        with patch('apps.core.emails.render_to_string', side_effect=TemplateDoesNotExist('emails/invitation.html')):
            with pytest.raises(TemplateDoesNotExist):
                services.invite_participant('alice@example.com', 'Alice')

        assert not User.objects.filter(email='alice@example.com').exists()
        assert len(mail.outbox) == 0

    def test_unexpected_error_rolls_back_account(self):
        with patch('apps.members.services.send_invitation_email', side_effect=RuntimeError('boom')):
            with pytest.raises(RuntimeError):
                services.invite_participant('alice@example.com')

        assert not User.objects.filter(email='alice@example.com').exists()

    def test_address_can_be_invited_after_rollback(self):
        with patch('apps.members.services.send_invitation_email', side_effect=EmailDeliveryError()):
            with pytest.raises(EmailDeliveryError):
                services.invite_participant('alice@example.com')

        result, _ = _invite()

        assert result.user.status == User.STATUS_INVITED


# ============================================================================
# Validate
# ============================================================================

class TestValidateInvitation:

    def test_returns_email(self):
        _, raw_token = _invite()
        assert services.validate_invitation(raw_token) == 'alice@example.com'

    def test_missing_token(self):
        with pytest.raises(InvalidToken):
            services.validate_invitation('')

    def test_malformed_token_is_rejected_before_lookup(self):
        with patch.object(User.objects, 'filter') as lookup:
            with pytest.raises(InvalidToken):
                services.validate_invitation('not a token!')

        lookup.assert_not_called()

    def test_unknown_token(self):
        with pytest.raises(InvitationNotFound):
            services.validate_invitation('A' * 43)

    def test_expired_token(self):
        result, raw_token = _invite()
        User.objects.filter(pk=result.user.pk).update(token_expires_at=timezone.now() - timedelta(seconds=1))

        with pytest.raises(InvitationExpired):
            services.validate_invitation(raw_token)


# ============================================================================
# Redeem
# ============================================================================

class TestRedeemInvitation:

    def test_activates_account(self):
        _, raw_token = _invite()

        user = services.redeem_invitation(raw_token, 'new-password-1', '  Alice Smith ')

        assert user.status == User.STATUS_ACTIVE
        assert user.full_name == 'Alice Smith'
        assert user.invite_token_hash is None
        assert user.token_expires_at is None
        assert user.joined_at is not None
        assert verify_password('new-password-1', user.password)

    def test_token_cannot_be_redeemed_twice(self):
        _, raw_token = _invite()
        services.redeem_invitation(raw_token, 'new-password-1', 'Alice')

        with pytest.raises(InvitationNotFound):
            services.redeem_invitation(raw_token, 'other-password-2', 'Mallory')

        user = User.objects.get(email='alice@example.com')
        assert user.full_name == 'Alice'
        assert verify_password('new-password-1', user.password)

    def test_expired_token_is_not_redeemed(self):
        result, raw_token = _invite()
        User.objects.filter(pk=result.user.pk).update(token_expires_at=timezone.now() - timedelta(hours=1))

        with pytest.raises(InvitationExpired):
            services.redeem_invitation(raw_token, 'new-password-1', 'Alice')

        assert User.objects.get(pk=result.user.pk).status == User.STATUS_INVITED

    def test_redeemed_account_can_log_in(self, api_client):
        _, raw_token = _invite()
        services.redeem_invitation(raw_token, 'new-password-1', 'Alice')

        response = api_client.post(
            '/api/v1/auth/login/',
            {'email': 'alice@example.com', 'password': 'new-password-1'},
            format='json'
        )

        assert response.status_code == 200


# ============================================================================
# Cleanup
# ============================================================================

class TestCleanExpiredInvitations:

    def test_removes_only_expired_invitations(self, participant):
        expired, _ = _invite('old@example.com')
        fresh, _ = _invite('new@example.com')
        User.objects.filter(pk=expired.user.pk).update(token_expires_at=timezone.now() - timedelta(days=1))

        removed = services.clean_expired_invitations()

        assert removed == 1
        assert not User.objects.filter(pk=expired.user.pk).exists()
        assert User.objects.filter(pk=fresh.user.pk).exists()
        assert User.objects.filter(pk=participant.pk).exists()
