"""
Account services: credential checks, self-registration, profile updates
and password resets.

Reset links carry the account id and a token from Django's
``default_token_generator``. The token is derived from the password hash
and last login, so it stops working once the password changes.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from apps.core.emails import build_password_reset_url, send_password_reset_email
from apps.core.exceptions import AccountNotActive, AlreadyRegistered, InvalidCredentials, InvalidResetLink

from .credentials import hash_password, verify_password

logger = logging.getLogger(__name__)

User = get_user_model()


def authenticate_credentials(email, password):
    """
    Return the account matching ``email`` and ``password``.

    Unknown emails and wrong passwords share one message. The password is
    checked before the status so the response does not reveal whether an
    invitation exists for an address.
    """
    email = User.objects.normalize_email(email)
    user = User.objects.filter(email=email).first()

    if user is None:
        # Run the hasher anyway to keep timing comparable with a real miss.
        hash_password(password)
        raise InvalidCredentials()

    if not verify_password(password, user.password):
        raise InvalidCredentials()

    if not user.is_active:
        raise AccountNotActive()

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user


def register_participant(email, password, full_name):
    """Create an active participant account; the email must be unused."""
    email = User.objects.normalize_email(email)

    if User.objects.filter(email=email).exists():
        raise AlreadyRegistered()

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                full_name=full_name,
                role=User.ROLE_PARTICIPANT,
                status=User.STATUS_ACTIVE,
                joined_at=timezone.now(),
            )
    except IntegrityError:
        raise AlreadyRegistered()

    logger.info('Participant %s registered', user.id)
    return user


def update_profile(user, full_name=None, new_password=None):
    """Apply a name and/or password change. Returns the updated fields."""
    update_fields = []

    if full_name is not None:
        user.full_name = full_name
        update_fields.append('full_name')

    if new_password:
        user.password = hash_password(new_password)
        update_fields.append('password')

    if update_fields:
        user.save(update_fields=update_fields + ['updated_at'])

    return update_fields


# =============================================================================
# Password reset
# =============================================================================

def send_password_reset(user):
    """Email ``user`` a one-time link for choosing a new password."""
    if not user.is_active:
        raise AccountNotActive()

    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)

    send_password_reset_email(
        email=user.email,
        full_name=user.full_name,
        reset_url=build_password_reset_url(uid, token),
        expiry_hours=max(1, settings.PASSWORD_RESET_TIMEOUT // 3600),
    )
    logger.info('Password reset link sent to user %s', user.pk)


def request_password_reset(email):
    """
    Send a reset link when ``email`` belongs to an active account.

    Unknown and non-active addresses are ignored so the caller's response
    does not reveal which addresses have accounts.
    """
    email = User.objects.normalize_email(email)
    user = User.objects.filter(email=email).first()

    if user is None or not user.is_active:
        logger.info('Password reset requested for an address without an active account')
        return

    send_password_reset(user)


def _user_from_uid(uidb64):
    try:
        pk = force_str(urlsafe_base64_decode(uidb64))
        return User.objects.get(pk=pk)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        return None


def confirm_password_reset(uidb64, token, new_password):
    """
    Set a new password from a reset link.

    Raises:
        InvalidResetLink: unknown account, inactive account, or a token
        that is malformed, expired or already used
    """
    user = _user_from_uid(uidb64)

    if user is None or not user.is_active or not default_token_generator.check_token(user, token):
        raise InvalidResetLink()

    user.password = hash_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
    logger.info('Password reset completed for user %s', user.pk)
    return user
