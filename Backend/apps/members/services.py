"""
Invitation workflow and member management.

Invitation state lives on the account row. Creating an invitation writes
the provisional row first and sends the email second; when the email
fails the row is deleted again, so either a usable invitation exists and
was delivered, or nothing persists.

Lifecycle: (none) -> invited -> active <-> inactive. An expired
invitation is removed when the address is invited again.
"""

import logging
from collections import namedtuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Exists, Max, OuterRef, Q
from django.utils import timezone

from apps.accounts.credentials import hash_password
from apps.accounts.services import send_password_reset
from apps.certificates.models import Certificate
from apps.core.emails import build_invitation_url, send_invitation_email
from apps.core.exceptions import (
    AlreadyRegistered,
    ForbiddenMemberOperation,
    InvalidInput,
    InvalidToken,
    InvitationExpired,
    InvitationNotFound,
    InviteAlreadyActive,
    MemberNotFound,
)
from apps.core.tokens import generate_token, hash_token, is_well_formed, token_expiry

logger = logging.getLogger(__name__)

User = get_user_model()

InviteResult = namedtuple('InviteResult', ['user', 'reactivated'])


# =============================================================================
# Invitations
# =============================================================================

def invite_participant(email, full_name='', invited_by=None):
    """
    Invite a participant by email.

    Returns:
        InviteResult: the account and whether an inactive account was
        reactivated instead of invited

    Raises:
        AlreadyRegistered: an active account uses this address
        InviteAlreadyActive: an unexpired invitation is outstanding
        EmailDeliveryError: the email failed; no invitation was kept.
            Other errors raised while building the email also remove the
            provisional invitation before propagating.
    """
    email = User.objects.normalize_email(email)
    full_name = (full_name or '').strip()

    if not email:
        raise InvalidInput('Email is required.')

    existing = User.objects.filter(email=email).first()

    if existing is not None:
        if existing.status == User.STATUS_ACTIVE:
            raise AlreadyRegistered()

        if existing.status == User.STATUS_INACTIVE:
            existing.status = User.STATUS_ACTIVE
            existing.save(update_fields=['status', 'updated_at'])
            logger.info('Member %s reactivated through invitation', existing.id)
            return InviteResult(existing, True)

        if not existing.invitation_expired:
            raise InviteAlreadyActive()

        logger.info('Removing expired invitation %s before re-inviting', existing.id)
        existing.delete()

    raw_token = generate_token()

    try:
        with transaction.atomic():
            user = User(
                email=email,
                full_name=full_name,
                role=User.ROLE_PARTICIPANT,
                status=User.STATUS_INVITED,
                invite_token_hash=hash_token(raw_token),
                token_expires_at=token_expiry(),
                invited_by=invited_by,
            )
            user.set_unusable_password()
            user.save()
    except IntegrityError:
        # A concurrent request created an invitation for the same address.
        raise InviteAlreadyActive()

    try:
        send_invitation_email(
            email=email,
            full_name=full_name,
            invitation_url=build_invitation_url(raw_token),
            expiry_hours=settings.INVITE_TOKEN_EXPIRY_HOURS,
        )
    except Exception:
        # Any failure while rendering or sending leaves no invitation behind.
        User.objects.filter(pk=user.pk).delete()
        logger.warning('Invitation %s rolled back after email failure', user.pk)
        raise

    logger.info(
        'Invitation %s created by %s',
        user.pk, invited_by.pk if invited_by is not None else None
    )
    return InviteResult(user, False)


def _find_open_invitation(raw_token):
    if not raw_token:
        raise InvalidToken('Token is required.')

    if not is_well_formed(raw_token):
        raise InvalidToken()

    user = User.objects.filter(
        invite_token_hash=hash_token(raw_token),
        status__in=User.INVITATION_STATUSES,
    ).first()

    if user is None:
        raise InvitationNotFound()

    if user.token_expires_at is not None and user.token_expires_at < timezone.now():
        raise InvitationExpired()

    return user


def validate_invitation(raw_token):
    """Return the email address an open invitation was sent to."""
    return _find_open_invitation(raw_token).email


def redeem_invitation(raw_token, password, full_name):
    """
    Turn an open invitation into an active account.

    The update only matches while the token hash is still on the row, so
    of two concurrent redemptions exactly one succeeds.
    """
    user = _find_open_invitation(raw_token)
    now = timezone.now()

    updated = (
        User.objects
        .filter(
            pk=user.pk,
            invite_token_hash=user.invite_token_hash,
            status__in=User.INVITATION_STATUSES,
        )
        .update(
            password=hash_password(password),
            full_name=full_name.strip(),
            status=User.STATUS_ACTIVE,
            invite_token_hash=None,
            token_expires_at=None,
            joined_at=now,
            updated_at=now,
        )
    )

    if not updated:
        raise InvitationNotFound()

    user.refresh_from_db()
    logger.info('Invitation %s redeemed', user.pk)
    return user


def clean_expired_invitations(now=None):
    """Delete invitations past their expiry. Returns the number removed."""
    now = now or timezone.now()
    _, per_model = User.objects.filter(
        status__in=User.INVITATION_STATUSES,
        token_expires_at__lt=now,
    ).delete()
    return per_model.get(User._meta.label, 0)


# =============================================================================
# Member management
# =============================================================================

def get_member(member_id):
    try:
        return User.objects.get(pk=member_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise MemberNotFound()


def member_queryset():
    """Participants annotated with their course progress summary."""
    passed = Q(
        module_progress__quiz_completed=True,
        module_progress__quiz_score__gte=settings.QUIZ_PASSING_SCORE,
    )
    return (
        User.objects
        .filter(role=User.ROLE_PARTICIPANT)
        .annotate(
            completed_modules=Count('module_progress', filter=passed),
            last_activity=Max('module_progress__completed_at'),
            has_certificate=Exists(Certificate.objects.filter(user=OuterRef('pk'))),
        )
        .order_by('-created_at')
    )


def set_member_status(actor, member_id, status):
    """Toggle an account between active and inactive."""
    if status not in (User.STATUS_ACTIVE, User.STATUS_INACTIVE):
        raise InvalidInput('Status must be "active" or "inactive".')

    member = get_member(member_id)

    if member.pk == actor.pk:
        raise ForbiddenMemberOperation('You cannot change the status of your own account.')

    if member.has_pending_invitation:
        raise ForbiddenMemberOperation('This member has not accepted the invitation yet.')

    if member.status != status:
        member.status = status
        member.save(update_fields=['status', 'updated_at'])
        logger.info('Member %s set to %s by %s', member.pk, status, actor.pk)

    return member


def delete_member(actor, member_id):
    """Delete an account with its progress and certificate."""
    member = get_member(member_id)

    if member.pk == actor.pk:
        raise ForbiddenMemberOperation('You cannot delete your own account.')

    if member.is_admin:
        raise ForbiddenMemberOperation('Admin accounts cannot be deleted.')

    member_pk = member.pk
    member.delete()
    logger.info('Member %s deleted by %s', member_pk, actor.pk)


def reset_member_password(actor, member_id):
    """Email a participant a password reset link on an admin's request."""
    member = get_member(member_id)

    if member.is_admin:
        raise ForbiddenMemberOperation('Password resets are only sent to participants.')

    if member.has_pending_invitation:
        raise ForbiddenMemberOperation('This member has not accepted the invitation yet.')

    if not member.is_active:
        raise ForbiddenMemberOperation('Reactivate this member before resetting the password.')

    send_password_reset(member)
    logger.info('Password reset for member %s requested by %s', member.pk, actor.pk)
    return member
