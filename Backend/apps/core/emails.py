"""
Email utility functions for the AI Academy platform.

All outbound emails go through Django's configured mail backend. The SMTP
backend honours ``settings.EMAIL_TIMEOUT`` so a slow relay cannot hold a
request open indefinitely. Templates live in apps/core/templates/emails/.

Unlike a fire-and-forget notifier, delivery failures are raised as
``EmailDeliveryError``: callers decide whether to compensate.
"""

import logging
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


def _get_from_email():
    """Return the sender address from settings."""
    return getattr(settings, 'DEFAULT_FROM_EMAIL', 'AI Academy <noreply@ai-academy.local>')


def send_email(to, subject, html, text=None, from_email=None):
    """
    Send one message with an HTML body and a plain-text alternative.

    Raises:
        EmailDeliveryError: the backend refused or failed to send.
    """
    if from_email is None:
        from_email = _get_from_email()
    if text is None:
        text = strip_tags(html)

    try:
        message = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=from_email,
            to=[to],
        )
        message.attach_alternative(html, 'text/html')
        message.send(fail_silently=False)
    except Exception as exc:
        logger.error(
            'Failed to send email "%s" to %s: %s',
            subject, to, exc, exc_info=True
        )
        raise EmailDeliveryError() from exc

    logger.info('Email "%s" sent successfully to %s', subject, to)


def _render(template_name, context):
    base_context = {
        'frontend_url': getattr(settings, 'FRONTEND_URL', 'http://localhost:3000'),
    }
    base_context.update(context)
    html_body = render_to_string(f'emails/{template_name}.html', base_context)
    text_body = render_to_string(f'emails/{template_name}.txt', base_context).strip()
    return html_body, text_body


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def build_invitation_url(raw_token):
    """Return the redemption link; it carries the raw token, never its hash."""
    frontend_url = getattr(settings, 'FRONTEND_URL', 'http://localhost:3000')
    return f'{frontend_url}/register/invite?token={raw_token}'


def send_invitation_email(email, full_name, invitation_url, expiry_hours):
    """
    Send a course invitation.

    Args:
        email (str): Recipient email address.
        full_name (str): Display name for the greeting, may be empty.
        invitation_url (str): Link to the invite registration page.
        expiry_hours (int): Validity of the link, shown to the recipient.

    Raises:
        EmailDeliveryError: the invitation could not be delivered.
    """
    html_body, text_body = _render('invitation', {
        'full_name': full_name,
        'invitation_url': invitation_url,
        'expiry_hours': expiry_hours,
    })

    send_email(
        to=email,
        subject="You've been invited to the AI Academy",
        html=html_body,
        text=text_body,
    )


def build_password_reset_url(uid, token):
    frontend_url = getattr(settings, 'FRONTEND_URL', 'http://localhost:3000')
    return f'{frontend_url}/reset-password?uid={uid}&token={token}'


def send_password_reset_email(email, full_name, reset_url, expiry_hours):
    """Send a link for choosing a new password."""
    html_body, text_body = _render('password_reset', {
        'full_name': full_name,
        'reset_url': reset_url,
        'expiry_hours': expiry_hours,
    })

    send_email(
        to=email,
        subject='Reset your AI Academy password',
        html=html_body,
        text=text_body,
    )
