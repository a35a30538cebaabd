"""
Service error taxonomy and the DRF exception handler.

Services raise ``ServiceError`` subclasses; views let them propagate and
``api_exception_handler`` renders every failure as ``{"error": message}``.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'The request could not be completed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Validation

class InvalidInput(ServiceError):
    default_message = 'Invalid input.'


class InvalidToken(ServiceError):
    default_message = 'Invalid invitation token.'


# Authentication

class InvalidCredentials(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Invalid email or password.'


class AccountNotActive(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Your account has not been activated.'


# State conflicts

class AlreadyRegistered(ServiceError):
    default_message = 'This email address is already registered.'


class InviteAlreadyActive(ServiceError):
    default_message = 'An active invitation already exists for this email address.'


class InvitationNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Invitation not found or already used.'


class InvitationExpired(ServiceError):
    status_code = status.HTTP_410_GONE
    default_message = 'This invitation has expired.'


class MemberNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Member not found.'


class ForbiddenMemberOperation(ServiceError):
    default_message = 'This operation is not allowed for this member.'


class ModuleNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Module not found.'


class ModuleLocked(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Complete the previous module to unlock this one.'


class ViewTimeRequired(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Watch the presentation before taking the quiz.'


class CertificateNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Certificate not found.'


class InvalidResetLink(ServiceError):
    default_message = 'This password reset link is invalid or has expired.'


# Dependency failures

class EmailDeliveryError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'The email could not be sent. Please try again later.'


def _first_message(detail):
    """Dig the first human-readable message out of a DRF error structure."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if message:
                if key in ('non_field_errors', 'detail'):
                    return message
                return f'{key}: {message}'
        return None
    if isinstance(detail, (list, tuple)):
        for item in detail:
            message = _first_message(item)
            if message:
                return message
        return None
    return str(detail)


def api_exception_handler(exc, context):
    """Render service, DRF and unexpected errors as ``{"error": ...}``."""
    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error('%s in %s: %s', type(exc).__name__, context.get('view'), exc.message)
        return Response({'error': exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)

    if response is None:
        logger.exception('Unhandled error in %s', context.get('view'), exc_info=exc)
        return Response(
            {'error': 'An internal error occurred.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'error': _first_message(response.data) or 'Invalid input.',
            'errors': response.data,
        }
    elif isinstance(exc, exceptions.Throttled):
        response.data = {
            'error': f'Too many attempts. Please try again in {exc.wait or 0:.0f} seconds.',
        }
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else None
        response.data = {'error': str(detail) if detail else _first_message(response.data)}

    return response
