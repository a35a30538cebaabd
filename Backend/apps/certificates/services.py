"""
Certificate issuance.

A certificate is issued once per account, the first time every module is
passed. Later calls return the stored certificate unchanged.
"""

import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.training.services import get_ordered_modules, get_progress_map, round_half_up

from .models import Certificate

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


def generate_verification_code():
    """Return a short shareable code, e.g. ``AIA-3F9A0C1B``."""
    return f'{settings.CERTIFICATE_CODE_PREFIX}-{uuid.uuid4().hex[:8].upper()}'


def average_score(scores):
    """Mean of the given scores, rounded half up to a whole number."""
    if not scores:
        return 0
    return round_half_up(Decimal(sum(scores)) / Decimal(len(scores)))


def issue_or_fetch(user):
    """
    Issue the user's certificate when eligible, or return the existing one.

    Returns:
        dict with ``eligible``, ``completed_modules``, ``total_modules``,
        ``certificate`` (None when not eligible) and ``created``
    """
    modules = get_ordered_modules()
    progress_by_module = get_progress_map(user)

    passed = [
        progress_by_module[module.id]
        for module in modules
        if module.id in progress_by_module and progress_by_module[module.id].is_passed
    ]

    result = {
        'eligible': bool(modules) and len(passed) == len(modules),
        'completed_modules': len(passed),
        'total_modules': len(modules),
        'certificate': None,
        'created': False,
    }

    if not result['eligible']:
        return result

    existing = Certificate.objects.filter(user=user).first()
    if existing is not None:
        result['certificate'] = existing
        return result

    score = average_score([progress.quiz_score for progress in passed])

    for _ in range(MAX_CODE_ATTEMPTS):
        try:
            with transaction.atomic():
                certificate = Certificate.objects.create(
                    user=user,
                    verification_code=generate_verification_code(),
                    average_score=score,
                )
        except IntegrityError:
            # Either a concurrent request issued it first, or the code collided.
            existing = Certificate.objects.filter(user=user).first()
            if existing is not None:
                result['certificate'] = existing
                return result
            continue

        logger.info(
            'Certificate %s issued to user %s (average %s)',
            certificate.verification_code, user.id, score
        )
        result['certificate'] = certificate
        result['created'] = True
        return result

    raise RuntimeError('Could not generate a unique certificate verification code.')


def find_by_code(code):
    """Return the certificate with this verification code, or None."""
    code = (code or '').strip().upper()
    if not code:
        return None
    return Certificate.objects.select_related('user').filter(verification_code=code).first()
