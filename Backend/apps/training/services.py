"""
Progress tracking for the course.

``record_view_time`` and ``record_quiz_score`` are the write primitives;
unlock and status rules are pure functions over the ordered modules and
the participant's progress rows.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import InvalidInput, ModuleLocked, ModuleNotFound, ViewTimeRequired

from .models import Module, ModuleProgress

logger = logging.getLogger(__name__)

STATUS_COMPLETED = 'completed'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_NOT_STARTED = 'not_started'


def round_half_up(value):
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _is_whole_number(value):
    return isinstance(value, int) and not isinstance(value, bool)


# =============================================================================
# Lookups
# =============================================================================

def get_module(module_id):
    try:
        return Module.objects.get(pk=module_id)
    except (Module.DoesNotExist, ValueError, TypeError):
        raise ModuleNotFound()


def get_ordered_modules():
    return list(Module.objects.order_by('order_number'))


def get_progress_map(user):
    """Return the user's progress rows keyed by module id."""
    return {
        progress.module_id: progress
        for progress in ModuleProgress.objects.filter(user=user)
    }


# =============================================================================
# Unlock and status rules
# =============================================================================

def compute_unlock_state(ordered_modules, progress_by_module):
    """
    Return ``{module_id: is_unlocked}``.

    The first module is always open; every later module opens once the
    quiz of the module right before it is completed.
    """
    unlocked = {}
    previous = None

    for index, module in enumerate(ordered_modules):
        if index == 0:
            unlocked[module.id] = True
        else:
            progress = progress_by_module.get(previous.id)
            unlocked[module.id] = bool(progress and progress.quiz_completed)
        previous = module

    return unlocked


def module_status(progress):
    if progress is None:
        return STATUS_NOT_STARTED
    if progress.quiz_completed:
        return STATUS_COMPLETED
    if progress.view_time_seconds > 0 or progress.quiz_score is not None:
        return STATUS_IN_PROGRESS
    return STATUS_NOT_STARTED


def course_overview(user):
    """
    Ordered list of ``{'module', 'progress', 'is_unlocked', 'status'}``
    entries, one per module.
    """
    modules = get_ordered_modules()
    progress_by_module = get_progress_map(user)
    unlocked = compute_unlock_state(modules, progress_by_module)

    overview = []
    for module in modules:
        progress = progress_by_module.get(module.id)
        overview.append({
            'module': module,
            'progress': progress,
            'is_unlocked': unlocked[module.id],
            'status': module_status(progress),
        })
    return overview


def is_module_unlocked(user, module):
    previous = (
        Module.objects
        .filter(order_number__lt=module.order_number)
        .order_by('-order_number')
        .first()
    )
    if previous is None:
        return True
    return ModuleProgress.objects.filter(
        user=user, module=previous, quiz_completed=True
    ).exists()


def ensure_unlocked(user, module):
    if not is_module_unlocked(user, module):
        raise ModuleLocked()


def ensure_quiz_available(user, module):
    """The quiz opens once the module is unlocked and the presentation was watched long enough."""
    ensure_unlocked(user, module)

    progress = ModuleProgress.objects.filter(user=user, module=module).first()
    view_time = progress.view_time_seconds if progress else 0
    required = settings.MIN_VIEW_TIME_SECONDS

    if view_time < required:
        minutes = max(1, required // 60)
        raise ViewTimeRequired(
            f'Watch the presentation for at least {minutes} minute(s) before taking the quiz.'
        )
    return progress


# =============================================================================
# Write primitives
# =============================================================================

def record_view_time(user, module_id, seconds):
    """
    Store the latest view time for a module.

    Only ``view_time_seconds`` is written; quiz fields of an existing row
    are left as they are. Repeated or out-of-order deliveries are fine,
    the last write wins.
    """
    if not _is_whole_number(seconds) or not 0 <= seconds <= settings.MAX_VIEW_TIME_SECONDS:
        raise InvalidInput(
            f'View time must be a whole number between 0 and {settings.MAX_VIEW_TIME_SECONDS} seconds.'
        )

    module = get_module(module_id)

    progress, _ = ModuleProgress.objects.update_or_create(
        user=user,
        module=module,
        defaults={'view_time_seconds': seconds},
    )
    return progress


def record_quiz_score(user, module_id, score):
    """
    Record a quiz score for a module.

    Every call records the submitted score. Submitting the score already
    stored is a no-op, so ``completed_at`` keeps its original timestamp.

    Returns:
        tuple: (progress, changed)
    """
    if not _is_whole_number(score) or not 0 <= score <= 100:
        raise InvalidInput('Quiz score must be a whole number between 0 and 100.')

    module = get_module(module_id)
    passed = score >= settings.QUIZ_PASSING_SCORE

    with transaction.atomic():
        progress, created = ModuleProgress.objects.select_for_update().get_or_create(
            user=user,
            module=module,
        )

        if not created and progress.quiz_score == score and progress.quiz_completed == passed:
            return progress, False

        progress.quiz_score = score
        progress.quiz_completed = passed
        progress.completed_at = timezone.now() if passed else None
        progress.save(update_fields=['quiz_score', 'quiz_completed', 'completed_at', 'updated_at'])

    logger.info(
        'Quiz score %s recorded for user %s on module %s (passed=%s)',
        score, user.id, module.id, passed
    )
    return progress, True


# =============================================================================
# Grading
# =============================================================================

def grade_answers(module, answers):
    """
    Grade submitted answers against the module's questions.

    Args:
        module: Module being graded.
        answers: dict mapping question id (str or int) to "A".."D".

    Returns:
        dict with score, correct, total and per-question results
    """
    questions = list(module.questions.order_by('order_number', 'id'))
    total = len(questions)

    if total == 0:
        raise InvalidInput('This module has no quiz questions.')

    normalized = {str(key): str(value).strip().upper() for key, value in answers.items()}

    correct = 0
    results = []
    for question in questions:
        selected = normalized.get(str(question.id))
        is_correct = selected == question.correct_answer
        if is_correct:
            correct += 1
        results.append({
            'question_id': question.id,
            'selected': selected,
            'correct_answer': question.correct_answer,
            'is_correct': is_correct,
        })

    return {
        'score': round_half_up(Decimal(correct) * 100 / Decimal(total)),
        'correct': correct,
        'total': total,
        'results': results,
    }
