"""
Training App Models
===================
Course content and per-participant progress.

Models:
- Module: One course unit, taken in ``order_number`` sequence
- Question: Multiple-choice quiz question belonging to a module
- ModuleProgress: View time and quiz result per (user, module)
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Module(models.Model):
    """
    Course module: an embedded presentation followed by a quiz.

    Modules are authored content. The course is a strict sequence by
    ``order_number``; a module unlocks when the previous one's quiz is passed.
    """

    order_number = models.PositiveIntegerField(_('order number'), unique=True)
    title = models.CharField(_('title'), max_length=255)
    description = models.TextField(_('description'), blank=True)
    embed_url = models.URLField(
        _('embed URL'),
        max_length=500,
        blank=True,
        help_text=_('URL of the embedded presentation')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)

    class Meta:
        verbose_name = _('module')
        verbose_name_plural = _('modules')
        ordering = ['order_number']

    def __str__(self):
        return f"{self.order_number}. {self.title}"


class Question(models.Model):
    """Multiple choice question with four options, A to D."""

    ANSWER_CHOICES = [
        ('A', 'A'),
        ('B', 'B'),
        ('C', 'C'),
        ('D', 'D'),
    ]

    module = models.ForeignKey(
        Module,
        on_delete=models.CASCADE,
        related_name='questions',
        verbose_name=_('module')
    )

    order_number = models.PositiveIntegerField(_('order number'), default=1)
    question_text = models.TextField(_('question text'))

    option_a = models.CharField(_('option A'), max_length=500)
    option_b = models.CharField(_('option B'), max_length=500)
    option_c = models.CharField(_('option C'), max_length=500)
    option_d = models.CharField(_('option D'), max_length=500)

    correct_answer = models.CharField(
        _('correct answer'),
        max_length=1,
        choices=ANSWER_CHOICES
    )

    class Meta:
        verbose_name = _('question')
        verbose_name_plural = _('questions')
        ordering = ['module__order_number', 'order_number']

    def __str__(self):
        return f"{self.module.title} - Q{self.order_number}"


class ModuleProgress(models.Model):
    """
    Progress of one participant in one module.

    Created on the first view-time save or the first quiz submission.
    ``quiz_completed`` is true iff the last recorded score passed, and
    ``completed_at`` is set only while it is.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='module_progress',
        verbose_name=_('user')
    )

    module = models.ForeignKey(
        Module,
        on_delete=models.CASCADE,
        related_name='progress_records',
        verbose_name=_('module')
    )

    view_time_seconds = models.PositiveIntegerField(
        _('view time (seconds)'),
        default=0,
        validators=[MaxValueValidator(86400)]
    )

    quiz_score = models.PositiveSmallIntegerField(
        _('quiz score'),
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    quiz_completed = models.BooleanField(_('quiz completed'), default=False)
    completed_at = models.DateTimeField(_('completed at'), null=True, blank=True)

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('module progress')
        verbose_name_plural = _('module progress')
        ordering = ['user', 'module__order_number']
        constraints = [
            models.UniqueConstraint(fields=['user', 'module'], name='unique_user_module_progress'),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.module.title}"

    @property
    def is_passed(self):
        """Passed for certificate purposes."""
        return (
            self.quiz_completed
            and self.quiz_score is not None
            and self.quiz_score >= settings.QUIZ_PASSING_SCORE
        )
