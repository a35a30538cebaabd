from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Certificate(models.Model):
    """
    Course completion certificate.

    At most one per account. Issued once every module is passed and never
    recomputed afterwards; deleting the account deletes the certificate.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='certificate',
        verbose_name=_('user')
    )

    verification_code = models.CharField(
        _('verification code'),
        max_length=32,
        unique=True,
        help_text=_('Public code used to verify the certificate')
    )

    average_score = models.PositiveSmallIntegerField(
        _('average score'),
        help_text=_('Mean quiz score over all modules at issuance, rounded')
    )

    issued_at = models.DateTimeField(_('issued at'), auto_now_add=True)

    class Meta:
        verbose_name = _('certificate')
        verbose_name_plural = _('certificates')
        ordering = ['-issued_at']

    def __str__(self):
        return f"{self.verification_code} - {self.user.email}"
