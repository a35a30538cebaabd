from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Certificate


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    """Certificates are issued by the course; the admin only reads them."""

    list_display = ['verification_code', 'user_email', 'average_score', 'issued_at']
    search_fields = ['verification_code', 'user__email', 'user__full_name']
    readonly_fields = ['user', 'verification_code', 'average_score', 'issued_at']
    ordering = ['-issued_at']

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = _('User')

    def has_add_permission(self, request):
        return False
