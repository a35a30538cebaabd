"""
Members App Serializers
=======================
Serializers for invitations and admin member management.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.certificates.serializers import CertificateSerializer
from apps.training.serializers import ModuleProgressSerializer
from apps.training.services import round_half_up

User = get_user_model()


# =============================================================================
# Invitation Serializers
# =============================================================================

class InviteSerializer(serializers.Serializer):
    """Admin request to invite a participant."""

    email = serializers.EmailField()
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class InviteRedeemSerializer(serializers.Serializer):
    """Registration through an invitation link."""

    token = serializers.CharField(trim_whitespace=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password])
    full_name = serializers.CharField(max_length=255)

    def validate_full_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Full name is required.')
        return value


# =============================================================================
# Member Serializers
# =============================================================================

class MemberSerializer(serializers.ModelSerializer):
    """Participant row in the admin member list."""

    completed_modules = serializers.IntegerField(read_only=True)
    total_modules = serializers.SerializerMethodField()
    progress_percentage = serializers.SerializerMethodField()
    has_certificate = serializers.BooleanField(read_only=True)
    last_activity = serializers.DateTimeField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'role', 'status',
            'created_at', 'joined_at', 'token_expires_at',
            'completed_modules', 'total_modules', 'progress_percentage',
            'has_certificate', 'last_activity'
        ]
        read_only_fields = fields

    def get_total_modules(self, obj):
        return self.context.get('total_modules', 0)

    def get_progress_percentage(self, obj):
        total = self.get_total_modules(obj)
        if not total:
            return 0
        return round_half_up(Decimal(obj.completed_modules) * 100 / Decimal(total))


class MemberDetailSerializer(serializers.ModelSerializer):
    """Member with per-module progress and certificate."""

    progress = serializers.SerializerMethodField()
    certificate = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'role', 'status',
            'created_at', 'joined_at', 'token_expires_at',
            'progress', 'certificate'
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        rows = obj.module_progress.select_related('module').order_by('module__order_number')
        return ModuleProgressSerializer(rows, many=True).data

    def get_certificate(self, obj):
        certificate = getattr(obj, 'certificate', None)
        if certificate is None:
            return None
        return CertificateSerializer(certificate).data


class MemberStatusSerializer(serializers.Serializer):
    """Activate or deactivate a member."""

    status = serializers.ChoiceField(choices=[User.STATUS_ACTIVE, User.STATUS_INACTIVE])
