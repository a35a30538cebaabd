from rest_framework import serializers

from .models import Certificate


class CertificateSerializer(serializers.ModelSerializer):
    """Certificate data consumed by the PDF renderer."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = Certificate
        fields = ['verification_code', 'average_score', 'issued_at', 'full_name']
        read_only_fields = fields

    def get_full_name(self, obj):
        return obj.user.display_name
