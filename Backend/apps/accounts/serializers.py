from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated account."""

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'role', 'status', 'joined_at', 'created_at']
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    """Credentials posted to the login endpoint."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for open self-registration."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password])
    full_name = serializers.CharField(max_length=255)

    def validate_email(self, value):
        return User.objects.normalize_email(value)

    def validate_full_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Full name is required.')
        return value


class UserUpdateSerializer(serializers.Serializer):
    """Serializer for updating the own profile."""

    full_name = serializers.CharField(max_length=255, required=False)
    new_password = serializers.CharField(
        write_only=True, required=False, trim_whitespace=False, validators=[validate_password]
    )

    def validate_full_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Full name cannot be empty.')
        return value

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No changes submitted.')
        return attrs


class PasswordResetRequestSerializer(serializers.Serializer):
    """Address that should receive a password reset link."""

    email = serializers.EmailField()

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class PasswordResetConfirmSerializer(serializers.Serializer):
    """New password submitted from a reset link."""

    uid = serializers.CharField()
    token = serializers.CharField()
    new_password = serializers.CharField(write_only=True, trim_whitespace=False, validators=[validate_password])
