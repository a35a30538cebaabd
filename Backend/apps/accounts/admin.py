from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for course accounts."""

    list_display = ['email', 'full_name', 'role', 'status', 'token_expires_at', 'created_at']
    list_filter = ['role', 'status', 'created_at']
    search_fields = ['email', 'full_name']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'joined_at', 'invite_token_hash', 'token_expires_at']
    filter_horizontal = ()

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('full_name',)}),
        (_('Role & Status'), {'fields': ('role', 'status')}),
        (_('Invitation'), {'fields': ('invited_by', 'invite_token_hash', 'token_expires_at')}),
        (_('Important Dates'), {'fields': ('last_login', 'joined_at', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'full_name', 'role', 'status', 'password1', 'password2'),
        }),
    )
