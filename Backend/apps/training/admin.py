"""
Training App Admin
==================
Django admin configuration for course modules and progress.
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import Module, Question, ModuleProgress


class QuestionInline(admin.TabularInline):
    """Inline admin for Question in Module."""
    model = Question
    extra = 1
    fields = ['order_number', 'question_text', 'option_a', 'option_b', 'option_c', 'option_d', 'correct_answer']


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    """Admin for Module model."""

    list_display = ['order_number', 'title', 'question_count', 'created_at']
    list_display_links = ['title']
    search_fields = ['title', 'description']
    ordering = ['order_number']
    inlines = [QuestionInline]

    fieldsets = [
        (_('Module'), {
            'fields': ['order_number', 'title', 'description']
        }),
        (_('Content'), {
            'fields': ['embed_url']
        }),
    ]

    def question_count(self, obj):
        return obj.questions.count()
    question_count.short_description = _('Questions')


@admin.register(ModuleProgress)
class ModuleProgressAdmin(admin.ModelAdmin):
    """Admin for ModuleProgress model."""

    list_display = [
        'user_email', 'module', 'view_time_seconds',
        'quiz_score_display', 'quiz_completed', 'completed_at'
    ]
    list_filter = ['quiz_completed', 'module']
    search_fields = ['user__email', 'user__full_name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['user__email', 'module__order_number']

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = _('User')
    user_email.admin_order_field = 'user__email'

    def quiz_score_display(self, obj):
        if obj.quiz_score is None:
            return '-'
        color = 'green' if obj.quiz_completed else 'red'
        return format_html('<span style="color: {};">{}%</span>', color, obj.quiz_score)
    quiz_score_display.short_description = _('Quiz Score')
