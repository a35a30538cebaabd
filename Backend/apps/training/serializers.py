"""
Training App Serializers
========================
Serializers for modules, quiz questions and progress submissions.
"""

from django.conf import settings
from rest_framework import serializers

from .models import Module, Question, ModuleProgress


# =============================================================================
# Module Serializers
# =============================================================================

class ModuleSerializer(serializers.ModelSerializer):
    """Module content as shown to participants."""

    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Module
        fields = ['id', 'order_number', 'title', 'description', 'embed_url', 'total_questions']
        read_only_fields = fields


class ModuleProgressSerializer(serializers.ModelSerializer):
    """Progress row for one module."""

    module_id = serializers.IntegerField(source='module.id', read_only=True)
    module_title = serializers.CharField(source='module.title', read_only=True)
    order_number = serializers.IntegerField(source='module.order_number', read_only=True)

    class Meta:
        model = ModuleProgress
        fields = [
            'module_id', 'module_title', 'order_number', 'view_time_seconds',
            'quiz_score', 'quiz_completed', 'completed_at', 'updated_at'
        ]
        read_only_fields = fields


class ModuleOverviewSerializer(serializers.Serializer):
    """One entry of the course overview: module, lock state, status and progress."""

    def to_representation(self, entry):
        module = entry['module']
        progress = entry['progress']
        data = ModuleSerializer(module).data
        data.update({
            'is_unlocked': entry['is_unlocked'],
            'status': entry['status'],
            'view_time_seconds': progress.view_time_seconds if progress else 0,
            'quiz_score': progress.quiz_score if progress else None,
            'quiz_completed': progress.quiz_completed if progress else False,
            'completed_at': (
                serializers.DateTimeField().to_representation(progress.completed_at)
                if progress and progress.completed_at else None
            ),
            'min_view_time_seconds': settings.MIN_VIEW_TIME_SECONDS,
        })
        return data


# =============================================================================
# Question Serializers
# =============================================================================

class QuestionSerializer(serializers.ModelSerializer):
    """Question for participants; the correct answer is hidden."""

    class Meta:
        model = Question
        fields = ['id', 'order_number', 'question_text', 'option_a', 'option_b', 'option_c', 'option_d']
        read_only_fields = fields


class QuestionDetailSerializer(QuestionSerializer):
    """Question including the correct answer, for admins."""

    class Meta(QuestionSerializer.Meta):
        fields = QuestionSerializer.Meta.fields + ['correct_answer']
        read_only_fields = fields


# =============================================================================
# Submission Serializers
# =============================================================================

class ViewTimeSerializer(serializers.Serializer):
    """View time beacon for a module."""

    module_id = serializers.IntegerField()
    view_time_seconds = serializers.IntegerField(min_value=0)

    def validate_view_time_seconds(self, value):
        if value > settings.MAX_VIEW_TIME_SECONDS:
            raise serializers.ValidationError(
                f'View time cannot exceed {settings.MAX_VIEW_TIME_SECONDS} seconds.'
            )
        return value


class QuizSubmissionSerializer(serializers.Serializer):
    """
    Quiz result for a module: either a score computed by the client or the
    answers themselves, graded on the server.
    """

    module_id = serializers.IntegerField()
    quiz_score = serializers.IntegerField(min_value=0, max_value=100, required=False)
    answers = serializers.DictField(
        child=serializers.ChoiceField(choices=['A', 'B', 'C', 'D']),
        required=False,
        allow_empty=False
    )

    def to_internal_value(self, data):
        answers = data.get('answers') if hasattr(data, 'get') else None
        if isinstance(answers, dict):
            data = dict(data.items())
            data['answers'] = {
                str(key): value.strip().upper() if isinstance(value, str) else value
                for key, value in answers.items()
            }
        return super().to_internal_value(data)

    def validate(self, attrs):
        has_score = 'quiz_score' in attrs
        has_answers = 'answers' in attrs

        if has_score == has_answers:
            raise serializers.ValidationError('Submit either quiz_score or answers.')
        return attrs
