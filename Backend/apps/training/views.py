"""
Training App Views
==================
API views for course modules, quizzes and progress.
"""

from django.conf import settings
from rest_framework import viewsets, views
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from . import services
from .models import Module
from .serializers import (
    ModuleSerializer,
    ModuleOverviewSerializer,
    ModuleProgressSerializer,
    QuestionSerializer,
    QuestionDetailSerializer,
    ViewTimeSerializer,
    QuizSubmissionSerializer,
)


# =============================================================================
# Module ViewSet
# =============================================================================

class ModuleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Course modules in order.

    - Participants only open unlocked modules
    - Admins can open every module and see the correct answers
    """

    queryset = Module.objects.order_by('order_number')
    serializer_class = ModuleSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_object(self):
        return services.get_module(self.kwargs[self.lookup_field])

    def list(self, request, *args, **kwargs):
        """Return every module with its lock state, status and progress."""
        overview = services.course_overview(request.user)
        completed = sum(1 for entry in overview if entry['status'] == services.STATUS_COMPLETED)

        return Response({
            'modules': ModuleOverviewSerializer(overview, many=True).data,
            'completed_modules': completed,
            'total_modules': len(overview),
        })

    def retrieve(self, request, *args, **kwargs):
        module = self.get_object()

        if not request.user.is_admin:
            services.ensure_unlocked(request.user, module)

        progress = module.progress_records.filter(user=request.user).first()

        data = ModuleSerializer(module).data
        data.update({
            'is_unlocked': True,
            'status': services.module_status(progress),
            'view_time_seconds': progress.view_time_seconds if progress else 0,
            'quiz_score': progress.quiz_score if progress else None,
            'quiz_completed': progress.quiz_completed if progress else False,
            'min_view_time_seconds': settings.MIN_VIEW_TIME_SECONDS,
        })
        return Response(data)

    @action(detail=True, methods=['get'])
    def questions(self, request, pk=None):
        """Get the quiz questions of a module."""
        module = self.get_object()
        questions = module.questions.order_by('order_number', 'id')

        payload = {
            'module_id': module.id,
            'module_title': module.title,
            'passing_score': settings.QUIZ_PASSING_SCORE,
        }

        if request.user.is_admin:
            payload['questions'] = QuestionDetailSerializer(questions, many=True).data
        else:
            progress = services.ensure_quiz_available(request.user, module)
            payload['previous_best_score'] = progress.quiz_score if progress else None
            payload['questions'] = QuestionSerializer(questions, many=True).data

        return Response(payload)


# =============================================================================
# Progress Views
# =============================================================================

class ProgressView(views.APIView):
    """
    GET: all progress rows of the current user.
    POST: save the view time of a module.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        rows = request.user.module_progress.select_related('module').order_by('module__order_number')
        return Response(ModuleProgressSerializer(rows, many=True).data)

    def post(self, request):
        serializer = ViewTimeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        progress = services.record_view_time(
            request.user,
            serializer.validated_data['module_id'],
            serializer.validated_data['view_time_seconds'],
        )

        return Response({
            'success': True,
            'view_time_seconds': progress.view_time_seconds,
        })


class QuizSubmitView(views.APIView):
    """
    Submit a quiz result.

    A score is stored only when it beats the previous best for the module,
    so a weaker retry never undoes a pass.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = QuizSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        module = services.get_module(data['module_id'])
        progress = services.ensure_quiz_available(request.user, module)

        graded = None
        if 'answers' in data:
            graded = services.grade_answers(module, data['answers'])
            score = graded['score']
        else:
            score = data['quiz_score']

        previous_best = progress.quiz_score if progress else None
        saved = previous_best is None or score > previous_best

        if saved:
            progress, _ = services.record_quiz_score(request.user, module.id, score)

        response = {
            'success': True,
            'quiz_score': score,
            'is_passing': score >= settings.QUIZ_PASSING_SCORE,
            'saved': saved,
            'best_score': progress.quiz_score,
            'quiz_completed': progress.quiz_completed,
        }

        if graded is not None:
            response.update({
                'correct': graded['correct'],
                'total': graded['total'],
                'results': graded['results'],
            })

        return Response(response)
