"""
Training App URLs
=================
URL routing for course modules, quizzes and progress.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ModuleViewSet, ProgressView, QuizSubmitView

app_name = 'training'

router = DefaultRouter()
router.register(r'modules', ModuleViewSet, basename='module')

urlpatterns = [
    path('progress/', ProgressView.as_view(), name='progress'),
    path('progress/quiz/', QuizSubmitView.as_view(), name='progress-quiz'),
    path('', include(router.urls)),
]

# API Endpoints Summary:
#
# Modules:
# GET    /modules/                         - Ordered modules with lock state and progress
# GET    /modules/{id}/                    - Module detail (unlocked modules only)
# GET    /modules/{id}/questions/          - Quiz questions (after minimum view time)
#
# Progress:
# GET    /progress/                        - Current user's progress rows
# POST   /progress/                        - Save view time for a module
# POST   /progress/quiz/                   - Submit a quiz score or answers
