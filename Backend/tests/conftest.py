"""
Shared fixtures for the AI Academy test suite.
"""
import pytest
from django.conf import settings
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.accounts.credentials import issue_session
from apps.accounts.models import User
from apps.training.models import Module, Question, ModuleProgress

PASSWORD = 'correct-horse-42'


@pytest.fixture(autouse=True)
def _clear_cache():
    """Rate limit counters live in the cache; start every test clean."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(email='participant@example.com', password=PASSWORD, **extra):
        extra.setdefault('full_name', 'Test Participant')
        return User.objects.create_user(email=email, password=password, **extra)
    return _make_user


@pytest.fixture
def participant(make_user):
    return make_user()


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser(
        email='admin@example.com',
        password=PASSWORD,
        full_name='Course Admin',
    )


def _login_client(user):
    client = APIClient()
    client.cookies[settings.JWT_COOKIE_NAME] = issue_session(user)
    return client


@pytest.fixture
def auth_client(participant):
    """Client carrying a session cookie for ``participant``."""
    return _login_client(participant)


@pytest.fixture
def admin_client(admin_user):
    return _login_client(admin_user)


@pytest.fixture
def modules(db):
    """Six modules with five questions each; every correct answer is "B"."""
    created = []
    for number in range(1, 7):
        module = Module.objects.create(
            order_number=number,
            title=f'Module {number}',
            description=f'Description of module {number}',
            embed_url=f'https://gamma.app/embed/module-{number}',
        )
        for q in range(1, 6):
            Question.objects.create(
                module=module,
                order_number=q,
                question_text=f'Question {q} of module {number}?',
                option_a='Wrong A',
                option_b='Right B',
                option_c='Wrong C',
                option_d='Wrong D',
                correct_answer='B',
            )
        created.append(module)
    return created


@pytest.fixture
def complete_modules():
    """Mark modules as passed for a user with the given scores."""
    def _complete(user, modules, scores):
        for module, score in zip(modules, scores):
            ModuleProgress.objects.update_or_create(
                user=user,
                module=module,
                defaults={
                    'view_time_seconds': settings.MIN_VIEW_TIME_SECONDS,
                    'quiz_score': score,
                    'quiz_completed': score >= settings.QUIZ_PASSING_SCORE,
                },
            )
    return _complete
