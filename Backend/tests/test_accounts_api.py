"""
Login, self-registration, logout and profile endpoints.
"""
import pytest
from django.conf import settings

from apps.accounts.credentials import verify_password, verify_session
from apps.accounts.models import User

from conftest import PASSWORD

pytestmark = pytest.mark.django_db

COOKIE = settings.JWT_COOKIE_NAME


class TestLogin:

    url = '/api/v1/auth/login/'

    def test_success_sets_cookie(self, api_client, participant):
        response = api_client.post(self.url, {'email': participant.email, 'password': PASSWORD}, format='json')

        assert response.status_code == 200
        assert response.json()['success'] is True
        assert response.json()['user']['email'] == participant.email
        assert verify_session(response.cookies[COOKIE].value)['account_id'] == participant.pk

        participant.refresh_from_db()
        assert participant.last_login is not None

    def test_email_is_case_insensitive(self, api_client, participant):
        response = api_client.post(self.url, {'email': 'PARTICIPANT@example.com', 'password': PASSWORD}, format='json')
        assert response.status_code == 200

    def test_wrong_password(self, api_client, participant):
        response = api_client.post(self.url, {'email': participant.email, 'password': 'nope'}, format='json')

        assert response.status_code == 401
        assert response.json() == {'error': 'Invalid email or password.'}
        assert COOKIE not in response.cookies

    def test_unknown_email_gets_same_message(self, api_client):
        response = api_client.post(self.url, {'email': 'ghost@example.com', 'password': PASSWORD}, format='json')

        assert response.status_code == 401
        assert response.json() == {'error': 'Invalid email or password.'}

    def test_inactive_account(self, api_client, make_user):
        user = make_user(status=User.STATUS_INACTIVE)

        response = api_client.post(self.url, {'email': user.email, 'password': PASSWORD}, format='json')

        assert response.status_code == 401
        assert response.json() == {'error': 'Your account has not been activated.'}

    def test_missing_fields(self, api_client):
        response = api_client.post(self.url, {}, format='json')

        assert response.status_code == 400
        assert set(response.json()['errors']) == {'email', 'password'}


class TestRegister:

    url = '/api/v1/auth/register/'

    def test_creates_active_participant(self, api_client):
        response = api_client.post(self.url, {
            'email': 'New@Example.com', 'password': 'fresh-pass-1', 'full_name': 'New Person',
        }, format='json')

        assert response.status_code == 201
        user = User.objects.get(email='new@example.com')
        assert user.status == User.STATUS_ACTIVE
        assert user.role == User.ROLE_PARTICIPANT
        assert user.joined_at is not None
        assert COOKIE in response.cookies

    def test_duplicate_email(self, api_client, participant):
        response = api_client.post(self.url, {
            'email': participant.email, 'password': 'fresh-pass-1', 'full_name': 'Copy',
        }, format='json')

        assert response.status_code == 400
        assert response.json() == {'error': 'This email address is already registered.'}

    def test_numeric_password_is_rejected(self, api_client):
        response = api_client.post(self.url, {
            'email': 'new@example.com', 'password': '12345678', 'full_name': 'New Person',
        }, format='json')

        assert response.status_code == 400
        assert 'password' in response.json()['errors']
        assert not User.objects.filter(email='new@example.com').exists()

    def test_blank_name_is_rejected(self, api_client):
        response = api_client.post(self.url, {
            'email': 'new@example.com', 'password': 'fresh-pass-1', 'full_name': '   ',
        }, format='json')

        assert response.status_code == 400


class TestLogout:

    def test_clears_cookie(self, auth_client):
        response = auth_client.post('/api/v1/auth/logout/')

        assert response.status_code == 200
        assert response.cookies[COOKIE].value == ''
        assert auth_client.get('/api/v1/auth/profile/').status_code == 401

    def test_works_without_session(self, api_client):
        assert api_client.post('/api/v1/auth/logout/').status_code == 200


class TestProfile:

    url = '/api/v1/auth/profile/'

    def test_get_profile(self, auth_client, participant):
        response = auth_client.get(self.url)

        assert response.status_code == 200
        assert response.json()['email'] == participant.email
        assert 'password' not in response.json()

    def test_name_change_refreshes_session(self, auth_client, participant):
        response = auth_client.put(self.url, {'full_name': 'Renamed Person'}, format='json')

        assert response.status_code == 200
        assert response.json()['user']['full_name'] == 'Renamed Person'
        assert verify_session(response.cookies[COOKIE].value)['full_name'] == 'Renamed Person'

    def test_password_change(self, auth_client, participant):
        response = auth_client.patch(self.url, {'new_password': 'another-pass-2'}, format='json')

        assert response.status_code == 200
        assert COOKIE not in response.cookies
        participant.refresh_from_db()
        assert verify_password('another-pass-2', participant.password)

    def test_empty_update(self, auth_client):
        response = auth_client.put(self.url, {}, format='json')

        assert response.status_code == 400
        assert response.json()['error'] == 'No changes submitted.'

    def test_requires_login(self, api_client):
        assert api_client.get(self.url).status_code == 401
