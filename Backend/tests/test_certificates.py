"""
Certificate issuance and public verification.
"""
import re
from unittest.mock import patch

import pytest

from apps.certificates import services
from apps.certificates.models import Certificate

pytestmark = pytest.mark.django_db

SCORES = [80, 90, 70, 100, 75, 85]


# ============================================================================
# Service
# ============================================================================

class TestIssueOrFetch:

    def test_issues_certificate_with_rounded_average(self, participant, modules, complete_modules):
        complete_modules(participant, modules, SCORES)

        result = services.issue_or_fetch(participant)

        assert result['eligible'] is True
        assert result['created'] is True
        assert result['completed_modules'] == 6
        certificate = result['certificate']
        assert certificate.average_score == 83
        assert re.fullmatch(r'AIA-[0-9A-F]{8}', certificate.verification_code)

    def test_second_call_returns_same_certificate(self, participant, modules, complete_modules):
        complete_modules(participant, modules, SCORES)
        first = services.issue_or_fetch(participant)['certificate']

        second = services.issue_or_fetch(participant)

        assert second['created'] is False
        assert second['certificate'].pk == first.pk
        assert second['certificate'].verification_code == first.verification_code
        assert Certificate.objects.count() == 1

    def test_not_eligible_with_a_failed_module(self, participant, modules, complete_modules):
        complete_modules(participant, modules, [80, 90, 70, 100, 75, 69])

        result = services.issue_or_fetch(participant)

        assert result['eligible'] is False
        assert result['certificate'] is None
        assert result['completed_modules'] == 5
        assert not Certificate.objects.exists()

    def test_not_eligible_without_modules(self, participant):
        result = services.issue_or_fetch(participant)

        assert result['eligible'] is False
        assert result['total_modules'] == 0

    def test_concurrent_issue_converges_on_existing(self, participant, modules, complete_modules):
        complete_modules(participant, modules, SCORES)
        existing = Certificate.objects.create(
            user=participant, verification_code='AIA-00000001', average_score=83
        )

        # The first lookup misses, as if the other request had not committed yet.
        with patch.object(Certificate.objects, 'filter', side_effect=[
            Certificate.objects.none(),
            Certificate.objects.filter(pk=existing.pk),
        ]):
            result = services.issue_or_fetch(participant)

        assert result['created'] is False
        assert result['certificate'].pk == existing.pk
        assert Certificate.objects.count() == 1

    def test_code_collision_retries(self, participant, make_user, modules, complete_modules):
        other = make_user(email='other@example.com')
        Certificate.objects.create(user=other, verification_code='AIA-AAAAAAAA', average_score=90)
        complete_modules(participant, modules, SCORES)

        with patch.object(services, 'generate_verification_code', side_effect=['AIA-AAAAAAAA', 'AIA-BBBBBBBB']):
            result = services.issue_or_fetch(participant)

        assert result['certificate'].verification_code == 'AIA-BBBBBBBB'

    def test_gives_up_after_repeated_collisions(self, participant, make_user, modules, complete_modules):
        other = make_user(email='other@example.com')
        Certificate.objects.create(user=other, verification_code='AIA-AAAAAAAA', average_score=90)
        complete_modules(participant, modules, SCORES)

        with patch.object(services, 'generate_verification_code', return_value='AIA-AAAAAAAA'):
            with pytest.raises(RuntimeError):
                services.issue_or_fetch(participant)


class TestAverageScore:

    @pytest.mark.parametrize('scores,expected', [
        (SCORES, 83),
        ([70, 71], 71),
        ([70, 70, 71], 70),
        ([], 0),
    ])
    def test_average(self, scores, expected):
        assert services.average_score(scores) == expected


class TestFindByCode:

    def test_lookup_ignores_case_and_whitespace(self, participant):
        Certificate.objects.create(user=participant, verification_code='AIA-1A2B3C4D', average_score=88)

        assert services.find_by_code('  aia-1a2b3c4d ').user == participant

    def test_unknown_code(self):
        assert services.find_by_code('AIA-FFFFFFFF') is None
        assert services.find_by_code('') is None

    def test_certificate_goes_with_deleted_account(self, participant):
        Certificate.objects.create(user=participant, verification_code='AIA-1A2B3C4D', average_score=88)

        participant.delete()

        assert services.find_by_code('AIA-1A2B3C4D') is None


# ============================================================================
# Endpoints
# ============================================================================

class TestCertificateEndpoints:

    def test_mine_not_eligible(self, auth_client, participant, modules, complete_modules):
        complete_modules(participant, modules[:3], [90, 90, 90])

        response = auth_client.get('/api/v1/certificates/mine/')

        assert response.status_code == 200
        body = response.json()
        assert body['eligible'] is False
        assert body['certificate'] is None
        assert body['completed_modules'] == 3
        assert body['total_modules'] == 6

    def test_mine_issues_certificate(self, auth_client, participant, modules, complete_modules):
        complete_modules(participant, modules, SCORES)

        response = auth_client.get('/api/v1/certificates/mine/')

        assert response.status_code == 200
        certificate = response.json()['certificate']
        assert certificate['average_score'] == 83
        assert certificate['full_name'] == participant.full_name

        again = auth_client.get('/api/v1/certificates/mine/').json()['certificate']
        assert again['verification_code'] == certificate['verification_code']

    def test_mine_requires_login(self, api_client):
        assert api_client.get('/api/v1/certificates/mine/').status_code == 401

    def test_public_verification(self, api_client, participant):
        Certificate.objects.create(user=participant, verification_code='AIA-1A2B3C4D', average_score=88)

        response = api_client.get('/api/v1/certificates/verify/aia-1a2b3c4d/')

        assert response.status_code == 200
        body = response.json()
        assert body['valid'] is True
        assert body['certificate']['verification_code'] == 'AIA-1A2B3C4D'
        assert body['certificate']['average_score'] == 88

    def test_verification_of_unknown_code(self, api_client):
        response = api_client.get('/api/v1/certificates/verify/AIA-00000000/')

        assert response.status_code == 404
        assert response.json() == {'error': 'Certificate not found.'}

