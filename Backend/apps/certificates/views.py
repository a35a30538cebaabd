from rest_framework import views
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.exceptions import CertificateNotFound

from .serializers import CertificateSerializer
from .services import find_by_code, issue_or_fetch


class MyCertificateView(views.APIView):
    """
    Return the current user's certificate, issuing it on first request
    once every module is passed.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        result = issue_or_fetch(request.user)
        certificate = result['certificate']

        return Response({
            'success': True,
            'eligible': result['eligible'],
            'completed_modules': result['completed_modules'],
            'total_modules': result['total_modules'],
            'certificate': CertificateSerializer(certificate).data if certificate else None,
        })


class VerifyCertificateView(views.APIView):
    """Public lookup of a certificate by its verification code."""

    permission_classes = [AllowAny]

    def get(self, request, code):
        certificate = find_by_code(code)
        if certificate is None:
            raise CertificateNotFound()

        return Response({
            'success': True,
            'valid': True,
            'certificate': CertificateSerializer(certificate).data,
        })
