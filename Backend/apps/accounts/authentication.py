from django.conf import settings
from rest_framework import exceptions
from rest_framework.authentication import CSRFCheck
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication


class CookieJWTAuthentication(JWTAuthentication):
    """
    JWT authentication reading the ``Authorization`` header first and
    falling back to the session cookie set at login.

    simplejwt reloads the account on every request and rejects accounts
    that are no longer active. A stale cookie is treated as no session so
    public endpoints such as login keep working.

    Cookie sessions are sent by the browser automatically, so unsafe
    requests authenticated through the cookie must pass Django's CSRF
    check. Header tokens are not.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.COOKIES.get(settings.JWT_COOKIE_NAME)
        if not raw_token:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
            user = self.get_user(validated_token)
        except AuthenticationFailed:
            return None

        self.enforce_csrf(request)
        return user, validated_token

    def enforce_csrf(self, request):
        """Same check as DRF's ``SessionAuthentication.enforce_csrf``."""
        def dummy_get_response(request):
            return None

        check = CSRFCheck(dummy_get_response)
        check.process_request(request)
        reason = check.process_view(request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f'CSRF Failed: {reason}')
