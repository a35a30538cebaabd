from django.middleware.csrf import get_token
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import ensure_csrf_cookie
from rest_framework import status, views
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

from apps.core.ratelimit import ScopedRateThrottle

from .credentials import clear_session_cookie, start_session
from .serializers import (
    UserSerializer,
    LoginSerializer,
    UserRegistrationSerializer,
    UserUpdateSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
)
from .services import (
    authenticate_credentials,
    confirm_password_reset,
    register_participant,
    request_password_reset,
    update_profile,
)


class LoginView(views.APIView):
    """Email/password login; sets the session cookie."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    rate_limit_scope = 'login'

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate_credentials(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )

        response = Response({
            'success': True,
            'user': UserSerializer(user).data,
        })
        return start_session(response, user)


class RegisterView(views.APIView):
    """Open self-registration endpoint."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    rate_limit_scope = 'register'

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = register_participant(**serializer.validated_data)

        response = Response({
            'success': True,
            'user': UserSerializer(user).data,
            'message': 'Account created successfully.'
        }, status=status.HTTP_201_CREATED)
        return start_session(response, user)


class LogoutView(views.APIView):
    """Clear the session cookie. Sessions are stateless, nothing is revoked server-side."""

    permission_classes = [AllowAny]

    def post(self, request):
        response = Response({'success': True, 'message': 'Logged out successfully.'})
        return clear_session_cookie(response)


class UserProfileView(views.APIView):
    """Get and update the own profile."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def put(self, request):
        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        changed = update_profile(
            request.user,
            full_name=serializer.validated_data.get('full_name'),
            new_password=serializer.validated_data.get('new_password'),
        )

        response = Response({
            'success': True,
            'user': UserSerializer(request.user).data,
        })

        # The session carries the name as a claim; refresh it.
        if 'full_name' in changed:
            start_session(response, request.user)

        return response

    patch = put


class CsrfTokenView(views.APIView):
    """Set the CSRF cookie; unsafe requests made with the session cookie must echo it."""

    permission_classes = [AllowAny]

    @method_decorator(ensure_csrf_cookie)
    def get(self, request):
        return Response({'success': True, 'csrf_token': get_token(request)})


class PasswordResetRequestView(views.APIView):
    """Request a password reset link by email."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    rate_limit_scope = 'password_reset'

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        request_password_reset(serializer.validated_data['email'])

        return Response({
            'success': True,
            'message': 'If an account exists for this address, a reset link has been sent.',
        })


class PasswordResetConfirmView(views.APIView):
    """Choose a new password from a reset link."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    rate_limit_scope = 'password_reset_confirm'

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        confirm_password_reset(
            serializer.validated_data['uid'],
            serializer.validated_data['token'],
            serializer.validated_data['new_password'],
        )

        return Response({'success': True, 'message': 'Your password has been changed. You can now log in.'})
