"""
Members App Views
=================
Admin invitation and member management, plus the public invitation
validation and registration endpoints.
"""

from django.db.models import Q
from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.accounts.credentials import start_session
from apps.accounts.serializers import UserSerializer
from apps.core.permissions import IsAdmin
from apps.core.ratelimit import ScopedRateThrottle
from apps.training.models import Module

from . import services
from .serializers import (
    InviteSerializer,
    InviteRedeemSerializer,
    MemberSerializer,
    MemberDetailSerializer,
    MemberStatusSerializer,
)


# =============================================================================
# Admin: invitations
# =============================================================================

class InviteView(views.APIView):
    """Invite a participant by email (admin only)."""

    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        serializer = InviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.invite_participant(
            email=serializer.validated_data['email'],
            full_name=serializer.validated_data['full_name'],
            invited_by=request.user,
        )

        if result.reactivated:
            return Response({
                'success': True,
                'reactivated': True,
                'message': 'The participant has been reactivated.',
                'member': UserSerializer(result.user).data,
            })

        return Response({
            'success': True,
            'reactivated': False,
            'message': f'Invitation sent to {result.user.email}.',
            'member': UserSerializer(result.user).data,
        }, status=status.HTTP_201_CREATED)


# =============================================================================
# Admin: members
# =============================================================================

class MemberViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    viewsets.GenericViewSet):
    """
    Course participants for admins.

    - list: participants with completed modules and certificate flag
    - retrieve: progress per module and certificate
    - partial_update: activate or deactivate
    - destroy: delete the participant with their progress
    - password_reset: email the participant a password reset link
    """

    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = MemberSerializer
    http_method_names = ['get', 'post', 'patch', 'delete']

    def get_queryset(self):
        queryset = services.member_queryset()

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(Q(email__icontains=search) | Q(full_name__icontains=search))

        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action == 'list':
            context['total_modules'] = Module.objects.count()
        return context

    def retrieve(self, request, pk=None):
        member = services.get_member(pk)
        return Response(MemberDetailSerializer(member).data)

    def partial_update(self, request, pk=None):
        serializer = MemberStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = services.set_member_status(request.user, pk, serializer.validated_data['status'])

        return Response({
            'success': True,
            'member': UserSerializer(member).data,
        })

    def destroy(self, request, pk=None):
        services.delete_member(request.user, pk)
        return Response({'success': True, 'message': 'Member deleted.'})

    @action(detail=True, methods=['post'], url_path='password-reset')
    def password_reset(self, request, pk=None):
        member = services.reset_member_password(request.user, pk)
        return Response({
            'success': True,
            'message': f'Password reset email sent to {member.email}.',
        })


# =============================================================================
# Public: invitation links
# =============================================================================

class InviteValidateView(views.APIView):
    """Check an invitation link and return the invited address."""

    permission_classes = [AllowAny]

    def get(self, request):
        email = services.validate_invitation(request.query_params.get('token', '').strip())
        return Response({'valid': True, 'email': email})


class InviteRegisterView(views.APIView):
    """Complete registration from an invitation and log the new member in."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    rate_limit_scope = 'invite_redeem'

    def post(self, request):
        serializer = InviteRedeemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = services.redeem_invitation(
            serializer.validated_data['token'],
            serializer.validated_data['password'],
            serializer.validated_data['full_name'],
        )

        response = Response({
            'success': True,
            'message': 'Account created successfully.',
            'user': UserSerializer(user).data,
        })
        return start_session(response, user)
