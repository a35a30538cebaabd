"""
Members App URLs
================
Admin member management and public invitation endpoints.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import InviteView, MemberViewSet, InviteValidateView, InviteRegisterView

app_name = 'members'

router = DefaultRouter()
router.register(r'admin/members', MemberViewSet, basename='member')

urlpatterns = [
    path('admin/invite/', InviteView.as_view(), name='invite'),
    path('invite/validate/', InviteValidateView.as_view(), name='invite-validate'),
    path('invite/register/', InviteRegisterView.as_view(), name='invite-register'),
    path('', include(router.urls)),
]

# API Endpoints Summary:
#
# Admin:
# POST   /admin/invite/                    - Invite a participant
# GET    /admin/members/                   - Participants with progress summary
# GET    /admin/members/{id}/              - Member detail with module progress
# PATCH  /admin/members/{id}/              - Activate or deactivate
# DELETE /admin/members/{id}/              - Delete member and their progress
# POST   /admin/members/{id}/password-reset/ - Email a password reset link
#
# Public:
# GET    /invite/validate/?token=          - Check an invitation link
# POST   /invite/register/                 - Accept invitation and create account
