import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework import permissions, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from activity.models import ActivityLog
from activity.services import ActivityService
from core.exceptions import Forbidden
from core.utils import get_client_ip, get_user_agent

from .models import CustomUser
from .serializers import ChangePasswordSerializer, CustomUserSerializer, LoginSerializer
from .services import IdentityService

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    CustomUser.Status.PENDING: 'Your account is pending approval.',
    CustomUser.Status.INACTIVE: 'Your account is inactive.',
    CustomUser.Status.SUSPENDED: 'Your account has been suspended.',
}


class LoginView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email']
        password = serializer.validated_data['password']

        user = authenticate(request, email=email, password=password)

        if user is None:
            # ModelBackend refuses inactive identities; tell them apart from bad passwords
            candidate = IdentityService.find_by_login(email)
            if candidate and candidate.status != CustomUser.Status.ACTIVE and candidate.check_password(password):
                logger.info("Login refused for %s identity %s", candidate.status, candidate.id)
                raise Forbidden(STATUS_MESSAGES.get(candidate.status, 'Your account is not active.'))
            raise AuthenticationFailed('Invalid credentials')

        update_last_login(None, user)
        ActivityService.record_later(
            user.id,
            ActivityLog.Action.LOGIN,
            entity_type='USER',
            entity_id=user.id,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )

        refresh = RefreshToken.for_user(user)
        return Response({
            'success': True,
            'user': CustomUserSerializer(user).data,
            'tokens': {
                'refresh': str(refresh),
                'access': str(refresh.access_token),
            }
        })


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(CustomUserSerializer(request.user).data)


class ChangePasswordView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        IdentityService.set_password(
            request.user.id,
            serializer.validated_data['new_password'],
            must_reset=False,
        )
        ActivityService.record_later(
            request.user.id,
            ActivityLog.Action.PASSWORD_CHANGED,
            entity_type='USER',
            entity_id=request.user.id,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
        return Response({'success': True, 'message': 'Password updated successfully.'})


class CustomTokenRefreshView(TokenRefreshView):
    pass
