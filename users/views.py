"""
Users — Views

Auth endpoints: register, login, refresh, logout, me.

@file users/views.py
"""

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from core.constants import AUDIT_ACTION_LOGIN, AUDIT_ACTION_LOGOUT
from core.services import AuditService

from .serializers import (
    CustomTokenObtainPairSerializer,
    LogoutSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserReadSerializer,
)
from .services import AuthService, UserService

logger = logging.getLogger('beinghappy')


def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {'access': str(refresh.access_token), 'refresh': str(refresh)}


class RegisterView(APIView):
    """POST /api/v1/auth/register/ — Create an account and sign in."""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.register(**serializer.validated_data)
        return Response(
            {
                'success': True,
                'data': {**_token_pair(user), 'user': UserReadSerializer(user).data},
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """POST /api/v1/auth/login/ — Authenticate and obtain a JWT pair."""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CustomTokenObtainPairSerializer(
            data=request.data, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGIN,
            user=serializer.user,
            ip_address=AuditService.get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )

        return Response({
            'success': True,
            'data': {
                'access': serializer.validated_data['access'],
                'refresh': serializer.validated_data['refresh'],
                'user': serializer.validated_data['user'],
            },
        })


class LogoutView(APIView):
    """POST /api/v1/auth/logout/ — Blacklist the refresh token."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refresh_token = serializer.validated_data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as exc:
                logger.info('Ignoring invalid refresh token on logout: %s', exc)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGOUT,
            user=request.user,
            ip_address=AuditService.get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )
        return Response({'success': True, 'data': None}, status=status.HTTP_200_OK)


class TokenRefreshAPIView(TokenRefreshView):
    """POST /api/v1/auth/refresh/ — Rotate refresh token."""
    pass


class MeView(APIView):
    """GET / PATCH /api/v1/auth/me/ — Current user and profile edits."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({
            'success': True,
            'data': UserReadSerializer(request.user).data,
        })

    def patch(self, request):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = UserService.update_profile(user=request.user, **serializer.validated_data)
        return Response({
            'success': True,
            'data': UserReadSerializer(user).data,
        })
