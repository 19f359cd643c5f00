"""
Authentication views.

Guests register themselves and everybody logs in with email and
password.  A successful login returns both a DRF token (``Token``
header) and a SimpleJWT pair; the access token also works for the
dashboard's URL based auto-login.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import AuthenticationFailed, NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework import status

from core.serializers.auth import LoginSerializer, RegisterSerializer
from core.services import audit
from core.services.users import create_user, format_user

from .models import User

logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def _token_payload(user: User) -> dict[str, object]:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': format_user(user),
    }


# ---------------------------------------------------------------------
# Self registration (always a customer)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    # A role sent by the client is ignored
    user, _ = create_user(
        email=vd['email'],
        password=vd['password'],
        name=vd['name'],
        phone=vd.get('phone'),
        role=User.ROLE_CUSTOMER,
        actor=vd['email'],
    )
    return Response(_token_payload(user), status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------
# Email/password login (no role bypass)
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']

    user = authenticate(request, username=email, password=s.validated_data['password'])
    if not user:
        logger.info('Failed login for %s from %s', email, request.META.get('REMOTE_ADDR'))
        raise AuthenticationFailed('Invalid credentials')

    audit.record(user.email, 'User logged in', {'ip': request.META.get('REMOTE_ADDR')})
    return Response(_token_payload(user), status=200)


@api_view(['GET'])
@permission_classes([AllowAny])
def auto_login_view(request, token: str):
    """Resolve a JWT access token from the URL to its user."""
    try:
        access = AccessToken(token)
    except TokenError as e:
        raise ValidationError(f'Invalid token: {e}')
    user = User.objects.filter(pk=access.get('user_id')).first()
    if not user:
        raise NotFound('User not found')
    audit.record(user.email, 'Auto login successful')
    return Response({'ok': True, 'user': format_user(user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, 'user': format_user(request.user)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            raise ValidationError(str(e))
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    audit.record(request.user.email, 'User logged out', {'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
