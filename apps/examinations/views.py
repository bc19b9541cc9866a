import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.utils import extend_schema, inline_serializer
from rest_framework import serializers, status
from rest_framework.authtoken.models import Token
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .graphql.context import ExamGraphQLView
from .graphql.schema import schema
from .serializers import UserRegistrationSerializer

logger = logging.getLogger(__name__)

TokenResponse = inline_serializer(
    name='TokenResponse',
    fields={
        'token': serializers.CharField(),
        'user_id': serializers.IntegerField(),
        'username': serializers.CharField(),
        'role': serializers.CharField(),
    },
)


def _token_payload(user, token):
    return {
        'token': token.key,
        'user_id': user.id,
        'username': user.username,
        'role': user.role,
    }


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(tags=['Authentication'], request=UserRegistrationSerializer, responses={201: TokenResponse})
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            # Generate token for auto-login
            token, _ = Token.objects.get_or_create(user=user)
            logger.info("Registered student account %s", user.pk)
            payload = _token_payload(user, token)
            payload['email'] = user.email
            return Response(payload, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        tags=['Authentication'],
        request=inline_serializer(
            name='LoginRequest',
            fields={
                'username': serializers.CharField(),
                'password': serializers.CharField(),
            },
        ),
        responses={200: TokenResponse},
    )
    def post(self, request):
        username = request.data.get('username')
        password = request.data.get('password')

        if not username or not password:
            return Response(
                {'error': 'Username and password required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        user = authenticate(username=username, password=password)

        if user:
            token, _ = Token.objects.get_or_create(user=user)
            return Response(_token_payload(user, token))

        logger.info("Failed login attempt for username %r", username)
        return Response(
            {'error': 'Invalid credentials'},
            status=status.HTTP_401_UNAUTHORIZED
        )


graphql_view = csrf_exempt(
    ExamGraphQLView.as_view(schema=schema, graphql_ide='graphiql' if settings.GRAPHIQL else None)
)
