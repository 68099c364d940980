import logging

from rest_framework import generics, status, permissions
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from django.contrib.auth.models import update_last_login
from django.db import connection, DatabaseError
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiExample

from .serializers import UserSerializer, LoginSerializer
from .permissions import ROLE_PERMISSIONS

logger = logging.getLogger(__name__)


# =============== AUTHENTICATION VIEWS ===============

class CustomTokenObtainPairView(TokenObtainPairView):
    """
    JWT login for every role.

    The issued tokens carry the user's role so clients can route
    students to the menu and staff to the counter screens.
    """
    serializer_class = LoginSerializer

    @extend_schema(
        summary="User Login with JWT Token",
        description="""
        Authenticate with a password and one identifier:
        - Students: registration_no (account must be verified)
        - Staff / admin: username
        - Anyone: email
        """,
        request=LoginSerializer,
        responses={
            200: {
                'type': 'object',
                'properties': {
                    'refresh': {'type': 'string', 'description': 'JWT refresh token'},
                    'access': {'type': 'string', 'description': 'JWT access token'},
                    'user': {'type': 'object', 'description': 'User information'},
                    'role': {'type': 'string', 'description': 'User role'},
                    'permissions': {'type': 'array', 'items': {'type': 'string'}},
                }
            },
            400: {'description': 'Invalid credentials or validation errors'},
            403: {'description': 'Student account not verified'},
        },
        examples=[
            OpenApiExample(
                'Student Login',
                value={"registration_no": "21BCE1001", "password": "secret123"},
            ),
            OpenApiExample(
                'Staff Login',
                value={"username": "counter1", "password": "secret123"},
            ),
        ]
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']
        update_last_login(None, user)

        # Generate tokens
        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role
        refresh['email'] = user.email

        logger.info(f"Login succeeded for user {user.pk} ({user.role})")

        return Response({
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
            'role': user.role,
            'permissions': ROLE_PERMISSIONS.get(user.role, []),
        }, status=status.HTTP_200_OK)


class MyProfileView(generics.RetrieveAPIView):
    """
    Get current user's profile
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(summary="Get My Profile", responses={200: UserSerializer})
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_object(self):
        return self.request.user


# =============== SYSTEM ===============

@extend_schema(
    summary="Health Check",
    description="Check API and database health",
    responses={
        200: {
            'type': 'object',
            'properties': {
                'status': {'type': 'string'},
                'timestamp': {'type': 'string'},
                'database': {'type': 'string'},
            }
        }
    }
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([permissions.AllowAny])
def health_check(request):
    try:
        # Test database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return Response({
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected',
        })
    except DatabaseError as e:
        logger.error(f"Health check failed: {e}")
        return Response({
            'status': 'unhealthy',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
