from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied

from .models import CustomUser
from .permissions import ROLE_PERMISSIONS


class UserSerializer(serializers.ModelSerializer):
    permissions = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'name', 'email', 'username', 'registration_no', 'role',
            'is_verified', 'is_active', 'permissions', 'date_joined',
        ]
        read_only_fields = fields

    def get_permissions(self, obj):
        return ROLE_PERMISSIONS.get(obj.role, [])


class LoginSerializer(serializers.Serializer):
    """
    Students sign in with their registration number, staff and admins with
    their username. Email works for everyone.
    """
    email = serializers.EmailField(required=False)
    username = serializers.CharField(required=False, min_length=3)
    registration_no = serializers.CharField(required=False, min_length=3)
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'})

    def validate(self, attrs):
        email = attrs.get('email')
        username = attrs.get('username')
        registration_no = attrs.get('registration_no')
        password = attrs.get('password')

        if not (email or username or registration_no):
            raise serializers.ValidationError('Email, username or registration number is required')

        if email:
            lookup = {'email__iexact': email.strip()}
        elif username:
            lookup = {'username__iexact': username.strip()}
        else:
            lookup = {'registration_no': registration_no.strip()}

        user = CustomUser.objects.filter(**lookup).first()
        if user is None or not user.check_password(password):
            raise serializers.ValidationError('Invalid credentials')

        if not user.is_active:
            raise serializers.ValidationError('User account is disabled')

        if user.role == CustomUser.ROLE_STUDENT and not user.is_verified:
            raise PermissionDenied('Account not verified')

        attrs['user'] = user
        return attrs
