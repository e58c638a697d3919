from django.contrib.auth import password_validation
from rest_framework import serializers

from .models import CustomUser


class CustomUserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'email', 'username', 'first_name', 'last_name', 'full_name', 'phone', 'role', 'status',
            'employee_id', 'must_reset_password', 'last_login', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class LoginSerializer(serializers.Serializer):
    # Email address or generated username
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect.')
        return value

    def validate(self, data):
        if data['current_password'] == data['new_password']:
            raise serializers.ValidationError({'new_password': 'New password must differ from the current one.'})
        password_validation.validate_password(data['new_password'], self.context['request'].user)
        return data
