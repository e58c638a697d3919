from rest_framework import serializers

from accounts.serializers import CustomUserSerializer
from .models import OperatorProfile, SupervisorProfile


class RegistrationSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    salary = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    region_assigned = serializers.CharField(max_length=100, required=False, allow_blank=True)
    start_date = serializers.DateField(required=False, allow_null=True)
    shift_type = serializers.ChoiceField(choices=OperatorProfile.ShiftType.choices, required=False, allow_blank=True)


class RejectionSerializer(serializers.Serializer):
    # Blank reasons are refused by the approval service with a domain error
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class SupervisorProfileSerializer(serializers.ModelSerializer):
    user_details = CustomUserSerializer(source='user', read_only=True)

    class Meta:
        model = SupervisorProfile
        fields = [
            'id', 'employee_id', 'full_name', 'supervisor_type', 'general_supervisor', 'approval_status',
            'approved_by', 'approved_at', 'region_assigned', 'start_date', 'created_at', 'user_details',
        ]
        read_only_fields = fields
