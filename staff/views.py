from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsApprover, IsOversight, IsRegistrar
from accounts.serializers import CustomUserSerializer
from core.exceptions import Forbidden

from . import matrix
from .serializers import RegistrationSerializer, RejectionSerializer, SupervisorProfileSerializer
from .services import approval_service, profile_summary


class RegisterProfileView(APIView):
    permission_classes = [IsRegistrar]

    def post(self, request, profile_type):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = approval_service.register_profile(profile_type, request.user, serializer.validated_data)
        profile = result.profile
        message = (
            'Registration submitted. Awaiting approval.'
            if profile.is_pending else 'Staff member registered successfully.'
        )
        return Response({
            'success': True,
            'message': message,
            'user': CustomUserSerializer(result.identity).data,
            'profile': profile_summary(profile),
            # Returned once; the approval notice carries the only other copy
            'credentials': result.credentials,
        }, status=status.HTTP_201_CREATED)


class PendingApprovalsView(APIView):
    permission_classes = [IsApprover]

    def get(self, request):
        pending = approval_service.list_pending_approvals(request.user, request.query_params.get('type'))
        return Response({'success': True, 'count': len(pending), 'profiles': pending})


class ApprovalStatsView(APIView):
    permission_classes = [IsOversight]

    def get(self, request):
        return Response({'success': True, 'stats': approval_service.approval_stats()})


class ApproveProfileView(APIView):
    permission_classes = [IsApprover]

    def post(self, request, profile_id):
        result = approval_service.resolve_approval(profile_id, request.user, matrix.APPROVE)
        return Response({
            'success': True,
            'message': 'Registration approved successfully.',
            'profile': profile_summary(result.profile),
            'credentials': result.credentials,
        })


class RejectProfileView(APIView):
    permission_classes = [IsApprover]

    def post(self, request, profile_id):
        serializer = RejectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = approval_service.resolve_approval(
            profile_id, request.user, matrix.REJECT, serializer.validated_data['reason']
        )
        return Response({
            'success': True,
            'message': 'Registration rejected.',
            'profile': profile_summary(result.profile),
        })


class GeneralSupervisorSupervisorsView(APIView):
    """Supervisors registered under one General Supervisor"""

    def get(self, request, profile_id):
        general_supervisor = approval_service.get_general_supervisor(profile_id)
        if general_supervisor.user_id != request.user.id and not IsOversight().has_permission(request, self):
            raise Forbidden('You can only view supervisors in your own chain.')

        supervisors = approval_service.supervisors_under(general_supervisor)
        return Response({
            'success': True,
            'generalSupervisor': profile_summary(general_supervisor),
            'supervisors': SupervisorProfileSerializer(supervisors, many=True).data,
        })
