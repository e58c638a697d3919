from django.urls import path

from .views import (
    ApprovalStatsView,
    ApproveProfileView,
    GeneralSupervisorSupervisorsView,
    PendingApprovalsView,
    RegisterProfileView,
    RejectProfileView,
)

urlpatterns = [
    path('register/<str:profile_type>/', RegisterProfileView.as_view(), name='register_profile'),
    path('approvals/pending/', PendingApprovalsView.as_view(), name='pending_approvals'),
    path('approvals/stats/', ApprovalStatsView.as_view(), name='approval_stats'),
    path('approvals/<uuid:profile_id>/approve/', ApproveProfileView.as_view(), name='approve_profile'),
    path('approvals/<uuid:profile_id>/reject/', RejectProfileView.as_view(), name='reject_profile'),
    path(
        'general-supervisors/<uuid:profile_id>/supervisors/',
        GeneralSupervisorSupervisorsView.as_view(),
        name='general_supervisor_supervisors',
    ),
]
