"""
Role profiles attached one-to-one to staff identities.

Supervisor and Operator profiles are gated: they start PENDING carrying the
transient temporary password and are resolved exactly once. Secretary,
Manager and Director profiles are created already APPROVED.
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.crypto import decrypt_secret, encrypt_secret


class ApprovalStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'


class ProfileType(models.TextChoices):
    GENERAL_SUPERVISOR = 'GENERAL_SUPERVISOR', 'General Supervisor'
    SUPERVISOR = 'SUPERVISOR', 'Supervisor'
    OPERATOR = 'OPERATOR', 'Operator'
    SECRETARY = 'SECRETARY', 'Secretary'
    MANAGER = 'MANAGER', 'Manager'
    DIRECTOR = 'DIRECTOR', 'Director'


class RoleProfile(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='%(class)s')
    employee_id = models.CharField(max_length=40, unique=True)
    full_name = models.CharField(max_length=255)

    approval_status = models.CharField(
        max_length=20, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING, db_index=True
    )
    # Encrypted temporary password; present only while PENDING
    raw_password = models.TextField(null=True, blank=True, editable=False)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default='')

    salary = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    region_assigned = models.CharField(max_length=100, blank=True, default='')
    start_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(approval_status=ApprovalStatus.PENDING, raw_password__isnull=False)
                    | (~Q(approval_status=ApprovalStatus.PENDING) & Q(raw_password__isnull=True))
                ),
                name='%(app_label)s_%(class)s_raw_password_only_pending',
            ),
        ]

    profile_type = None

    def __str__(self):
        return f"{self.full_name} ({self.employee_id}) - {self.approval_status}"

    @property
    def is_pending(self):
        return self.approval_status == ApprovalStatus.PENDING

    @staticmethod
    def seal_password(raw):
        return encrypt_secret(raw)

    def reveal_raw_password(self):
        if self.raw_password is None:
            return None
        return decrypt_secret(self.raw_password)


class SupervisorProfile(RoleProfile):
    supervisor_type = models.CharField(
        max_length=20,
        choices=[
            (ProfileType.GENERAL_SUPERVISOR, ProfileType.GENERAL_SUPERVISOR.label),
            (ProfileType.SUPERVISOR, ProfileType.SUPERVISOR.label),
        ],
    )
    general_supervisor = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='supervisors',
    )

    class Meta(RoleProfile.Meta):
        db_table = 'supervisor_profiles'
        constraints = RoleProfile.Meta.constraints + [
            models.CheckConstraint(
                condition=(
                    Q(supervisor_type=ProfileType.GENERAL_SUPERVISOR, general_supervisor__isnull=True)
                    | Q(supervisor_type=ProfileType.SUPERVISOR, general_supervisor__isnull=False)
                ),
                name='staff_supervisorprofile_hierarchy_shape',
            ),
        ]
        indexes = [
            models.Index(fields=['supervisor_type', 'approval_status'], name='supervisor_type_status_idx'),
        ]

    @property
    def profile_type(self):
        return self.supervisor_type


class OperatorProfile(RoleProfile):
    class ShiftType(models.TextChoices):
        DAY = 'DAY', 'Day'
        NIGHT = 'NIGHT', 'Night'
        ROTATING = 'ROTATING', 'Rotating'

    supervisor = models.ForeignKey(SupervisorProfile, on_delete=models.PROTECT, related_name='operators')
    shift_type = models.CharField(max_length=20, choices=ShiftType.choices, blank=True, default='')

    profile_type = ProfileType.OPERATOR

    class Meta(RoleProfile.Meta):
        db_table = 'operator_profiles'


class SecretaryProfile(RoleProfile):
    profile_type = ProfileType.SECRETARY

    class Meta(RoleProfile.Meta):
        db_table = 'secretary_profiles'


class ManagerProfile(RoleProfile):
    profile_type = ProfileType.MANAGER

    class Meta(RoleProfile.Meta):
        db_table = 'manager_profiles'


class DirectorProfile(RoleProfile):
    profile_type = ProfileType.DIRECTOR

    class Meta(RoleProfile.Meta):
        db_table = 'director_profiles'


GATED_PROFILE_MODELS = (SupervisorProfile, OperatorProfile)

PROFILE_MODELS = {
    ProfileType.GENERAL_SUPERVISOR: SupervisorProfile,
    ProfileType.SUPERVISOR: SupervisorProfile,
    ProfileType.OPERATOR: OperatorProfile,
    ProfileType.SECRETARY: SecretaryProfile,
    ProfileType.MANAGER: ManagerProfile,
    ProfileType.DIRECTOR: DirectorProfile,
}
