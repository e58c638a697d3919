"""
Approval workflow for staff role profiles.

Registration creates an identity and its role profile in one transaction.
Gated profiles start PENDING with the temporary password sealed on the
profile; resolution moves them to APPROVED or REJECTED exactly once with a
conditional update on ``approval_status``, so the loser of a race sees
NotPending. Notification fan-out and activity entries are dispatched as
side effects after commit and never affect the result.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from accounts.credentials import generate_employee_id, generate_temporary_password, generate_username
from accounts.models import CustomUser
from accounts.services import CredentialCollision, IdentityService
from activity.models import ActivityLog
from activity.services import ActivityService
from core.crypto import encrypt_json
from core.exceptions import Forbidden, NotFound, NotPending, ValidationError
from core.side_effects import dispatch
from notifications import tasks as notification_tasks

from . import matrix
from .models import (
    ApprovalStatus,
    GATED_PROFILE_MODELS,
    ManagerProfile,
    OperatorProfile,
    ProfileType,
    SecretaryProfile,
    SupervisorProfile,
)

logger = logging.getLogger(__name__)

Role = CustomUser.Role

REQUIRED_FIELDS = ('first_name', 'last_name', 'email')
OPTIONAL_FIELDS = ('phone', 'salary', 'region_assigned', 'start_date', 'shift_type')
CREDENTIAL_ATTEMPTS = 3

UNGATED_PROFILE_MODELS = {
    ProfileType.SECRETARY: SecretaryProfile,
    ProfileType.MANAGER: ManagerProfile,
}

REGISTERED_ACTIONS = {
    ProfileType.GENERAL_SUPERVISOR: ActivityLog.Action.SUPERVISOR_REGISTERED,
    ProfileType.SUPERVISOR: ActivityLog.Action.SUPERVISOR_REGISTERED,
    ProfileType.OPERATOR: ActivityLog.Action.OPERATOR_REGISTERED,
    ProfileType.SECRETARY: ActivityLog.Action.SECRETARY_REGISTERED,
    ProfileType.MANAGER: ActivityLog.Action.MANAGER_REGISTERED,
}

RESOLVED_ACTIONS = {
    (ProfileType.GENERAL_SUPERVISOR, matrix.APPROVE): ActivityLog.Action.SUPERVISOR_APPROVED,
    (ProfileType.GENERAL_SUPERVISOR, matrix.REJECT): ActivityLog.Action.SUPERVISOR_REJECTED,
    (ProfileType.SUPERVISOR, matrix.APPROVE): ActivityLog.Action.SUPERVISOR_APPROVED,
    (ProfileType.SUPERVISOR, matrix.REJECT): ActivityLog.Action.SUPERVISOR_REJECTED,
    (ProfileType.OPERATOR, matrix.APPROVE): ActivityLog.Action.OPERATOR_APPROVED,
    (ProfileType.OPERATOR, matrix.REJECT): ActivityLog.Action.OPERATOR_REJECTED,
}

REGISTRANT_PROFILE_MISSING = {
    ProfileType.SUPERVISOR: (
        'General Supervisor profile not found or not yet approved. '
        'Only approved General Supervisors can register Supervisors.'
    ),
    ProfileType.OPERATOR: (
        'Supervisor profile not found or not yet approved. '
        'Only approved Supervisors can register Operators.'
    ),
}


@dataclass
class RegistrationResult:
    identity: CustomUser
    profile: Any
    credentials: Dict[str, str] = field(default_factory=dict)


@dataclass
class ResolutionResult:
    profile: Any
    credentials: Optional[Dict[str, str]] = None


def profile_summary(profile) -> Dict[str, Any]:
    user = profile.user
    summary = {
        'id': str(profile.id),
        'profileType': profile.profile_type,
        'fullName': profile.full_name,
        'email': user.email,
        'phone': user.phone,
        'employeeId': profile.employee_id,
        'approvalStatus': profile.approval_status,
        'registeredBy': str(user.created_by_id) if user.created_by_id else None,
        'createdAt': profile.created_at.isoformat() if profile.created_at else None,
    }
    if isinstance(profile, SupervisorProfile):
        summary['generalSupervisorId'] = (
            str(profile.general_supervisor_id) if profile.general_supervisor_id else None
        )
    if isinstance(profile, OperatorProfile):
        summary['supervisorId'] = str(profile.supervisor_id)
    return summary


class ApprovalService:
    """Registration and resolution of role profiles.

    ``clock`` and ``rng`` are injectable so tests can fix timestamps and
    generated credentials.
    """

    def __init__(self, clock=None, rng=None, password_length=None):
        self.clock = clock or timezone.now
        self.rng = rng
        self.password_length = password_length

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register_profile(self, profile_type, registrant, fields) -> RegistrationResult:
        profile_type = matrix.normalize_profile_type(profile_type)
        rule = matrix.check_registration(registrant.role, profile_type)
        data = self._clean_fields(fields)

        parent = None
        if rule.registrant_profile_types:
            parent = self._approved_registrant_profile(registrant, rule)

        IdentityService.assert_available(data['email'], data.get('phone'))

        temporary_password = generate_temporary_password(
            self.password_length or settings.TEMPORARY_PASSWORD_LENGTH, rng=self.rng
        )
        status = CustomUser.Status.PENDING if rule.gated else CustomUser.Status.ACTIVE

        with transaction.atomic():
            identity = self._create_identity(rule, registrant, data, temporary_password, status)
            profile = self._create_profile(rule, identity, registrant, data, parent, temporary_password)

            if rule.gated:
                dispatch(
                    notification_tasks.notify_approval_requested_task,
                    profile_type, str(profile.id), str(registrant.id),
                )
            else:
                dispatch(
                    notification_tasks.notify_staff_registered_task,
                    profile_type, str(profile.id), str(registrant.id),
                )
            ActivityService.record_later(
                registrant.id,
                REGISTERED_ACTIONS[profile_type],
                entity_type=profile_type,
                entity_id=profile.id,
                metadata={
                    'fullName': profile.full_name,
                    'email': identity.email,
                    'employeeId': identity.employee_id,
                },
            )

        logger.info(
            "%s registered %s profile %s (%s)",
            registrant.id, profile_type, profile.id, profile.approval_status,
        )
        credentials = {
            'employeeId': identity.employee_id,
            'email': identity.email,
            'username': identity.username,
            'temporaryPassword': temporary_password,
        }
        return RegistrationResult(identity=identity, profile=profile, credentials=credentials)

    def _clean_fields(self, fields):
        fields = fields or {}
        data = {}
        missing = []
        for name in REQUIRED_FIELDS:
            value = str(fields.get(name) or '').strip()
            if not value:
                missing.append(name)
            data[name] = value
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        for name in OPTIONAL_FIELDS:
            value = fields.get(name)
            if value not in (None, ''):
                data[name] = value
        data['email'] = data['email'].lower()
        return data

    def _approved_registrant_profile(self, registrant, rule):
        profile = SupervisorProfile.objects.filter(
            user=registrant,
            approval_status=ApprovalStatus.APPROVED,
            supervisor_type__in=rule.registrant_profile_types,
        ).first()
        if profile is None:
            raise Forbidden(REGISTRANT_PROFILE_MISSING[rule.profile_type])
        return profile

    def _create_identity(self, rule, registrant, data, temporary_password, status):
        for attempt in range(1, CREDENTIAL_ATTEMPTS + 1):
            employee_id = generate_employee_id(rule.employee_id_prefix, now=self.clock, rng=self.rng)
            username = generate_username(data['first_name'], data['last_name'], rng=self.rng)
            try:
                return IdentityService.create_identity(
                    email=data['email'],
                    password=temporary_password,
                    role=rule.identity_role,
                    first_name=data['first_name'],
                    last_name=data['last_name'],
                    phone=data.get('phone'),
                    status=status,
                    employee_id=employee_id,
                    username=username,
                    created_by=registrant,
                    must_reset_password=True,
                )
            except CredentialCollision as exc:
                logger.warning("Generated %s %s already taken (attempt %s)", type(exc).__name__, exc, attempt)
        raise ValidationError('Could not allocate a unique employee ID and username. Please retry.')

    def _create_profile(self, rule, identity, registrant, data, parent, temporary_password):
        common = {
            'user': identity,
            'employee_id': identity.employee_id,
            'full_name': f"{data['first_name']} {data['last_name']}",
            'salary': data.get('salary'),
            'region_assigned': data.get('region_assigned', ''),
            'start_date': data.get('start_date'),
        }

        if not rule.gated:
            model = UNGATED_PROFILE_MODELS[rule.profile_type]
            return model.objects.create(
                approval_status=ApprovalStatus.APPROVED,
                approved_by=registrant,
                approved_at=self.clock(),
                **common,
            )

        common['approval_status'] = ApprovalStatus.PENDING
        common['raw_password'] = SupervisorProfile.seal_password(temporary_password)

        if rule.profile_type == ProfileType.OPERATOR:
            return OperatorProfile.objects.create(
                supervisor=parent,
                shift_type=data.get('shift_type', ''),
                **common,
            )
        return SupervisorProfile.objects.create(
            supervisor_type=rule.profile_type,
            general_supervisor=parent if rule.profile_type == ProfileType.SUPERVISOR else None,
            **common,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve_approval(self, profile_id, approver, decision, reason=None) -> ResolutionResult:
        decision = matrix.normalize_decision(decision)
        profile = self.get_gated_profile(profile_id)
        profile_type = profile.profile_type

        if not profile.is_pending:
            raise NotPending(f'Profile is already {profile.approval_status.lower()}.')
        matrix.check_approval(approver.role, profile_type, decision, self._is_on_chain(profile, approver))

        reason = (reason or '').strip()
        if decision == matrix.REJECT and not reason:
            raise ValidationError('Rejection reason is required.')

        approving = decision == matrix.APPROVE
        temporary_password = None
        if approving:
            try:
                temporary_password = profile.reveal_raw_password()
            except ValueError:
                logger.error("Sealed temporary password of profile %s could not be decrypted", profile.id)
                raise ValidationError(
                    'Temporary password can no longer be recovered; reject and re-register.'
                )
        now = self.clock()
        model = type(profile)

        with transaction.atomic():
            updated = model.objects.filter(
                pk=profile.pk, approval_status=ApprovalStatus.PENDING
            ).update(
                approval_status=ApprovalStatus.APPROVED if approving else ApprovalStatus.REJECTED,
                approved_by=approver,
                approved_at=now,
                rejection_reason='' if approving else reason,
                raw_password=None,
                updated_at=now,
            )
            if not updated:
                raise NotPending()

            if approving:
                IdentityService.activate(profile.user_id)
                # Re-hash from the captured plaintext so login matches what the notice reveals
                IdentityService.set_password(profile.user_id, temporary_password)
            else:
                IdentityService.deactivate(profile.user_id, reason, CustomUser.Status.SUSPENDED)

            profile.refresh_from_db()
            credentials = None
            if approving:
                credentials = {
                    'employeeId': profile.employee_id,
                    'email': profile.user.email,
                    'username': profile.user.username,
                    'temporaryPassword': temporary_password,
                }
            self._dispatch_resolution(profile, approver, decision, credentials, reason)

        logger.info("%s resolved %s profile %s: %s", approver.id, profile_type, profile.id, profile.approval_status)
        return ResolutionResult(profile=profile, credentials=credentials)

    def _dispatch_resolution(self, profile, approver, decision, credentials, reason):
        recipient_id = self.result_recipient_id(profile)
        if recipient_id is None:
            logger.warning("No recipient for %s result of profile %s", decision, profile.id)
        else:
            dispatch(
                notification_tasks.notify_approval_result_task,
                profile.profile_type,
                str(profile.id),
                str(recipient_id),
                str(approver.id),
                decision == matrix.APPROVE,
                sealed_credentials=encrypt_json(credentials) if credentials else None,
                reason=reason or None,
            )
        ActivityService.record_later(
            approver.id,
            RESOLVED_ACTIONS[(profile.profile_type, decision)],
            entity_type=profile.profile_type,
            entity_id=profile.id,
            metadata={
                'fullName': profile.full_name,
                'employeeId': profile.employee_id,
                'reason': reason or None,
            },
        )

    @staticmethod
    def result_recipient_id(profile):
        """Who receives the approval result: the hierarchy parent, else the registrant"""
        if isinstance(profile, SupervisorProfile) and profile.general_supervisor_id:
            return SupervisorProfile.objects.values_list('user_id', flat=True).get(
                pk=profile.general_supervisor_id
            )
        if isinstance(profile, OperatorProfile):
            return SupervisorProfile.objects.values_list('user_id', flat=True).get(pk=profile.supervisor_id)
        return profile.user.created_by_id

    @staticmethod
    def _is_on_chain(profile, approver):
        if not isinstance(profile, OperatorProfile):
            return False
        supervisor = profile.supervisor
        if supervisor.user_id == approver.id:
            # Registering supervisors never approve their own operators
            return supervisor.supervisor_type == ProfileType.GENERAL_SUPERVISOR
        return (
            supervisor.general_supervisor_id is not None
            and supervisor.general_supervisor.user_id == approver.id
        )

    @staticmethod
    def get_gated_profile(profile_id):
        for model in GATED_PROFILE_MODELS:
            try:
                return model.objects.select_related('user').get(pk=profile_id)
            except (model.DoesNotExist, DjangoValidationError, ValueError, TypeError):
                continue
        raise NotFound('Profile not found.')

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def list_pending_approvals(self, approver, profile_type=None) -> List[Dict[str, Any]]:
        """Pending profiles the approver is allowed to resolve"""
        types = matrix.approvable_types(approver.role)
        if not types:
            raise Forbidden(f'{matrix.plural(approver.role)} cannot approve staff.')
        if profile_type:
            profile_type = matrix.normalize_profile_type(profile_type)
            if profile_type not in types:
                matrix.check_approval(approver.role, profile_type, matrix.APPROVE)
            types = [profile_type]

        summaries = []
        supervisor_types = [t for t in types if t != ProfileType.OPERATOR]
        if supervisor_types:
            pending = SupervisorProfile.objects.select_related('user').filter(
                approval_status=ApprovalStatus.PENDING,
                supervisor_type__in=supervisor_types,
            )
            summaries.extend(profile_summary(p) for p in pending)

        if ProfileType.OPERATOR in types:
            pending = OperatorProfile.objects.select_related('user', 'supervisor').filter(
                approval_status=ApprovalStatus.PENDING,
            )
            rule = matrix.APPROVAL_RULES[ProfileType.OPERATOR]
            if approver.role not in rule.approver_roles:
                pending = pending.filter(
                    Q(supervisor__user=approver, supervisor__supervisor_type=ProfileType.GENERAL_SUPERVISOR)
                    | Q(supervisor__general_supervisor__user=approver)
                )
            summaries.extend(profile_summary(p) for p in pending)

        summaries.sort(key=lambda s: s['createdAt'] or '', reverse=True)
        return summaries

    @staticmethod
    def approval_stats() -> Dict[str, Any]:
        by_type = {}
        supervisor_counts = SupervisorProfile.objects.values('supervisor_type', 'approval_status').annotate(
            count=Count('id')
        )
        for row in supervisor_counts:
            by_type.setdefault(row['supervisor_type'], {})[row['approval_status']] = row['count']
        operator_counts = OperatorProfile.objects.values('approval_status').annotate(count=Count('id'))
        for row in operator_counts:
            by_type.setdefault(ProfileType.OPERATOR, {})[row['approval_status']] = row['count']

        totals = {status: 0 for status in ApprovalStatus.values}
        breakdown = {}
        for profile_type in matrix.APPROVAL_RULES:
            counts = by_type.get(profile_type, {})
            breakdown[profile_type] = {
                status.lower(): counts.get(status, 0) for status in ApprovalStatus.values
            }
            for status in ApprovalStatus.values:
                totals[status] += counts.get(status, 0)

        return {
            'pending': totals[ApprovalStatus.PENDING],
            'approved': totals[ApprovalStatus.APPROVED],
            'rejected': totals[ApprovalStatus.REJECTED],
            'byType': breakdown,
        }

    @staticmethod
    def supervisors_under(general_supervisor):
        """Supervisor profiles whose parent is the given General Supervisor profile (or id)"""
        general_supervisor_id = getattr(general_supervisor, 'pk', general_supervisor)
        return SupervisorProfile.objects.select_related('user').filter(
            general_supervisor_id=general_supervisor_id,
            supervisor_type=ProfileType.SUPERVISOR,
        )

    @staticmethod
    def get_general_supervisor(profile_id):
        try:
            return SupervisorProfile.objects.select_related('user').get(
                pk=profile_id, supervisor_type=ProfileType.GENERAL_SUPERVISOR
            )
        except (SupervisorProfile.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise NotFound('General Supervisor not found.')


approval_service = ApprovalService()
