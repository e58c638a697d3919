"""
Notification inbox and bounded-disclosure credential viewer.

Credential-bearing notices may reveal their payload at most ``max_views``
times. The view counter is only ever moved by a single conditional UPDATE,
so concurrent viewers can never push it past the limit.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounts.models import CustomUser
from activity.models import ActivityLog
from activity.services import ActivityService
from core.exceptions import NotFound, ValidationError
from staff.models import OperatorProfile, PROFILE_MODELS, ProfileType, SupervisorProfile

from .models import Notification

logger = logging.getLogger(__name__)

Role = CustomUser.Role

INBOX_LIMIT = 50
EXHAUSTED_MESSAGE = 'View limit reached. Credentials are no longer accessible.'

APPROVAL_REQUEST_TYPES = {
    ProfileType.GENERAL_SUPERVISOR: Notification.Type.SUPERVISOR_APPROVAL,
    ProfileType.SUPERVISOR: Notification.Type.SUPERVISOR_APPROVAL,
    ProfileType.OPERATOR: Notification.Type.OPERATOR_APPROVAL,
}

APPROVAL_RESULT_TYPES = {
    (ProfileType.GENERAL_SUPERVISOR, True): Notification.Type.SUPERVISOR_APPROVED,
    (ProfileType.GENERAL_SUPERVISOR, False): Notification.Type.SUPERVISOR_REJECTED,
    (ProfileType.SUPERVISOR, True): Notification.Type.SUPERVISOR_APPROVED,
    (ProfileType.SUPERVISOR, False): Notification.Type.SUPERVISOR_REJECTED,
    (ProfileType.OPERATOR, True): Notification.Type.OPERATOR_APPROVED,
    (ProfileType.OPERATOR, False): Notification.Type.OPERATOR_REJECTED,
}

# Roles reviewing each gated profile type; the operator's own chain GS is added separately
APPROVAL_REQUEST_ROLES = {
    ProfileType.GENERAL_SUPERVISOR: (Role.DIRECTOR,),
    ProfileType.SUPERVISOR: (Role.MANAGER,),
    ProfileType.OPERATOR: (Role.MANAGER,),
}


def _pk(value):
    return getattr(value, 'pk', value)


def _label(value):
    try:
        return ProfileType(value).label
    except ValueError:
        return str(value).replace('_', ' ').title()


class NotificationService:
    """Create, deliver and read inbox notifications"""

    def __init__(self, channel_layer=None):
        self.channel_layer = channel_layer or get_channel_layer()

    # ------------------------------------------------------------------------------------
    # CREATION & DELIVERY
    # ------------------------------------------------------------------------------------
    def create(self, receiver, notification_type, message, *, subject='', sender=None, metadata=None,
               entity_type=None, entity_id=None, action_url=None, max_views=None):
        if max_views is None:
            max_views = settings.CREDENTIAL_MAX_VIEWS
        if max_views < 0:
            raise ValidationError('max_views cannot be negative.')

        notification = Notification.objects.create(
            receiver_id=_pk(receiver),
            sender_id=_pk(sender),
            notification_type=notification_type,
            subject=subject,
            message=message,
            metadata=metadata or {},
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            action_url=action_url,
            max_views=max_views,
        )
        transaction.on_commit(lambda: self.push(notification))
        return notification

    def push(self, notification):
        """Best-effort real-time delivery to the receiver's WebSocket group"""
        if self.channel_layer is None:
            return False
        group = f"user_{notification.receiver_id}_notifications"
        try:
            async_to_sync(self.channel_layer.group_send)(
                group,
                {
                    'type': 'send_notification',  # must match consumer method
                    'notification': {
                        'id': str(notification.id),
                        'subject': notification.subject,
                        'message': notification.message,
                        'notification_type': notification.notification_type,
                        'has_credentials': notification.has_credentials,
                        'action_url': notification.action_url,
                        'created_at': notification.created_at.isoformat(),
                        'is_read': notification.is_read,
                    }
                }
            )
        except Exception:
            logger.exception("In-app push failed for notification %s", notification.id)
            return False
        return True

    def notify_role(self, role, notification_type, message, *, exclude=None, **kwargs):
        """Fan a notification out to every ACTIVE identity holding ``role``"""
        receivers = CustomUser.objects.filter(role=role, status=CustomUser.Status.ACTIVE)
        if exclude is not None:
            receivers = receivers.exclude(pk=_pk(exclude))
        return self.notify_users(receivers, notification_type, message, **kwargs)

    def notify_users(self, receivers, notification_type, message, **kwargs):
        notifications = []
        seen = set()
        for receiver in receivers:
            if receiver.pk in seen:
                continue
            seen.add(receiver.pk)
            notifications.append(self.create(receiver, notification_type, message, **kwargs))
        return notifications

    # ------------------------------------------------------------------------------------
    # WORKFLOW NOTICES
    # ------------------------------------------------------------------------------------
    @staticmethod
    def _load_profile(profile_type, profile_id):
        model = PROFILE_MODELS[profile_type]
        try:
            return model.objects.select_related('user').get(pk=profile_id)
        except model.DoesNotExist:
            raise NotFound('Profile not found.')

    @staticmethod
    def _chain_general_supervisor_user(profile):
        if not isinstance(profile, OperatorProfile):
            return None
        supervisor = profile.supervisor
        if supervisor.supervisor_type == ProfileType.GENERAL_SUPERVISOR:
            return supervisor.user
        if supervisor.general_supervisor_id:
            return SupervisorProfile.objects.select_related('user').get(pk=supervisor.general_supervisor_id).user
        return None

    def notify_approval_requested(self, profile_type, profile_id, registrant_id):
        """Tell the reviewers of ``profile_type`` that a registration awaits them"""
        profile = self._load_profile(profile_type, profile_id)
        registrant = CustomUser.objects.filter(pk=registrant_id).first()
        label = _label(profile_type)
        registrar = registrant.display_name if registrant else 'System'
        registrar_role = _label(registrant.role) if registrant else 'System'

        receivers = list(CustomUser.objects.filter(
            role__in=APPROVAL_REQUEST_ROLES[profile_type],
            status=CustomUser.Status.ACTIVE,
        ))
        chain_gs = self._chain_general_supervisor_user(profile)
        if chain_gs is not None and chain_gs.status == CustomUser.Status.ACTIVE and chain_gs.pk != _pk(registrant):
            receivers.append(chain_gs)

        notifications = self.notify_users(
            receivers,
            APPROVAL_REQUEST_TYPES[profile_type],
            f"{registrar} ({registrar_role}) has registered a new {label}: {profile.full_name}. "
            f"Please review and approve or reject this registration.",
            subject=f"New {label} Registration Pending Approval",
            sender=registrant,
            entity_type=profile_type,
            entity_id=profile.id,
            action_url=f"/approvals/{profile.id}",
            metadata={
                'profileId': str(profile.id),
                'profileType': profile_type,
                'fullName': profile.full_name,
                'email': profile.user.email,
                'employeeId': profile.employee_id,
            },
        )
        logger.info("Approval request for %s %s sent to %s reviewers", profile_type, profile.id, len(notifications))
        return notifications

    def notify_staff_registered(self, profile_type, profile_id, registrant_id):
        """Tell directors about staff created without an approval gate"""
        profile = self._load_profile(profile_type, profile_id)
        registrant = CustomUser.objects.filter(pk=registrant_id).first()
        label = _label(profile_type)
        registrar = registrant.display_name if registrant else 'System'

        return self.notify_role(
            Role.DIRECTOR,
            Notification.Type.STAFF_REGISTERED,
            f"{registrar} has registered a new {label}: {profile.full_name} ({profile.user.email}).",
            exclude=registrant,
            subject=f"New {label} Registered",
            sender=registrant,
            entity_type=profile_type,
            entity_id=profile.id,
            metadata={
                'profileId': str(profile.id),
                'profileType': profile_type,
                'fullName': profile.full_name,
            },
        )

    def notify_approval_result(self, profile_type, profile_id, recipient_id, approver_id, approved,
                               credentials=None, reason=None, max_views=None):
        """Send the resolution notice; approvals carry the bounded-view credentials"""
        profile = self._load_profile(profile_type, profile_id)
        approver = CustomUser.objects.filter(pk=approver_id).first()
        label = _label(profile_type)
        reviewer = approver.display_name if approver else 'System'
        reviewer_role = _label(approver.role) if approver else 'System'
        if max_views is None:
            max_views = settings.CREDENTIAL_MAX_VIEWS

        metadata = {
            'profileId': str(profile.id),
            'profileType': profile_type,
            'fullName': profile.full_name,
        }
        if approved:
            subject = f"{label} Registration Approved - {profile.full_name}"
            message = (
                f"{reviewer} ({reviewer_role}) has approved the registration for {label}: {profile.full_name}. "
                f"Click \"View Credentials\" to see the login details. "
                f"You can view credentials up to {max_views} times."
            )
            if credentials:
                metadata['credentials'] = credentials
        else:
            subject = f"{label} Registration Rejected - {profile.full_name}"
            message = (
                f"{reviewer} ({reviewer_role}) has rejected the registration for {label}: {profile.full_name}."
                f"\n\nReason: {reason or 'No reason provided'}"
            )
            metadata['reason'] = reason

        return self.create(
            recipient_id,
            APPROVAL_RESULT_TYPES[(profile_type, bool(approved))],
            message,
            subject=subject,
            sender=approver,
            metadata=metadata,
            entity_type=profile_type,
            entity_id=profile.id,
            max_views=max_views,
        )

    # ------------------------------------------------------------------------------------
    # INBOX
    # ------------------------------------------------------------------------------------
    @staticmethod
    def get_notifications(receiver, unread_only=False, limit=INBOX_LIMIT):
        queryset = Notification.objects.select_related('sender').filter(receiver_id=_pk(receiver))
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return list(queryset.order_by('-created_at')[:limit])

    @staticmethod
    def unread_count(receiver):
        return Notification.objects.filter(receiver_id=_pk(receiver), is_read=False).count()

    @staticmethod
    def get_owned(notification_id, requester):
        """A notification belongs exclusively to its receiver; anything else is NotFound"""
        try:
            return Notification.objects.get(pk=notification_id, receiver_id=_pk(requester))
        except (Notification.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise NotFound('Notification not found')

    def mark_read(self, notification_id, requester):
        notification = self.get_owned(notification_id, requester)
        if not notification.is_read:
            now = timezone.now()
            Notification.objects.filter(pk=notification.pk, is_read=False).update(is_read=True, read_at=now)
            notification.is_read = True
            notification.read_at = now
        return notification

    @staticmethod
    def mark_all_read(requester):
        return Notification.objects.filter(receiver_id=_pk(requester), is_read=False).update(
            is_read=True, read_at=timezone.now()
        )

    # ------------------------------------------------------------------------------------
    # BOUNDED DISCLOSURE
    # ------------------------------------------------------------------------------------
    def get_view_status(self, notification_id, requester):
        """Read-only view of the credential counter; never increments it"""
        notification = self.get_owned(notification_id, requester)
        has_credentials = notification.has_credentials
        return {
            'hasCredentials': has_credentials,
            'canView': has_credentials and notification.view_count < notification.max_views,
            'viewCount': notification.view_count,
            'maxViews': notification.max_views,
            'remainingViews': notification.remaining_views,
        }

    def view_credentials(self, notification_id, requester, ip_address=None, user_agent=None):
        """
        Reveal the credentials once, consuming one view.

        Returns a soft ``canView=False`` result when the views are used up;
        raises ValidationError when the notice never carried credentials.
        """
        notification = self.get_owned(notification_id, requester)
        if not notification.has_credentials:
            raise ValidationError('This notification does not contain credentials')

        # Check and increment in one statement
        consumed = Notification.objects.filter(
            pk=notification.pk,
            receiver_id=notification.receiver_id,
            view_count__lt=F('max_views'),
        ).update(view_count=F('view_count') + 1)

        notification.refresh_from_db(fields=['view_count', 'max_views'])

        if not consumed:
            logger.info("Credential view refused for exhausted notification %s", notification.id)
            return {
                'canView': False,
                'viewCount': notification.view_count,
                'maxViews': notification.max_views,
                'remainingViews': 0,
                'credentials': None,
                'message': EXHAUSTED_MESSAGE,
            }

        logger.info(
            "Credentials viewed on notification %s (%s/%s)",
            notification.id, notification.view_count, notification.max_views,
        )
        ActivityService.record_later(
            notification.receiver_id,
            ActivityLog.Action.CREDENTIALS_VIEWED,
            entity_type='NOTIFICATION',
            entity_id=notification.id,
            metadata={
                'viewCount': notification.view_count,
                'maxViews': notification.max_views,
                'profileId': notification.metadata.get('profileId'),
            },
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return {
            'canView': True,
            'viewCount': notification.view_count,
            'maxViews': notification.max_views,
            'remainingViews': notification.remaining_views,
            'credentials': notification.metadata['credentials'],
        }


notification_service = NotificationService()
