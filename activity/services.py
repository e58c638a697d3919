"""
Activity trail: best-effort writes and dashboard reads
"""
import json
import logging
import uuid
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from core.side_effects import dispatch
from core.utils import total_pages

from .filters import ActivityLogFilter
from .models import ActivityLog

logger = logging.getLogger(__name__)

RECENT_LIMIT = 6
PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def serialize_for_audit(data):
    """Serialize data for audit logging, handling UUIDs and other non-JSON types"""
    if data is None:
        return None

    def default_serializer(obj):
        if isinstance(obj, uuid.UUID):
            return str(obj)
        elif hasattr(obj, 'isoformat'):  # datetime objects
            return obj.isoformat()
        return str(obj)

    return json.loads(json.dumps(data, default=default_serializer))


def action_type(action):
    """Dashboard category for an action"""
    if 'LOGIN' in action or 'LOGOUT' in action:
        return 'auth'
    if 'CREDENTIALS' in action:
        return 'security'
    if any(role in action for role in ('SUPERVISOR', 'OPERATOR', 'SECRETARY', 'MANAGER')):
        return 'registration'
    if 'PASSWORD' in action:
        return 'profile'
    return 'system'


def action_status(action):
    if 'APPROVED' in action:
        return 'success'
    if 'REJECTED' in action:
        return 'error'
    if 'REGISTERED' in action:
        return 'pending'
    if 'LOGIN' in action or 'LOGOUT' in action:
        return 'completed'
    return 'info'


def relative_time(moment, now=None):
    now = now or timezone.now()
    seconds = int((now - moment).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return 'Just now'
    if minutes < 60:
        return f"{minutes} min{'s' if minutes > 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return moment.strftime('%b %d, %H:%M')


class ActivityService:
    """Service class for the activity trail"""

    @staticmethod
    def record(
        user_id,
        action: str,
        entity_type: Optional[str] = None,
        entity_id=None,
        metadata: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[ActivityLog]:
        """
        Append an activity entry.

        Never raises: activity logging must not break the operation being
        logged. Returns the entry, or None when the write failed.
        """
        try:
            with transaction.atomic():
                return ActivityLog.objects.create(
                    user_id=user_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id) if entity_id is not None else None,
                    metadata=serialize_for_audit(metadata) or {},
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
        except Exception:
            logger.exception("Error logging activity %s for user %s", action, user_id)
            return None

    @staticmethod
    def record_later(user_id, action, entity_type=None, entity_id=None, metadata=None,
                     ip_address=None, user_agent=None):
        """Record an activity entry as a side effect of the current transaction"""
        from .tasks import record_activity_task

        dispatch(
            record_activity_task,
            str(user_id) if user_id is not None else None,
            str(action),
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            metadata=serialize_for_audit(metadata),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @staticmethod
    def to_dict(entry, now=None, detailed=False):
        user = entry.user
        data = {
            'id': str(entry.id),
            'type': action_type(entry.action),
            'action': entry.action,
            'user': user.display_name if user else 'System',
            'role': user.role if user else '',
            'time': relative_time(entry.timestamp, now),
            'timestamp': entry.timestamp.isoformat(),
            'status': action_status(entry.action),
            'entityType': entry.entity_type,
            'entityId': entry.entity_id,
            'metadata': entry.metadata,
        }
        if detailed:
            data['ipAddress'] = entry.ip_address
            data['userAgent'] = entry.user_agent
        return data

    @staticmethod
    def recent(limit=RECENT_LIMIT, now=None):
        entries = ActivityLog.objects.select_related('user').order_by('-timestamp')[:limit]
        return [ActivityService.to_dict(entry, now) for entry in entries]

    @staticmethod
    def paginated(page=1, limit=PAGE_SIZE, filters=None, now=None):
        filterset = ActivityLogFilter(
            data=filters or {},
            queryset=ActivityLog.objects.select_related('user').order_by('-timestamp'),
        )
        if not filterset.is_valid():
            raise ValidationError(
                '; '.join(f"{field}: {' '.join(errors)}" for field, errors in filterset.errors.items())
            )

        queryset = filterset.qs
        total = queryset.count()
        offset = (page - 1) * limit
        entries = queryset[offset:offset + limit]

        return {
            'activities': [ActivityService.to_dict(entry, now, detailed=True) for entry in entries],
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'totalPages': total_pages(total, limit),
            },
        }
