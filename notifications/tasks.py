import logging

from celery import shared_task

from core.crypto import decrypt_json

from .services import notification_service

logger = logging.getLogger(__name__)


@shared_task
def notify_approval_requested_task(profile_type, profile_id, registrant_id):
    try:
        notifications = notification_service.notify_approval_requested(profile_type, profile_id, registrant_id)
    except Exception:
        logger.exception("Approval request fan-out failed for %s %s", profile_type, profile_id)
        raise
    return [str(n.id) for n in notifications]


@shared_task
def notify_staff_registered_task(profile_type, profile_id, registrant_id):
    try:
        notifications = notification_service.notify_staff_registered(profile_type, profile_id, registrant_id)
    except Exception:
        logger.exception("Registration notice failed for %s %s", profile_type, profile_id)
        raise
    return [str(n.id) for n in notifications]


@shared_task
def notify_approval_result_task(profile_type, profile_id, recipient_id, approver_id, approved,
                                sealed_credentials=None, reason=None):
    try:
        credentials = decrypt_json(sealed_credentials) if sealed_credentials else None
        notification = notification_service.notify_approval_result(
            profile_type,
            profile_id,
            recipient_id,
            approver_id,
            approved,
            credentials=credentials,
            reason=reason,
        )
    except Exception:
        logger.exception("Approval result notice failed for %s %s", profile_type, profile_id)
        raise
    return str(notification.id)
