from celery import shared_task

from .services import ActivityService


@shared_task
def record_activity_task(user_id, action, entity_type=None, entity_id=None, metadata=None,
                         ip_address=None, user_agent=None):
    entry = ActivityService.record(
        user_id,
        action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return str(entry.id) if entry else None
