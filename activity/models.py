"""
Append-only activity trail for the personnel workflow
"""
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class ActivityLog(models.Model):
    """One recorded action; rows are never updated or deleted by the application"""

    class Action(models.TextChoices):
        LOGIN = 'LOGIN', 'Login'
        LOGOUT = 'LOGOUT', 'Logout'
        PASSWORD_CHANGED = 'PASSWORD_CHANGED', 'Password Changed'
        SUPERVISOR_REGISTERED = 'SUPERVISOR_REGISTERED', 'Supervisor Registered'
        SUPERVISOR_APPROVED = 'SUPERVISOR_APPROVED', 'Supervisor Approved'
        SUPERVISOR_REJECTED = 'SUPERVISOR_REJECTED', 'Supervisor Rejected'
        OPERATOR_REGISTERED = 'OPERATOR_REGISTERED', 'Operator Registered'
        OPERATOR_APPROVED = 'OPERATOR_APPROVED', 'Operator Approved'
        OPERATOR_REJECTED = 'OPERATOR_REJECTED', 'Operator Rejected'
        SECRETARY_REGISTERED = 'SECRETARY_REGISTERED', 'Secretary Registered'
        MANAGER_REGISTERED = 'MANAGER_REGISTERED', 'Manager Registered'
        CREDENTIALS_VIEWED = 'CREDENTIALS_VIEWED', 'Credentials Viewed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activity_logs',
    )
    action = models.CharField(max_length=40, choices=Action.choices, db_index=True)
    entity_type = models.CharField(max_length=50, null=True, blank=True)
    entity_id = models.CharField(max_length=64, null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    # Request information
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'activity_log'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['user', 'action'], name='activity_user_action_idx'),
            models.Index(fields=['entity_type', 'entity_id'], name='activity_entity_idx'),
        ]

    def __str__(self):
        return f"{self.timestamp} - {self.user_id} - {self.action}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Activity log entries are append-only')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('Activity log entries are append-only')
