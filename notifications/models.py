from django.conf import settings
from django.db import models
from django.db.models import F, Q
import uuid


def default_max_views():
    return settings.CREDENTIAL_MAX_VIEWS


class Notification(models.Model):
    """Internal inbox record; credential-bearing notices are bounded by max_views"""

    class Type(models.TextChoices):
        SUPERVISOR_APPROVAL = 'SUPERVISOR_APPROVAL', 'Supervisor Approval'
        SUPERVISOR_APPROVED = 'SUPERVISOR_APPROVED', 'Supervisor Approved'
        SUPERVISOR_REJECTED = 'SUPERVISOR_REJECTED', 'Supervisor Rejected'
        OPERATOR_APPROVAL = 'OPERATOR_APPROVAL', 'Operator Approval'
        OPERATOR_APPROVED = 'OPERATOR_APPROVED', 'Operator Approved'
        OPERATOR_REJECTED = 'OPERATOR_REJECTED', 'Operator Rejected'
        STAFF_REGISTERED = 'STAFF_REGISTERED', 'Staff Registered'
        OTHER = 'OTHER', 'Other'

    CREDENTIAL_TYPES = (Type.SUPERVISOR_APPROVED, Type.OPERATOR_APPROVED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_notifications',
    )
    receiver = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    notification_type = models.CharField(max_length=30, choices=Type.choices, default=Type.OTHER)
    subject = models.CharField(max_length=255, blank=True, default='')
    message = models.TextField()

    entity_type = models.CharField(max_length=50, null=True, blank=True)
    entity_id = models.CharField(max_length=64, null=True, blank=True)
    action_url = models.CharField(max_length=255, null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    view_count = models.PositiveIntegerField(default=0)
    max_views = models.PositiveIntegerField(default=default_max_views)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(auto_now_add=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['receiver', 'is_read'], name='notif_receiver_read_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(view_count__lte=F('max_views')),
                name='notifications_view_count_within_limit',
            ),
        ]

    def __str__(self):
        return f"Notification for {self.receiver_id} - {self.notification_type}"

    @property
    def has_credentials(self):
        return (
            self.notification_type in self.CREDENTIAL_TYPES
            and bool((self.metadata or {}).get('credentials'))
        )

    @property
    def remaining_views(self):
        return max(self.max_views - self.view_count, 0)
