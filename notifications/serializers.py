from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Inbox representation; the credential block is never serialized here"""
    sender_name = serializers.SerializerMethodField()
    has_credentials = serializers.BooleanField(read_only=True)
    remaining_views = serializers.IntegerField(read_only=True)
    metadata = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'sender', 'sender_name', 'notification_type', 'subject', 'message',
            'entity_type', 'entity_id', 'action_url', 'metadata', 'has_credentials',
            'view_count', 'max_views', 'remaining_views', 'is_read', 'read_at', 'sent_at', 'created_at',
        ]
        read_only_fields = fields

    def get_sender_name(self, obj):
        return obj.sender.display_name if obj.sender else 'System'

    def get_metadata(self, obj):
        return {key: value for key, value in (obj.metadata or {}).items() if key != 'credentials'}
