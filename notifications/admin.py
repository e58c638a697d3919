from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['receiver', 'notification_type', 'subject', 'is_read', 'view_count', 'max_views', 'created_at']
    list_filter = ['notification_type', 'is_read', 'created_at']
    search_fields = ['receiver__email', 'subject', 'message']
    # Metadata may hold credentials; keep it out of the admin form
    exclude = ['metadata']
    readonly_fields = ['id', 'sender', 'receiver', 'view_count', 'read_at', 'sent_at', 'created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False
