from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.notification_list, name='notification-list'),
    path('unread-count/', views.unread_count, name='unread-count'),
    path('read-all/', views.mark_all_notifications_read, name='mark-all-notifications-read'),
    path('<uuid:notification_id>/read/', views.mark_notification_read, name='mark-notification-read'),

    # Bounded credential disclosure
    path('<uuid:notification_id>/view-status/', views.view_status, name='view-status'),
    path('<uuid:notification_id>/view-credentials/', views.view_credentials, name='view-credentials'),
]
