from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.utils import get_client_ip, get_user_agent

from .serializers import NotificationSerializer
from .services import notification_service


def _truthy(value):
    return str(value).lower() in ('true', '1', 'yes')


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def notification_list(request):
    """Latest notifications for the authenticated user"""
    unread_only = _truthy(request.query_params.get('unread_only', 'false'))
    notifications = notification_service.get_notifications(request.user, unread_only=unread_only)
    return Response({
        'success': True,
        'notifications': NotificationSerializer(notifications, many=True).data,
        'unread_count': notification_service.unread_count(request.user),
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def unread_count(request):
    return Response({'success': True, 'count': notification_service.unread_count(request.user)})


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def view_status(request, notification_id):
    status = notification_service.get_view_status(notification_id, request.user)
    return Response({'success': True, **status})


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def view_credentials(request, notification_id):
    """Consume one credential view; exhausted notices answer 200 with canView false"""
    result = notification_service.view_credentials(
        notification_id,
        request.user,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return Response({'success': True, **result})


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def mark_notification_read(request, notification_id):
    notification = notification_service.mark_read(notification_id, request.user)
    return Response({'success': True, 'notification': NotificationSerializer(notification).data})


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def mark_all_notifications_read(request):
    updated = notification_service.mark_all_read(request.user)
    return Response({'success': True, 'updated_count': updated})
