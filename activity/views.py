from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsOversight
from core.utils import parse_positive_int

from .services import ActivityService, MAX_PAGE_SIZE, PAGE_SIZE, RECENT_LIMIT

FILTER_PARAMS = ('user', 'action', 'entity_type', 'start_date', 'end_date')


class RecentActivityView(APIView):
    """Latest activity for the director dashboard"""
    permission_classes = [IsOversight]

    def get(self, request):
        limit = parse_positive_int(request.query_params.get('limit'), RECENT_LIMIT, MAX_PAGE_SIZE)
        return Response({'success': True, 'activities': ActivityService.recent(limit)})


class ActivityListView(APIView):
    permission_classes = [IsOversight]

    def get(self, request):
        page = parse_positive_int(request.query_params.get('page'), 1)
        limit = parse_positive_int(request.query_params.get('limit'), PAGE_SIZE, MAX_PAGE_SIZE)
        filters = {
            key: request.query_params[key]
            for key in FILTER_PARAMS
            if request.query_params.get(key)
        }
        result = ActivityService.paginated(page=page, limit=limit, filters=filters)
        return Response({'success': True, **result})
