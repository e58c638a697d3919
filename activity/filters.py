import django_filters

from .models import ActivityLog


class ActivityLogFilter(django_filters.FilterSet):
    user = django_filters.UUIDFilter(field_name='user_id')
    action = django_filters.ChoiceFilter(choices=ActivityLog.Action.choices)
    entity_type = django_filters.CharFilter(field_name='entity_type')
    start_date = django_filters.IsoDateTimeFilter(field_name='timestamp', lookup_expr='gte')
    end_date = django_filters.IsoDateTimeFilter(field_name='timestamp', lookup_expr='lte')

    class Meta:
        model = ActivityLog
        fields = ['user', 'action', 'entity_type', 'start_date', 'end_date']
