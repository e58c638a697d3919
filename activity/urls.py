from django.urls import path

from .views import ActivityListView, RecentActivityView

urlpatterns = [
    path('', ActivityListView.as_view(), name='activity_list'),
    path('recent/', RecentActivityView.as_view(), name='activity_recent'),
]
