"""
URL configuration for sentinel project.

Core personnel operations are exposed under /api/; the routing layer is
intentionally thin and delegates every decision to the app services.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),  # Auth endpoints
    path('api/staff/', include('staff.urls')),    # Registration & approvals
    path('api/notifications/', include('notifications.urls')), # Inbox & credential viewer
    path('api/activity/', include('activity.urls')), # Audit trail
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
]
