from django.urls import path

from .views import ChangePasswordView, CustomTokenRefreshView, LoginView, MeView

urlpatterns = [
    path('login/', LoginView.as_view(), name='login'),
    path('token/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('me/', MeView.as_view(), name='me'),
    path('change-password/', ChangePasswordView.as_view(), name='change_password'),
]
