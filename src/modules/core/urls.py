from django.urls import path

from modules.core.views import CallerIdentityView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/me", CallerIdentityView.as_view(), name="caller_identity"),
]
