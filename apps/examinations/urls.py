from django.urls import path
from drf_spectacular.views import SpectacularAPIView

from .views import LoginView, RegisterView, graphql_view

urlpatterns = [
    # Authentication
    path('api/auth/register/', RegisterView.as_view(), name='register'),
    path('api/auth/login/', LoginView.as_view(), name='login'),

    # OpenAPI schema for the REST endpoints
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),

    # GraphQL
    path('graphql/', graphql_view, name='graphql'),
]
