# apps/api/urls.py
"""
API root: versioned routes under /api/v1/ and the OpenAPI schema with
Swagger and ReDoc viewers under /api/schema/, /api/docs/ and /api/redoc/.
"""
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

urlpatterns = [
    path('v1/', include('apps.api.v1.urls')),
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
