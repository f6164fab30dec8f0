# apps/api/v1/views/health.py
"""
Health check endpoint for load balancers and monitoring.

Returns HTTP 200 when the database answers, 503 otherwise.
No authentication required.
"""
import logging

from django.db import connection, DatabaseError
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    GET /api/v1/health/

    Used by load balancers and uptime monitors.
    """
    status = {
        'status': 'healthy',
        'database': 'unknown',
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        status['database'] = 'connected'
    except DatabaseError as e:
        logger.error("Health check database error: %s", e)
        status['database'] = f'error: {type(e).__name__}'
        status['status'] = 'unhealthy'
        return Response(status, status=503)

    return Response(status, status=200)
