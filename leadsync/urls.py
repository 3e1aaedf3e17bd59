"""
URL configuration for the Lead Sync project.
"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.

    ``?integrations=1`` also checks that the external CRM endpoint is
    reachable with the configured credential, and answers 503 when it is not.
    """
    if not request.GET.get('integrations'):
        return JsonResponse({'status': 'healthy'})

    from integrations.exceptions import ConfigurationError
    from integrations.providers import LeadSyncProvider

    try:
        provider = LeadSyncProvider()
    except ConfigurationError as e:
        return JsonResponse({'status': 'unhealthy', 'lead_sync': {'ok': False, 'message': str(e)}}, status=503)

    ok, message = provider.test_connection()
    body = {
        'status': 'healthy' if ok else 'unhealthy',
        'lead_sync': {'ok': ok, 'message': message, **provider.describe()},
    }
    return JsonResponse(body, status=200 if ok else 503)


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health'),
    path('api/integrations/', include('integrations.urls')),
]
