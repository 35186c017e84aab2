"""
URL configuration for Barakatna CMS.

The browser front-end consumes the JSON endpoints mounted under /api/.
The Django admin is kept for back-office data maintenance.
"""
from django.contrib import admin
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('apps.users.urls')),
    path('api/core/', include('apps.core.urls')),
    path('api/clients/', include('apps.clients.urls')),
    path('api/beneficiaries/', include('apps.beneficiaries.urls')),
    path('api/committees/', include('apps.committees.urls')),
    path('api/manpower/', include('apps.manpower.urls')),
    path('api/kpi/', include('apps.kpi.urls')),
    path('api/reports/', include('apps.reporting.urls')),
    path('', RedirectView.as_view(url='/admin/', permanent=False), name='home'),
]
