"""
URL configuration for winter_projects project.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('django-admin/', admin.site.urls),  # Django's default admin
    path('', include('registrations.urls')),
    path('api/', include('registrations.api_urls')),
]
