"""
API URL patterns for the registrations app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('register', views.register, name='register'),
    path('user/<str:identifier>', views.user_detail, name='user_detail'),
    path('me', views.me, name='me'),
    path('signout', views.signout, name='signout'),
    path('projects', views.projects, name='projects'),
    path('registrations', views.registrations_list, name='registrations_list'),
    path('stats', views.stats, name='stats'),
    path('download', views.download, name='download'),
    path('health', views.health, name='health'),
]
