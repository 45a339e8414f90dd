"""
URL patterns for the registrations app (banner and admin table).
"""
from django.urls import path
from . import views

urlpatterns = [
    path('', views.index, name='index'),
    path('admin/view/', views.admin_view, name='admin_view'),
]
