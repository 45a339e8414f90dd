"""
Django admin configuration for registrations app.
"""
from django.contrib import admin
from django.http import HttpResponse

from .models import Registration
from .reporting import CSV_FILENAME, write_registrations_csv


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    """
    Admin interface for browsing registrations.
    Provenance and relay fields are read-only; includes CSV export.
    """
    list_display = [
        'identifier', 'email', 'roll_number', 'phone', 'project_ids', 'relay_status', 'created_at'
    ]
    list_filter = ['relay_status', 'created_at']
    search_fields = ['identifier', 'email', 'roll_number', 'phone']
    readonly_fields = [
        'id', 'password_hash', 'ip', 'user_agent', 'relay_status', 'relay_error',
        'relay_attempted_at', 'created_at', 'updated_at',
    ]
    fieldsets = (
        ('Identity', {
            'fields': ('identifier', 'email', 'roll_number', 'phone')
        }),
        ('Projects', {
            'fields': ('project_ids',)
        }),
        ('Spreadsheet Sync', {
            'fields': ('relay_status', 'relay_error', 'relay_attempted_at'),
            'classes': ('collapse',)
        }),
        ('Provenance', {
            'fields': ('ip', 'user_agent', 'password_hash', 'id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['export_as_csv']

    @admin.action(description="Export selected registrations as CSV")
    def export_as_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{CSV_FILENAME}"'
        write_registrations_csv(queryset.order_by('-created_at', '-id'), response)
        return response
