"""
Integrations Admin Configuration

Django admin interface for lead sync credentials and logs.
"""

from django import forms
from django.contrib import admin
from django.utils.html import format_html

from .models import (
    IntegrationCredential,
    IntegrationErrorLog,
    IntegrationSyncLog,
)


@admin.register(IntegrationCredential)
class IntegrationCredentialAdmin(admin.ModelAdmin):
    """Admin for IntegrationCredential model. The secret is write-only."""
    list_display = [
        'name', 'auth_type', 'header_name', 'is_active', 'is_expired',
        'expires_at', 'updated_at',
    ]
    list_filter = ['auth_type', 'is_active']
    search_fields = ['name']
    readonly_fields = ['uuid', 'is_expired', 'created_at', 'updated_at']
    fieldsets = (
        (None, {
            'fields': ('name', 'is_active'),
        }),
        ('Authentication', {
            'fields': ('auth_type', 'header_name', 'secret', 'expires_at', 'is_expired'),
        }),
        ('Metadata', {
            'fields': ('uuid', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_form(self, request, obj=None, **kwargs):
        form = super().get_form(request, obj, **kwargs)
        secret_field = form.base_fields.get('secret')
        if secret_field is not None:
            # Never render a stored secret back to the browser
            secret_field.widget = forms.PasswordInput(render_value=False)
            secret_field.required = obj is None
            secret_field.help_text = 'Leave empty to keep the current secret.'
        return form

    def save_model(self, request, obj, form, change):
        if change and not form.cleaned_data.get('secret'):
            obj.secret = IntegrationCredential.objects.get(pk=obj.pk).secret
        super().save_model(request, obj, form, change)

    def is_expired(self, obj):
        return obj.is_expired
    is_expired.boolean = True
    is_expired.short_description = 'Expired'


@admin.register(IntegrationSyncLog)
class IntegrationSyncLogAdmin(admin.ModelAdmin):
    """Admin for IntegrationSyncLog model."""
    list_display = [
        'run_id', 'chunk_number', 'integration_name', 'status_badge',
        'records_in_chunk', 'records_succeeded', 'records_failed',
        'records_remaining', 'started_at', 'duration_display',
    ]
    list_filter = ['status', 'integration_name']
    search_fields = ['run_id', 'task_id', 'error_message']
    readonly_fields = [
        'uuid', 'run_id', 'chunk_number', 'integration_name', 'status',
        'records_in_chunk', 'records_succeeded', 'records_failed',
        'records_remaining', 'error_message', 'task_id', 'next_task_id',
        'started_at', 'completed_at',
    ]
    date_hierarchy = 'started_at'
    ordering = ['-started_at']

    def has_add_permission(self, request):
        return False

    def status_badge(self, obj):
        colors = {
            'idle': 'gray',
            'running': 'blue',
            'rescheduled': 'goldenrod',
            'completed': 'green',
            'failed': 'red',
        }
        color = colors.get(obj.status, 'gray')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def duration_display(self, obj):
        duration = obj.duration_seconds
        if duration is None:
            return '-'
        if duration < 60:
            return f'{duration:.1f}s'
        return f'{duration / 60:.1f}m'
    duration_display.short_description = 'Duration'


@admin.register(IntegrationErrorLog)
class IntegrationErrorLogAdmin(admin.ModelAdmin):
    """Admin for IntegrationErrorLog model. Rows are immutable."""
    list_display = [
        'logged_at', 'integration_name', 'record_id', 'error_kind',
        'status_code', 'short_message',
    ]
    list_filter = ['error_kind', 'integration_name']
    search_fields = ['record_id', 'message']
    readonly_fields = [
        'uuid', 'integration_name', 'record_id', 'error_kind', 'message',
        'status_code', 'raw_response', 'logged_at',
    ]
    date_hierarchy = 'logged_at'
    ordering = ['-logged_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def short_message(self, obj):
        if len(obj.message) > 80:
            return f'{obj.message[:77]}...'
        return obj.message
    short_message.short_description = 'Message'
