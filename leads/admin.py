"""
Leads Admin Configuration
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Lead


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    """Admin for Lead model."""
    list_display = [
        'email', 'first_name', 'last_name', 'company', 'status',
        'sync_badge', 'last_synced_at', 'created_at',
    ]
    list_filter = ['status', 'source']
    search_fields = ['email', 'first_name', 'last_name', 'company', 'external_reference']
    readonly_fields = ['external_reference', 'last_synced_at', 'created_at', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('first_name', 'last_name', 'company', 'email', 'phone'),
        }),
        ('Qualification', {
            'fields': ('source', 'status'),
        }),
        ('External CRM', {
            'fields': ('external_reference', 'last_synced_at'),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def sync_badge(self, obj):
        color = 'green' if obj.is_synced else 'gray'
        label = 'Synced' if obj.is_synced else 'Not synced'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            label
        )
    sync_badge.short_description = 'CRM'
