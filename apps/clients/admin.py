"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for client types and business rules.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.clients.models import ClientType, BusinessRule


@admin.register(ClientType)
class ClientTypeAdmin(admin.ModelAdmin):
    """Admin configuration for ClientType model."""

    list_display = ['type_id', 'code', 'name_en', 'rule_count', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name_en', 'name_ar']
    ordering = ['type_id']

    def rule_count(self, obj: ClientType) -> int:
        """Count rules attached to this client type."""
        return obj.business_rules.count()
    rule_count.short_description = _('Rules')


@admin.register(BusinessRule)
class BusinessRuleAdmin(admin.ModelAdmin):
    """Admin configuration for BusinessRule model."""

    list_display = ['code', 'name', 'category', 'priority', 'version', 'expires_at', 'is_active']
    list_filter = ['category', 'client_types', 'is_active']
    search_fields = ['code', 'name', 'description']
    filter_horizontal = ['client_types']
    readonly_fields = ['version', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'description', 'category', 'client_types')
        }),
        (_('Logic'), {
            'fields': ('conditions', 'actions', 'priority', 'expires_at', 'is_active')
        }),
        (_('Audit Trail'), {
            'fields': ('version', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    def save_model(self, request, obj, form, change):
        """Override to set audit fields."""
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)
