"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for notifications and the
             audit trail.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.models import Notification, AuditLog


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin configuration for Notification model."""

    list_display = ['title', 'recipient', 'category', 'priority', 'is_read', 'created_at']
    list_filter = ['category', 'priority', 'is_read']
    search_fields = ['title', 'message', 'recipient__emirates_id', 'recipient__email']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
    actions = ['mark_selected_read']

    @admin.action(description=_('Mark selected notifications as read'))
    def mark_selected_read(self, request, queryset):
        updated = queryset.update(is_read=True)
        self.message_user(request, _('%(count)d notifications marked as read.') % {'count': updated})


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for the audit trail."""

    list_display = ['created_at', 'actor', 'action', 'entity_type', 'entity_id', 'description']
    list_filter = ['action', 'entity_type']
    search_fields = ['entity_id', 'description', 'actor__emirates_id']
    ordering = ['-created_at']
    readonly_fields = ['actor', 'action', 'entity_type', 'entity_id', 'description', 'changes', 'created_at']

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False


class AuditedAdmin(admin.ModelAdmin):
    """Sets created_by / updated_by on save."""

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)
