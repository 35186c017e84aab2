"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Notification API views and the audit trail lookup.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from apps.core.api import ApiView, json_response, paginate
from apps.core.models import Notification, AuditLog
from apps.core.services import NotificationService
from apps.users.models import RoleCode


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return {
        'id': notification.pk,
        'title': notification.title,
        'message': notification.message,
        'link': notification.link,
        'category': notification.category,
        'priority': notification.priority,
        'icon': notification.icon,
        'is_read': notification.is_read,
        'created_at': notification.created_at,
    }


def serialize_audit_entry(entry: AuditLog) -> Dict[str, Any]:
    return {
        'id': entry.pk,
        'actor': entry.actor.get_full_name() if entry.actor else None,
        'action': entry.action,
        'entity_type': entry.entity_type,
        'entity_id': entry.entity_id,
        'description': entry.description,
        'changes': entry.changes,
        'created_at': entry.created_at,
    }


# =====================================================================
# NOTIFICATION VIEWS
# =====================================================================

class NotificationListView(ApiView):
    """
    List notifications for the current user.

    Query parameters:
        unread: '1' to return only unread notifications.
        category: WORKFLOW, SYSTEM or ALERT.
    """

    def get(self, request):
        queryset = Notification.objects.filter(recipient=request.user)

        if request.GET.get('unread') in ('1', 'true'):
            queryset = queryset.filter(is_read=False)
        category = request.GET.get('category')
        if category:
            queryset = queryset.filter(category=category)

        data = paginate(queryset.order_by('-created_at'), request, serialize_notification)
        data['unread_count'] = NotificationService.get_unread_count(request.user)
        return json_response(data)


class NotificationUnreadCountView(ApiView):
    """Unread notification count for the badge."""

    def get(self, request):
        return json_response({
            'unread_count': NotificationService.get_unread_count(request.user)
        })


class NotificationMarkReadView(ApiView):
    """Mark a specific notification as read."""

    def post(self, request, pk):
        notification = NotificationService.mark_as_read(request.user, pk)
        return json_response(serialize_notification(notification))


class NotificationMarkAllReadView(ApiView):
    """Mark all notifications for current user as read."""

    def post(self, request):
        updated = NotificationService.mark_all_as_read(request.user)
        return json_response({'updated': updated, 'unread_count': 0})


# =====================================================================
# AUDIT TRAIL
# =====================================================================

class AuditLogListView(ApiView):
    """Audit entries, optionally narrowed to one record."""

    required_roles = (RoleCode.SUPER_ADMIN, RoleCode.PROGRAM_MANAGER, RoleCode.SENIOR_MANAGEMENT)

    def get(self, request):
        queryset = AuditLog.objects.select_related('actor')
        entity_type = request.GET.get('entity_type')
        entity_id = request.GET.get('entity_id')
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        if entity_id:
            queryset = queryset.filter(entity_id=entity_id)
        return json_response(paginate(queryset, request, serialize_audit_entry))
