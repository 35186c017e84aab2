"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Core services for notification management, the audit trail
             and other shared business logic.
-------------------------------------------------------------------------
"""
import logging
from datetime import timedelta
from typing import Optional, List, Dict, Any
from django.db import models, transaction
from django.utils import timezone

from apps.core.models import (
    Notification, NotificationCategory, NotificationPriority,
    AuditLog, AuditAction,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service class for managing notifications.

    Provides methods to send notifications to users and query
    notification statistics.
    """

    @staticmethod
    @transaction.atomic
    def send_notification(
        recipient,
        title: str,
        message: str,
        link: str = '',
        category: str = NotificationCategory.WORKFLOW,
        icon: str = 'bi-bell',
        priority: str = NotificationPriority.MEDIUM
    ) -> Notification:
        """
        Send a notification to a user.

        Args:
            recipient: CustomUser instance who should receive the notification.
            title: Short notification title.
            message: Detailed notification message.
            link: Optional URL to the record or page.
            category: Notification category (WORKFLOW, SYSTEM, ALERT).
            icon: Icon class (default: 'bi-bell').
            priority: LOW, MEDIUM or HIGH.

        Returns:
            The created Notification instance.

        Example:
            >>> from apps.core.services import NotificationService
            >>> NotificationService.send_notification(
            ...     recipient=case_worker,
            ...     title="Submission SUB-12 Approved",
            ...     message="The committee approved the assessment submission.",
            ...     link="/api/committees/submissions/12/",
            ...     category=NotificationCategory.WORKFLOW,
            ...     icon='bi-check2-circle'
            ... )
        """
        return Notification.objects.create(
            recipient=recipient,
            title=str(title)[:200],
            message=str(message),
            link=link,
            category=category,
            icon=icon,
            priority=priority
        )

    @staticmethod
    def send_bulk_notification(
        recipients: List,
        title: str,
        message: str,
        link: str = '',
        category: str = NotificationCategory.WORKFLOW,
        icon: str = 'bi-bell',
        priority: str = NotificationPriority.MEDIUM
    ) -> List[Notification]:
        """
        Send the same notification to multiple recipients.

        Duplicate recipients receive a single notification.

        Returns:
            List of created Notification instances.
        """
        notifications = []
        seen = set()
        for recipient in recipients:
            if recipient.pk in seen:
                continue
            seen.add(recipient.pk)
            notifications.append(NotificationService.send_notification(
                recipient=recipient,
                title=title,
                message=message,
                link=link,
                category=category,
                icon=icon,
                priority=priority
            ))
        return notifications

    @staticmethod
    def get_unread_count(user) -> int:
        """Get count of unread notifications for a user."""
        return Notification.objects.filter(
            recipient=user,
            is_read=False
        ).count()

    @staticmethod
    def get_recent_notifications(user, limit: int = 10):
        """
        Get recent notifications for a user.

        Args:
            user: CustomUser instance.
            limit: Maximum number of notifications to return (default: 10).

        Returns:
            QuerySet of recent notifications.
        """
        return Notification.objects.filter(
            recipient=user
        ).order_by('-created_at')[:limit]

    @staticmethod
    def mark_as_read(user, notification_id: int) -> Notification:
        """
        Mark one of the user's notifications as read.

        Raises:
            Notification.DoesNotExist: If the notification is not the user's.
        """
        notification = Notification.objects.get(pk=notification_id, recipient=user)
        notification.mark_as_read()
        return notification

    @staticmethod
    @transaction.atomic
    def mark_all_as_read(user) -> int:
        """
        Mark all notifications for a user as read.

        Returns:
            Number of notifications marked as read.
        """
        return Notification.objects.filter(
            recipient=user,
            is_read=False
        ).update(is_read=True)

    @staticmethod
    @transaction.atomic
    def delete_old_notifications(days: int = 90) -> int:
        """
        Delete notifications older than specified days.

        Returns:
            Number of notifications deleted.
        """
        cutoff_date = timezone.now() - timedelta(days=days)
        count, _ = Notification.objects.filter(
            created_at__lt=cutoff_date
        ).delete()
        return count


class AuditService:
    """Writes entries to the workflow audit trail."""

    @staticmethod
    def record(
        actor,
        action: str,
        instance: models.Model,
        changes: Optional[Dict[str, Any]] = None,
        description: str = ''
    ) -> AuditLog:
        """
        Record an action against a model instance.

        Args:
            actor: User performing the action, or None for system jobs.
            action: AuditAction value.
            instance: The affected model instance.
            changes: JSON-serialisable dictionary describing the change.
            description: Short human-readable summary.

        Returns:
            The created AuditLog entry.
        """
        entry = AuditLog.objects.create(
            actor=actor if getattr(actor, 'pk', None) else None,
            action=action,
            entity_type=instance._meta.label_lower,
            entity_id=str(instance.pk),
            description=description[:255],
            changes=changes or {}
        )
        logger.info(
            "Audit %s %s#%s by %s",
            action, entry.entity_type, entry.entity_id,
            getattr(actor, 'pk', 'system')
        )
        return entry

    @staticmethod
    def record_status_change(actor, instance: models.Model, old_status: str, new_status: str, **extra) -> AuditLog:
        """Record a workflow status change."""
        changes = {'from': old_status, 'to': new_status}
        changes.update(extra)
        return AuditService.record(
            actor,
            AuditAction.STATUS_CHANGED,
            instance,
            changes=changes,
            description=f"{old_status} -> {new_status}"
        )

    @staticmethod
    def history_for(instance: models.Model):
        """Return the audit entries of a model instance, newest first."""
        return AuditLog.objects.filter(
            entity_type=instance._meta.label_lower,
            entity_id=str(instance.pk)
        )
