"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Shared models for in-app notifications and the workflow
             audit trail.
-------------------------------------------------------------------------
"""
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _


class NotificationCategory(models.TextChoices):
    """Category of an in-app notification."""
    WORKFLOW = 'WORKFLOW', _('Workflow')
    SYSTEM = 'SYSTEM', _('System')
    ALERT = 'ALERT', _('Alert')


class NotificationPriority(models.TextChoices):
    """Priority of an in-app notification."""
    LOW = 'LOW', _('Low')
    MEDIUM = 'MEDIUM', _('Medium')
    HIGH = 'HIGH', _('High')


class Notification(models.Model):
    """
    In-app notification delivered to a single user.

    Attributes:
        recipient: User who receives the notification.
        title: Short notification title.
        message: Detailed notification message.
        link: Optional URL of the related record.
        category: WORKFLOW, SYSTEM or ALERT.
        priority: LOW, MEDIUM or HIGH.
        icon: Icon class used by the front-end.
        is_read: Whether the user has read it.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        verbose_name=_('Recipient')
    )
    title = models.CharField(
        max_length=200,
        verbose_name=_('Title')
    )
    message = models.TextField(
        verbose_name=_('Message')
    )
    link = models.CharField(
        max_length=500,
        blank=True,
        verbose_name=_('Link')
    )
    category = models.CharField(
        max_length=20,
        choices=NotificationCategory.choices,
        default=NotificationCategory.WORKFLOW,
        verbose_name=_('Category')
    )
    priority = models.CharField(
        max_length=10,
        choices=NotificationPriority.choices,
        default=NotificationPriority.MEDIUM,
        verbose_name=_('Priority')
    )
    icon = models.CharField(
        max_length=50,
        default='bi-bell',
        verbose_name=_('Icon')
    )
    is_read = models.BooleanField(
        default=False,
        verbose_name=_('Is Read')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Created At')
    )

    class Meta:
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='core_notif_recipient_read_idx'),
            models.Index(fields=['created_at'], name='core_notif_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} -> {self.recipient}"

    def mark_as_read(self) -> None:
        """Mark this notification as read."""
        if not self.is_read:
            self.is_read = True
            self.save(update_fields=['is_read'])


class AuditAction(models.TextChoices):
    """Kinds of actions recorded in the audit trail."""
    CREATED = 'CREATED', _('Created')
    UPDATED = 'UPDATED', _('Updated')
    STATUS_CHANGED = 'STATUS_CHANGED', _('Status Changed')
    DECIDED = 'DECIDED', _('Decided')
    WORKFLOW_STEP = 'WORKFLOW_STEP', _('Workflow Step')
    DEACTIVATED = 'DEACTIVATED', _('Deactivated')


class AuditLog(models.Model):
    """
    Immutable audit trail entry for workflow actions.

    Attributes:
        actor: User who performed the action (null for system jobs).
        action: What happened.
        entity_type: Model label of the affected record (e.g. 'beneficiaries.beneficiary').
        entity_id: Primary key of the affected record.
        changes: JSON snapshot of what changed.
    """

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries',
        verbose_name=_('Actor')
    )
    action = models.CharField(
        max_length=20,
        choices=AuditAction.choices,
        verbose_name=_('Action')
    )
    entity_type = models.CharField(
        max_length=100,
        verbose_name=_('Entity Type')
    )
    entity_id = models.CharField(
        max_length=64,
        verbose_name=_('Entity ID')
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Description')
    )
    changes = models.JSONField(
        default=dict,
        encoder=DjangoJSONEncoder,
        blank=True,
        verbose_name=_('Changes')
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Created At')
    )

    class Meta:
        verbose_name = _('Audit Log Entry')
        verbose_name_plural = _('Audit Log')
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='core_audit_entity_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.get_action_display()} {self.entity_type}#{self.entity_id}"
