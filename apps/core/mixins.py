"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reusable model mixins for audit logging, timestamps,
             and client-type scoping.
-------------------------------------------------------------------------
"""
import uuid
from typing import Optional, TYPE_CHECKING
from django.db import models
from django.conf import settings

if TYPE_CHECKING:
    from apps.clients.models import ClientType


class UUIDMixin(models.Model):
    """
    Abstract mixin that adds a public_id UUID field.

    Used for external references (APIs, URLs) while keeping
    integer IDs for internal foreign keys.
    """

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name="Public ID",
        help_text="Unique UUID for external reference."
    )

    class Meta:
        abstract = True


class TimeStampedMixin(UUIDMixin):
    """
    Abstract mixin that adds created_at and updated_at timestamps.

    Attributes:
        created_at: Timestamp when the record was created.
        updated_at: Timestamp when the record was last modified.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
        help_text="Timestamp when this record was created."
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
        help_text="Timestamp when this record was last modified."
    )

    class Meta:
        abstract = True


class AuditLogMixin(TimeStampedMixin):
    """
    Abstract mixin that adds audit trail fields for user tracking.

    Extends TimeStampedMixin with created_by and updated_by fields
    to track which user created or modified a record.

    Attributes:
        created_by: ForeignKey to the user who created the record.
        updated_by: ForeignKey to the user who last modified the record.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_created",
        null=True,
        blank=True,
        verbose_name="Created By",
        help_text="User who created this record."
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="%(class)s_updated",
        null=True,
        blank=True,
        verbose_name="Updated By",
        help_text="User who last modified this record."
    )

    class Meta:
        abstract = True

    def save_with_user(self, user: Optional[object] = None, *args, **kwargs) -> None:
        """
        Save the model while setting the audit user fields.

        Args:
            user: The user performing the save operation.
            *args: Additional positional arguments for save().
            **kwargs: Additional keyword arguments for save().
        """
        if user is not None:
            if self.pk is None:
                self.created_by = user
            self.updated_by = user
        self.save(*args, **kwargs)


class StatusMixin(models.Model):
    """
    Abstract mixin for records that can be deactivated instead of deleted.
    """

    is_active = models.BooleanField(
        default=True,
        verbose_name="Is Active",
        help_text="Whether this record is active in the system."
    )

    class Meta:
        abstract = True


class ClientScopedMixin(models.Model):
    """
    Abstract mixin for records that belong to one client type (FDF, ADHA, Cash).

    Staff scoped to a client type only see records of that client type.
    Programme-wide staff (client_type=None on the user) see everything.

    Attributes:
        client_type: ForeignKey to the funding-source category of the record.
    """

    client_type = models.ForeignKey(
        'clients.ClientType',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="%(class)s_records",
        verbose_name="Client Type",
        help_text="Funding-source category (FDF, ADHA, Cash) of this record."
    )

    class Meta:
        abstract = True

    @classmethod
    def get_client_filtered_queryset(cls, client_type: Optional['ClientType']):
        """
        Get a queryset filtered by client type.

        Args:
            client_type: The client type to filter by. If None, returns all records.

        Returns:
            Filtered queryset.
        """
        if client_type is None:
            # Programme-wide users see all records
            return cls.objects.all()
        return cls.objects.filter(client_type=client_type)
