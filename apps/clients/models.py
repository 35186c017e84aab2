"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Client type (funding source) and business rule models.
             FDF, ADHA and Cash clients each carry their own
             configuration and rule set.
-------------------------------------------------------------------------
"""
from typing import Optional, List
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin


class ClientTypeCode(models.TextChoices):
    """Funding sources of the programme."""
    FDF = 'FDF', _('Family Development Foundation')
    ADHA = 'ADHA', _('Abu Dhabi Housing Authority')
    CASH = 'CASH', _('Cash Client')


class ClientType(StatusMixin, models.Model):
    """
    Funding-source category of beneficiaries, projects and reports.

    Attributes:
        code: FDF, ADHA or CASH.
        type_id: Numeric identifier used by the front-end (1, 2, 3).
        config: JSON configuration (required_documents, max_budget,
            project_deadline_days).
    """

    code = models.CharField(
        max_length=10,
        unique=True,
        choices=ClientTypeCode.choices,
        verbose_name=_('Code')
    )
    type_id = models.PositiveSmallIntegerField(
        unique=True,
        verbose_name=_('Type ID'),
        help_text=_('Numeric identifier (1 = FDF, 2 = ADHA, 3 = Cash).')
    )
    name_en = models.CharField(
        max_length=150,
        verbose_name=_('Name (English)')
    )
    name_ar = models.CharField(
        max_length=150,
        blank=True,
        verbose_name=_('Name (Arabic)')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )
    config = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Configuration'),
        help_text=_('Client configuration: required_documents, max_budget, project_deadline_days.')
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Client Type')
        verbose_name_plural = _('Client Types')
        ordering = ['type_id']

    def __str__(self) -> str:
        return f"{self.code} - {self.name_en}"

    @classmethod
    def get_by_type_id(cls, type_id: int) -> Optional['ClientType']:
        """Return the client type with this numeric id, or None."""
        try:
            return cls.objects.get(type_id=type_id)
        except (cls.DoesNotExist, ValueError, TypeError):
            return None

    @classmethod
    def get_by_code(cls, code: str) -> Optional['ClientType']:
        """Return the client type with this code (case-insensitive), or None."""
        if not code:
            return None
        return cls.objects.filter(code=str(code).upper()).first()

    @property
    def required_documents(self) -> List[str]:
        return list(self.config.get('required_documents', []))

    @property
    def max_budget(self):
        return self.config.get('max_budget')

    @property
    def project_deadline_days(self) -> Optional[int]:
        return self.config.get('project_deadline_days')


class RuleCategory(models.TextChoices):
    """Business rule categories."""
    ELIGIBILITY = 'ELIGIBILITY', _('Eligibility')
    BUDGET = 'BUDGET', _('Budget')
    APPROVAL = 'APPROVAL', _('Approval')
    SCHEDULING = 'SCHEDULING', _('Scheduling')
    DOCUMENT = 'DOCUMENT', _('Document')


class RuleOperator(models.TextChoices):
    """Operators understood by the rules engine."""
    EQUALS = 'equals', _('Equals')
    NOT_EQUALS = 'not_equals', _('Not Equals')
    GREATER_THAN = 'greater_than', _('Greater Than')
    GREATER_THAN_OR_EQUAL = 'greater_than_or_equal', _('Greater Than or Equal')
    LESS_THAN = 'less_than', _('Less Than')
    LESS_THAN_OR_EQUAL = 'less_than_or_equal', _('Less Than or Equal')
    CONTAINS = 'contains', _('Contains')
    NOT_CONTAINS = 'not_contains', _('Does Not Contain')
    STARTS_WITH = 'starts_with', _('Starts With')
    ENDS_WITH = 'ends_with', _('Ends With')
    BETWEEN = 'between', _('Between')
    IN = 'in', _('In')
    NOT_IN = 'not_in', _('Not In')
    EXISTS = 'exists', _('Exists')
    NOT_EXISTS = 'not_exists', _('Does Not Exist')
    REGEX = 'regex', _('Matches Pattern')


class RuleActionType(models.TextChoices):
    """Action types a matched rule can carry."""
    APPROVE = 'approve', _('Approve')
    REJECT = 'reject', _('Reject')
    ESCALATE = 'escalate', _('Escalate')
    NOTIFY = 'notify', _('Notify')
    SET_VALUE = 'set_value', _('Set Value')
    CALCULATE = 'calculate', _('Calculate')
    REQUIRE_DOCUMENT = 'require_document', _('Require Document')
    SET_DEADLINE = 'set_deadline', _('Set Deadline')
    SET_REMINDER = 'set_reminder', _('Set Reminder')


class BusinessRuleQuerySet(models.QuerySet):

    def applicable(self, client_type: ClientType, at=None):
        """Active, unexpired rules of a client type, highest priority first."""
        at = at or timezone.now()
        return self.filter(
            client_types=client_type,
            is_active=True,
        ).filter(
            models.Q(expires_at__isnull=True) | models.Q(expires_at__gte=at)
        ).order_by('-priority', 'code').distinct()


class BusinessRule(AuditLogMixin, StatusMixin):
    """
    Client-specific business rule.

    Conditions are a JSON list of {"field", "operator", "value"}; all of
    them must hold for the rule to match. Actions are a JSON list of
    {"type", ...} dictionaries returned to the caller when the rule matches.

    Editing a saved rule increments `version`.
    """

    code = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name=_('Rule Code'),
        help_text=_('Unique identifier (e.g., eligibility-age-fdf).')
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_('Name')
    )
    description = models.TextField(
        blank=True,
        verbose_name=_('Description')
    )
    category = models.CharField(
        max_length=20,
        choices=RuleCategory.choices,
        verbose_name=_('Category')
    )
    client_types = models.ManyToManyField(
        ClientType,
        related_name='business_rules',
        verbose_name=_('Client Types')
    )
    conditions = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Conditions')
    )
    actions = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Actions')
    )
    priority = models.IntegerField(
        default=0,
        verbose_name=_('Priority'),
        help_text=_('Higher number means higher priority.')
    )
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Expires At')
    )
    version = models.PositiveIntegerField(
        default=1,
        editable=False,
        verbose_name=_('Version')
    )

    objects = BusinessRuleQuerySet.as_manager()

    class Meta:
        verbose_name = _('Business Rule')
        verbose_name_plural = _('Business Rules')
        ordering = ['-priority', 'code']

    def __str__(self) -> str:
        return f"{self.code} (v{self.version})"

    def save(self, *args, **kwargs):
        """Bump the version on every edit of an existing rule."""
        if self.pk is not None:
            self.version += 1
            update_fields = kwargs.get('update_fields')
            if update_fields is not None:
                kwargs['update_fields'] = set(update_fields) | {'version'}
        super().save(*args, **kwargs)

    def is_expired(self, at=None) -> bool:
        at = at or timezone.now()
        return self.expires_at is not None and self.expires_at < at
