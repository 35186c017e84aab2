"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Manpower models: staff and contractor resources, their
             skills and availability, projects, resource allocations,
             timesheets and department resource forecasts.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, ClientScopedMixin, TimeStampedMixin


class ProficiencyLevel(models.TextChoices):
    BEGINNER = 'BEGINNER', _('Beginner')
    INTERMEDIATE = 'INTERMEDIATE', _('Intermediate')
    ADVANCED = 'ADVANCED', _('Advanced')
    EXPERT = 'EXPERT', _('Expert')


class AvailabilityType(models.TextChoices):
    AVAILABLE = 'AVAILABLE', _('Available')
    VACATION = 'VACATION', _('Vacation')
    SICK = 'SICK', _('Sick Leave')
    TRAINING = 'TRAINING', _('Training')
    PROJECT = 'PROJECT', _('Project')


# Availability blocks during which a resource cannot be allocated
UNAVAILABLE_TYPES = (AvailabilityType.VACATION, AvailabilityType.SICK, AvailabilityType.TRAINING)


class ProjectStatus(models.TextChoices):
    PLANNED = 'PLANNED', _('Planned')
    ACTIVE = 'ACTIVE', _('Active')
    ON_HOLD = 'ON_HOLD', _('On Hold')
    COMPLETED = 'COMPLETED', _('Completed')
    CANCELLED = 'CANCELLED', _('Cancelled')


class AllocationStatus(models.TextChoices):
    PLANNED = 'PLANNED', _('Planned')
    ACTIVE = 'ACTIVE', _('Active')
    COMPLETED = 'COMPLETED', _('Completed')


class TimesheetStatus(models.TextChoices):
    DRAFT = 'DRAFT', _('Draft')
    SUBMITTED = 'SUBMITTED', _('Submitted')
    APPROVED = 'APPROVED', _('Approved')
    REJECTED = 'REJECTED', _('Rejected')


validate_period = RegexValidator(
    regex=r'^\d{4}-Q[1-4]$',
    message=_('Use the format YYYY-Qn, e.g. 2024-Q3.'),
    code='invalid_period'
)


class Skill(models.Model):
    """Skill that resources can hold, e.g. 'Ramp Installation'."""

    name = models.CharField(max_length=100, unique=True, verbose_name=_('Skill'))
    category = models.CharField(max_length=50, blank=True, verbose_name=_('Category'))
    description = models.TextField(blank=True, verbose_name=_('Description'))

    class Meta:
        verbose_name = _('Skill')
        verbose_name_plural = _('Skills')
        ordering = ['category', 'name']

    def __str__(self) -> str:
        return self.name


class ManpowerResource(AuditLogMixin, StatusMixin):
    """
    Staff member or contractor who can be allocated to projects.

    Contractors carry their company and contract details; the contract
    end date drives the contract-expiry alerts.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='manpower_resource',
        verbose_name=_('System User')
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    role = models.CharField(max_length=100, verbose_name=_('Role'))
    department = models.CharField(max_length=100, verbose_name=_('Department'))
    email = models.EmailField(blank=True, verbose_name=_('Email'))
    phone = models.CharField(max_length=20, blank=True, verbose_name=_('Phone'))
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name=_('Hourly Rate (AED)')
    )
    weekly_capacity_hours = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('40.00'),
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('168.00'))],
        verbose_name=_('Weekly Capacity (hours)')
    )

    # Contractor details
    is_contractor = models.BooleanField(default=False, verbose_name=_('Contractor'))
    company_name = models.CharField(max_length=200, blank=True, verbose_name=_('Company Name'))
    contract_number = models.CharField(max_length=50, blank=True, verbose_name=_('Contract Number'))
    contract_start_date = models.DateField(null=True, blank=True, verbose_name=_('Contract Start'))
    contract_end_date = models.DateField(null=True, blank=True, verbose_name=_('Contract End'))
    contact_person = models.CharField(max_length=200, blank=True, verbose_name=_('Contact Person'))
    contact_email = models.EmailField(blank=True, verbose_name=_('Contact Email'))
    contact_phone = models.CharField(max_length=20, blank=True, verbose_name=_('Contact Phone'))

    skills = models.ManyToManyField(
        Skill,
        through='ResourceSkill',
        related_name='resources',
        blank=True,
        verbose_name=_('Skills')
    )

    class Meta:
        verbose_name = _('Manpower Resource')
        verbose_name_plural = _('Manpower Resources')
        ordering = ['department', 'name']

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"

    def clean(self) -> None:
        super().clean()
        if self.is_contractor:
            errors = {}
            if not self.company_name:
                errors['company_name'] = _('Company name is required for contractors.')
            if not self.contract_start_date:
                errors['contract_start_date'] = _('Contract start date is required for contractors.')
            if not self.contract_end_date:
                errors['contract_end_date'] = _('Contract end date is required for contractors.')
            if errors:
                raise ValidationError(errors)
        if (self.contract_start_date and self.contract_end_date
                and self.contract_end_date < self.contract_start_date):
            raise ValidationError({'contract_end_date': _('Contract end cannot be before its start.')})

    def contract_days_remaining(self, today: Optional[date] = None) -> Optional[int]:
        if not self.is_contractor or not self.contract_end_date:
            return None
        today = today or timezone.localdate()
        return (self.contract_end_date - today).days

    @property
    def daily_capacity_hours(self) -> Decimal:
        return self.weekly_capacity_hours / Decimal('5')


class ResourceSkill(models.Model):
    """Skill held by a resource with its proficiency level."""

    resource = models.ForeignKey(
        ManpowerResource,
        on_delete=models.CASCADE,
        related_name='resource_skills',
        verbose_name=_('Resource')
    )
    skill = models.ForeignKey(
        Skill,
        on_delete=models.PROTECT,
        related_name='resource_skills',
        verbose_name=_('Skill')
    )
    proficiency = models.CharField(
        max_length=20,
        choices=ProficiencyLevel.choices,
        default=ProficiencyLevel.BEGINNER,
        verbose_name=_('Proficiency')
    )
    certifications = models.JSONField(default=list, blank=True, verbose_name=_('Certifications'))
    last_used = models.DateField(null=True, blank=True, verbose_name=_('Last Used'))

    class Meta:
        verbose_name = _('Resource Skill')
        verbose_name_plural = _('Resource Skills')
        unique_together = ['resource', 'skill']

    def __str__(self) -> str:
        return f"{self.resource.name} - {self.skill.name} ({self.get_proficiency_display()})"


class Project(AuditLogMixin, ClientScopedMixin):
    """Home modification project for a beneficiary."""

    code = models.CharField(max_length=30, unique=True, verbose_name=_('Project Code'))
    name = models.CharField(max_length=200, verbose_name=_('Project Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    beneficiary = models.ForeignKey(
        'beneficiaries.Beneficiary',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='projects',
        verbose_name=_('Beneficiary')
    )
    status = models.CharField(
        max_length=20,
        choices=ProjectStatus.choices,
        default=ProjectStatus.PLANNED,
        verbose_name=_('Status')
    )
    start_date = models.DateField(verbose_name=_('Start Date'))
    end_date = models.DateField(null=True, blank=True, verbose_name=_('End Date'))
    estimated_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name=_('Estimated Cost (AED)')
    )

    class Meta:
        verbose_name = _('Project')
        verbose_name_plural = _('Projects')
        ordering = ['-start_date', 'code']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"


class Availability(models.Model):
    """Availability block of a resource (leave, training, project work)."""

    resource = models.ForeignKey(
        ManpowerResource,
        on_delete=models.CASCADE,
        related_name='availability',
        verbose_name=_('Resource')
    )
    start_date = models.DateField(verbose_name=_('Start Date'))
    end_date = models.DateField(verbose_name=_('End Date'))
    availability_type = models.CharField(
        max_length=20,
        choices=AvailabilityType.choices,
        verbose_name=_('Type')
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='availability_blocks',
        verbose_name=_('Project')
    )
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Availability')
        verbose_name_plural = _('Availability')
        ordering = ['resource', 'start_date']

    def __str__(self) -> str:
        return f"{self.resource.name}: {self.get_availability_type_display()} {self.start_date} - {self.end_date}"

    def clean(self) -> None:
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': _('End date cannot be before start date.')})


class ResourceAllocation(AuditLogMixin):
    """Allocation of a share of a resource's time to a project."""

    resource = models.ForeignKey(
        ManpowerResource,
        on_delete=models.PROTECT,
        related_name='allocations',
        verbose_name=_('Resource')
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        related_name='allocations',
        verbose_name=_('Project')
    )
    role = models.CharField(max_length=100, blank=True, verbose_name=_('Role on Project'))
    start_date = models.DateField(verbose_name=_('Start Date'))
    end_date = models.DateField(verbose_name=_('End Date'))
    hours_per_day = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('8.00'),
        validators=[MinValueValidator(Decimal('0.25')), MaxValueValidator(Decimal('24.00'))],
        verbose_name=_('Hours per Day')
    )
    allocation_percentage = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        verbose_name=_('Allocation %')
    )
    status = models.CharField(
        max_length=20,
        choices=AllocationStatus.choices,
        default=AllocationStatus.PLANNED,
        verbose_name=_('Status')
    )

    class Meta:
        verbose_name = _('Resource Allocation')
        verbose_name_plural = _('Resource Allocations')
        ordering = ['-start_date']

    def __str__(self) -> str:
        return f"{self.resource.name} -> {self.project.code} ({self.allocation_percentage}%)"

    def clean(self) -> None:
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': _('End date cannot be before start date.')})


class Timesheet(TimeStampedMixin):
    """Hours worked by a resource on one day."""

    resource = models.ForeignKey(
        ManpowerResource,
        on_delete=models.PROTECT,
        related_name='timesheets',
        verbose_name=_('Resource')
    )
    project = models.ForeignKey(
        Project,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='timesheets',
        verbose_name=_('Project')
    )
    date = models.DateField(verbose_name=_('Date'))
    hours = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('24.00'))],
        verbose_name=_('Hours')
    )
    billable = models.BooleanField(default=True, verbose_name=_('Billable'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    status = models.CharField(
        max_length=20,
        choices=TimesheetStatus.choices,
        default=TimesheetStatus.DRAFT,
        verbose_name=_('Status')
    )
    submitted_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Submitted At'))
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_timesheets',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Approved At'))
    rejection_reason = models.TextField(blank=True, verbose_name=_('Rejection Reason'))

    class Meta:
        verbose_name = _('Timesheet')
        verbose_name_plural = _('Timesheets')
        ordering = ['-date', 'resource']
        indexes = [
            models.Index(fields=['resource', 'date'], name='manpower_ts_resource_date_idx'),
            models.Index(fields=['status'], name='manpower_ts_status_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.resource.name} {self.date}: {self.hours}h"


class ResourceForecast(TimeStampedMixin):
    """Required versus available headcount of a department for a quarter."""

    department = models.CharField(max_length=100, verbose_name=_('Department'))
    period = models.CharField(max_length=7, validators=[validate_period], verbose_name=_('Period'))
    required_resources = models.PositiveIntegerField(verbose_name=_('Required Resources'))
    available_resources = models.PositiveIntegerField(verbose_name=_('Available Resources'))
    planned_hiring = models.PositiveIntegerField(default=0, verbose_name=_('Planned Hiring'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Resource Forecast')
        verbose_name_plural = _('Resource Forecasts')
        ordering = ['period', 'department']
        unique_together = ['department', 'period']

    def __str__(self) -> str:
        return f"{self.department} {self.period}"

    @property
    def gap(self) -> int:
        """Positive when the department is short of resources."""
        return self.required_resources - self.available_resources
