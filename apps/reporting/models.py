"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reporting models: report templates, recurring schedules and
             the history of generated report files.
-------------------------------------------------------------------------
"""
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, ClientScopedMixin


class ReportFormat(models.TextChoices):
    PDF = 'PDF', _('PDF')
    EXCEL = 'EXCEL', _('Excel')
    CSV = 'CSV', _('CSV')
    HTML = 'HTML', _('HTML')


FORMAT_EXTENSIONS = {
    ReportFormat.PDF: 'pdf',
    ReportFormat.EXCEL: 'xlsx',
    ReportFormat.CSV: 'csv',
    ReportFormat.HTML: 'html',
}


class ScheduleFrequency(models.TextChoices):
    DAILY = 'DAILY', _('Daily')
    WEEKLY = 'WEEKLY', _('Weekly')
    MONTHLY = 'MONTHLY', _('Monthly')
    QUARTERLY = 'QUARTERLY', _('Quarterly')


def report_upload_path(instance, filename: str) -> str:
    """Store generated files under REPORT_OUTPUT_DIR/<year>/<month>/."""
    return f"{settings.REPORT_OUTPUT_DIR}/{timezone.localdate():%Y/%m}/{filename}"


class ReportTemplate(AuditLogMixin, StatusMixin, ClientScopedMixin):
    """
    Definition of a report.

    Rows come from the data builder named by `data_source`. Templates
    without a client type are available to every funding source; the
    others are specific to one client type.
    """

    code = models.SlugField(max_length=80, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    parameters = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Parameters'),
        help_text=_('Parameter names or definitions, e.g. {"name": "start_date", "type": "date"}.')
    )
    default_format = models.CharField(
        max_length=10,
        choices=ReportFormat.choices,
        default=ReportFormat.PDF,
        verbose_name=_('Default Format')
    )
    metrics = models.JSONField(default=list, blank=True, verbose_name=_('Metrics'))
    sections = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Sections'),
        help_text=_('Ordered sections, e.g. [{"title": "Summary", "type": "text", "content": "..."}].')
    )
    data_source = models.CharField(max_length=50, verbose_name=_('Data Source'))
    version = models.PositiveIntegerField(default=1, verbose_name=_('Version'))
    author = models.CharField(max_length=200, blank=True, verbose_name=_('Author'))

    class Meta:
        verbose_name = _('Report Template')
        verbose_name_plural = _('Report Templates')
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"


class ReportSchedule(AuditLogMixin, ClientScopedMixin):
    """Recurring generation of a template, emailed to its recipients."""

    template = models.ForeignKey(
        ReportTemplate,
        on_delete=models.CASCADE,
        related_name='schedules',
        verbose_name=_('Template')
    )
    name = models.CharField(max_length=200, blank=True, verbose_name=_('Name'))
    parameters = models.JSONField(default=dict, blank=True, verbose_name=_('Parameters'))
    frequency = models.CharField(max_length=10, choices=ScheduleFrequency.choices, verbose_name=_('Frequency'))
    time_of_day = models.TimeField(verbose_name=_('Time of Day'))
    day_of_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(6)],
        verbose_name=_('Day of Week'),
        help_text=_('0 = Monday ... 6 = Sunday (weekly schedules).')
    )
    day_of_month = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        verbose_name=_('Day of Month'),
        help_text=_('1-31, clamped to the length of the month (monthly and quarterly schedules).')
    )
    format = models.CharField(
        max_length=10,
        choices=ReportFormat.choices,
        default=ReportFormat.PDF,
        verbose_name=_('Format')
    )
    recipients = models.JSONField(default=list, blank=True, verbose_name=_('Recipients'))
    is_active = models.BooleanField(default=True, verbose_name=_('Is Active'))
    last_run = models.DateTimeField(null=True, blank=True, verbose_name=_('Last Run'))
    next_run = models.DateTimeField(null=True, blank=True, db_index=True, verbose_name=_('Next Run'))

    class Meta:
        verbose_name = _('Report Schedule')
        verbose_name_plural = _('Report Schedules')
        ordering = ['next_run']

    def __str__(self) -> str:
        return self.name or f"{self.template.name} - {self.get_frequency_display()}"


class GeneratedReport(models.Model):
    """A rendered report file."""

    template = models.ForeignKey(
        ReportTemplate,
        on_delete=models.CASCADE,
        related_name='generated_reports',
        verbose_name=_('Template')
    )
    schedule = models.ForeignKey(
        ReportSchedule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_reports',
        verbose_name=_('Schedule')
    )
    format = models.CharField(max_length=10, choices=ReportFormat.choices, verbose_name=_('Format'))
    filename = models.CharField(max_length=255, verbose_name=_('Filename'))
    file = models.FileField(upload_to=report_upload_path, max_length=255, verbose_name=_('File'))
    row_count = models.PositiveIntegerField(default=0, verbose_name=_('Rows'))
    parameters = models.JSONField(default=dict, blank=True, verbose_name=_('Parameters'))
    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='generated_reports',
        verbose_name=_('Generated By')
    )
    generated_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Generated At'))

    class Meta:
        verbose_name = _('Generated Report')
        verbose_name_plural = _('Generated Reports')
        ordering = ['-generated_at']

    def __str__(self) -> str:
        return self.filename
