"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: KPI models: metrics and their data points, dashboards,
             threshold alerts and resource utilization snapshots.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, ClientScopedMixin, TimeStampedMixin


class KpiCategory(models.TextChoices):
    ASSESSMENT = 'ASSESSMENT', _('Assessment')
    PROJECT = 'PROJECT', _('Project')
    FINANCIAL = 'FINANCIAL', _('Financial')
    OPERATIONAL = 'OPERATIONAL', _('Operational')
    CLIENT_SATISFACTION = 'CLIENT_SATISFACTION', _('Client Satisfaction')
    COMPLIANCE = 'COMPLIANCE', _('Compliance')
    RESOURCE_UTILIZATION = 'RESOURCE_UTILIZATION', _('Resource Utilization')


class TrendDirection(models.TextChoices):
    UP = 'UP', _('Up')
    DOWN = 'DOWN', _('Down')
    NEUTRAL = 'NEUTRAL', _('Neutral')


class AggregationMethod(models.TextChoices):
    SUM = 'SUM', _('Sum')
    AVERAGE = 'AVERAGE', _('Average')
    MIN = 'MIN', _('Minimum')
    MAX = 'MAX', _('Maximum')
    LAST = 'LAST', _('Last Value')


class KpiStatus(models.TextChoices):
    OK = 'OK', _('On Track')
    WARNING = 'WARNING', _('Warning')
    CRITICAL = 'CRITICAL', _('Critical')


class AlertCondition(models.TextChoices):
    ABOVE = 'ABOVE', _('Above')
    BELOW = 'BELOW', _('Below')
    EQUAL = 'EQUAL', _('Equal')


class AlertSeverity(models.TextChoices):
    INFO = 'INFO', _('Information')
    WARNING = 'WARNING', _('Warning')
    CRITICAL = 'CRITICAL', _('Critical')


class NotificationChannel(models.TextChoices):
    IN_APP = 'IN_APP', _('In-App Notification')
    EMAIL = 'EMAIL', _('Email')
    LOG = 'LOG', _('System Log')


class KpiMetric(AuditLogMixin, StatusMixin, ClientScopedMixin):
    """
    Performance indicator tracked over time.

    Metrics with a `source` are refreshed by the registered collector of
    that code; metrics without one are fed manually through the API.
    Thresholds are read in the direction given by `higher_is_better`.
    """

    code = models.SlugField(max_length=80, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    category = models.CharField(
        max_length=30,
        choices=KpiCategory.choices,
        default=KpiCategory.OPERATIONAL,
        verbose_name=_('Category')
    )
    unit = models.CharField(max_length=20, default='%', blank=True, verbose_name=_('Unit'))
    target = models.DecimalField(
        max_digits=14, decimal_places=4, null=True, blank=True, verbose_name=_('Target')
    )
    warning_threshold = models.DecimalField(
        max_digits=14, decimal_places=4, null=True, blank=True, verbose_name=_('Warning Threshold')
    )
    critical_threshold = models.DecimalField(
        max_digits=14, decimal_places=4, null=True, blank=True, verbose_name=_('Critical Threshold')
    )
    higher_is_better = models.BooleanField(default=True, verbose_name=_('Higher Is Better'))
    trend = models.CharField(
        max_length=10,
        choices=TrendDirection.choices,
        default=TrendDirection.NEUTRAL,
        verbose_name=_('Trend')
    )
    aggregation = models.CharField(
        max_length=10,
        choices=AggregationMethod.choices,
        default=AggregationMethod.LAST,
        verbose_name=_('Aggregation')
    )
    source = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_('Data Source'),
        help_text=_('Code of the collector that computes this metric. Empty for manual metrics.')
    )
    source_params = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Source Parameters'),
        help_text=_('Options passed to the collector, e.g. {"role": "Senior Contractor"}.')
    )

    class Meta:
        verbose_name = _('KPI Metric')
        verbose_name_plural = _('KPI Metrics')
        ordering = ['category', 'name']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def latest_point(self) -> Optional['KpiDataPoint']:
        return self.data_points.order_by('-timestamp', '-id').first()

    def latest_value(self) -> Optional[Decimal]:
        point = self.latest_point()
        return point.value if point else None


class KpiDataPoint(models.Model):
    """Value of a metric at a point in time."""

    metric = models.ForeignKey(
        KpiMetric,
        on_delete=models.CASCADE,
        related_name='data_points',
        verbose_name=_('Metric')
    )
    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    value = models.DecimalField(max_digits=14, decimal_places=4, verbose_name=_('Value'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    class Meta:
        verbose_name = _('KPI Data Point')
        verbose_name_plural = _('KPI Data Points')
        ordering = ['metric', 'timestamp']
        indexes = [models.Index(fields=['metric', 'timestamp'], name='kpi_value_metric_ts_idx')]

    def __str__(self) -> str:
        return f"{self.metric.code} @ {self.timestamp:%Y-%m-%d %H:%M}: {self.value}"


class KpiDashboard(AuditLogMixin, StatusMixin):
    """Group of metrics refreshed together."""

    code = models.SlugField(max_length=80, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    metrics = models.ManyToManyField(
        KpiMetric,
        related_name='dashboards',
        blank=True,
        verbose_name=_('Metrics')
    )
    refresh_interval = models.PositiveIntegerField(
        default=3600,
        verbose_name=_('Refresh Interval (seconds)'),
        help_text=_('0 disables automatic refresh.')
    )
    last_refreshed_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Last Refreshed'))

    class Meta:
        verbose_name = _('KPI Dashboard')
        verbose_name_plural = _('KPI Dashboards')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class KpiAlert(TimeStampedMixin):
    """
    Threshold rule on a metric's latest value.

    An alert is currently triggered while `triggered_at` is set and
    `resolved_at` is empty.
    """

    metric = models.ForeignKey(
        KpiMetric,
        on_delete=models.CASCADE,
        related_name='alerts',
        verbose_name=_('Metric')
    )
    condition = models.CharField(max_length=10, choices=AlertCondition.choices, verbose_name=_('Condition'))
    threshold = models.DecimalField(max_digits=14, decimal_places=4, verbose_name=_('Threshold'))
    message = models.CharField(max_length=255, verbose_name=_('Message'))
    severity = models.CharField(
        max_length=10,
        choices=AlertSeverity.choices,
        default=AlertSeverity.WARNING,
        verbose_name=_('Severity')
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Is Active'))
    triggered_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Triggered At'))
    resolved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Resolved At'))
    notification_channels = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Notification Channels'),
        help_text=_('Any of IN_APP, EMAIL and LOG.')
    )
    recipients = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='kpi_alerts',
        blank=True,
        verbose_name=_('Recipients')
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_kpi_alerts',
        verbose_name=_('Created By')
    )

    class Meta:
        verbose_name = _('KPI Alert')
        verbose_name_plural = _('KPI Alerts')
        ordering = ['metric', 'threshold']

    def __str__(self) -> str:
        return f"{self.metric.code} {self.condition} {self.threshold}"

    @property
    def is_triggered(self) -> bool:
        return self.triggered_at is not None and self.resolved_at is None


class ResourceUtilizationReport(TimeStampedMixin):
    """Stored snapshot of the manpower utilization report for a period."""

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    start_date = models.DateField(verbose_name=_('From'))
    end_date = models.DateField(verbose_name=_('To'))
    department = models.CharField(max_length=100, blank=True, verbose_name=_('Department'))
    average_utilization = models.DecimalField(
        max_digits=7, decimal_places=2, default=Decimal('0.00'), verbose_name=_('Average Utilization %')
    )
    resources_count = models.PositiveIntegerField(default=0, verbose_name=_('Resources'))
    payload = models.JSONField(default=dict, verbose_name=_('Report Data'))
    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='utilization_reports',
        verbose_name=_('Generated By')
    )

    class Meta:
        verbose_name = _('Resource Utilization Report')
        verbose_name_plural = _('Resource Utilization Reports')
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.name
