"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: KPI business logic: data points, trends, threshold status,
             alert evaluation and delivery, dashboard refresh and
             resource utilization snapshots.
-------------------------------------------------------------------------
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from functools import partial
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.core.mail import send_mail
from django.db import transaction
from django.db.models import Avg, Max, Min, Sum
from django.utils import timezone

from apps.core.exceptions import KpiCollectorException, RetryExhaustedException
from apps.core.models import NotificationCategory, NotificationPriority
from apps.core.services import NotificationService
from apps.core.utils import retry_with_backoff
from apps.kpi.collectors import get_collector
from apps.kpi.logging import KpiLogger
from apps.kpi.models import (
    KpiMetric, KpiDataPoint, KpiDashboard, KpiAlert, ResourceUtilizationReport,
    TrendDirection, AggregationMethod, KpiStatus, AlertCondition, AlertSeverity,
    NotificationChannel,
)
from apps.manpower.services import ManpowerService

TREND_WINDOW = 5

DASHBOARD_CACHE_KEY = 'kpi:dashboard:{pk}'

AGGREGATES = {
    AggregationMethod.SUM: Sum,
    AggregationMethod.AVERAGE: Avg,
    AggregationMethod.MIN: Min,
    AggregationMethod.MAX: Max,
}


def _as_decimal(value) -> Decimal:
    """Normalise to the stored precision of metric values."""
    return Decimal(str(value)).quantize(Decimal('0.0001'))


class KpiService:
    """Service class for KPI metrics, alerts and dashboards."""

    # ------------------------------------------------------------------
    # Data points, trend and status
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def add_data_point(metric: KpiMetric, value, timestamp: Optional[datetime] = None,
                       metadata: Optional[dict] = None) -> KpiDataPoint:
        """
        Store a new value for a metric, then update its trend and alerts.

        Returns:
            The created KpiDataPoint.
        """
        point = KpiDataPoint.objects.create(
            metric=metric,
            value=_as_decimal(value),
            timestamp=timestamp or timezone.now(),
            metadata=metadata or {},
        )
        KpiService.update_trend(metric)
        KpiService.check_alerts(metric)
        return point

    @staticmethod
    def update_trend(metric: KpiMetric) -> str:
        """
        Compare the oldest and newest of the most recent data points.

        Fewer than two points leave the trend NEUTRAL.
        """
        recent = list(
            metric.data_points.order_by('-timestamp', '-id').values_list('value', flat=True)[:TREND_WINDOW]
        )
        trend = TrendDirection.NEUTRAL
        if len(recent) >= 2:
            newest, oldest = recent[0], recent[-1]
            if newest > oldest:
                trend = TrendDirection.UP
            elif newest < oldest:
                trend = TrendDirection.DOWN

        if metric.trend != trend:
            metric.trend = trend
            metric.save(update_fields=['trend', 'updated_at'])
        return trend

    @staticmethod
    def get_status(metric: KpiMetric, value) -> str:
        """
        Classify a value against the metric thresholds.

        For higher-is-better metrics a value at or below a threshold hits
        it; for lower-is-better metrics a value at or above it does.
        """
        if value is None:
            return KpiStatus.OK
        value = Decimal(str(value))
        critical = metric.critical_threshold
        warning = metric.warning_threshold

        if metric.higher_is_better:
            if critical is not None and value <= critical:
                return KpiStatus.CRITICAL
            if warning is not None and value <= warning:
                return KpiStatus.WARNING
        else:
            if critical is not None and value >= critical:
                return KpiStatus.CRITICAL
            if warning is not None and value >= warning:
                return KpiStatus.WARNING
        return KpiStatus.OK

    @staticmethod
    def aggregate(metric: KpiMetric, since: Optional[datetime] = None) -> Optional[Decimal]:
        """Aggregate the metric's data points with its aggregation method."""
        points = metric.data_points.all()
        if since is not None:
            points = points.filter(timestamp__gte=since)

        if metric.aggregation == AggregationMethod.LAST:
            latest = points.order_by('-timestamp', '-id').values_list('value', flat=True).first()
            return latest

        function = AGGREGATES[metric.aggregation]
        result = points.aggregate(result=function('value'))['result']
        if result is None:
            return None
        return _as_decimal(result)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @staticmethod
    def evaluate_alert(alert: KpiAlert, value) -> bool:
        """Return True when the value meets the alert condition."""
        if value is None:
            return False
        value = _as_decimal(value)
        if alert.condition == AlertCondition.ABOVE:
            return value > alert.threshold
        if alert.condition == AlertCondition.BELOW:
            return value < alert.threshold
        return value == alert.threshold

    @staticmethod
    def check_alerts(metric: KpiMetric, now: Optional[datetime] = None) -> Dict[str, List[KpiAlert]]:
        """
        Evaluate the active alerts of a metric against its latest value.

        An alert that starts matching is triggered and notified; a
        triggered alert that stops matching is resolved and notified.
        Alerts whose state does not change are left alone.

        Returns:
            Dictionary with the 'triggered' and 'resolved' alerts.
        """
        now = now or timezone.now()
        value = metric.latest_value()
        result = {'triggered': [], 'resolved': []}

        for alert in metric.alerts.filter(is_active=True).select_related('metric'):
            matches = KpiService.evaluate_alert(alert, value)
            if matches and not alert.is_triggered:
                alert.triggered_at = now
                alert.resolved_at = None
                alert.save(update_fields=['triggered_at', 'resolved_at', 'updated_at'])
                KpiLogger.log_alert_triggered(alert, value)
                KpiService._dispatch(alert, value, resolved=False)
                result['triggered'].append(alert)
            elif not matches and alert.is_triggered:
                alert.resolved_at = now
                alert.save(update_fields=['resolved_at', 'updated_at'])
                KpiLogger.log_alert_resolved(alert, value)
                KpiService._dispatch(alert, value, resolved=True)
                result['resolved'].append(alert)
        return result

    @staticmethod
    def _dispatch(alert: KpiAlert, value, resolved: bool) -> None:
        """Deliver an alert notice on each configured channel."""
        metric = alert.metric
        if resolved:
            title = f"Resolved: {metric.name}"
            message = (
                f"{metric.name} is back within range ({value}{metric.unit}). "
                f"Alert: {alert.message}"
            )
        else:
            title = f"KPI Alert: {metric.name}"
            message = (
                f"{alert.message} Current value {value}{metric.unit} is "
                f"{alert.get_condition_display().lower()} {alert.threshold}{metric.unit}."
            )
        recipients = list(alert.recipients.filter(is_active=True))

        for channel in alert.notification_channels:
            if channel == NotificationChannel.IN_APP:
                NotificationService.send_bulk_notification(
                    recipients=recipients,
                    title=title,
                    message=message,
                    link=f"/api/kpi/metrics/{metric.pk}/",
                    category=NotificationCategory.ALERT,
                    icon='bi-check-circle' if resolved else 'bi-exclamation-triangle',
                    priority=NotificationPriority.HIGH
                    if alert.severity == AlertSeverity.CRITICAL and not resolved
                    else NotificationPriority.MEDIUM
                )
            elif channel == NotificationChannel.EMAIL:
                addresses = [user.email for user in recipients if user.email]
                if not addresses:
                    continue
                transaction.on_commit(
                    partial(KpiService._send_alert_email, alert, title, message, addresses)
                )
            # LOG is covered by the trigger/resolve log entries

    @staticmethod
    def _send_alert_email(alert: KpiAlert, title: str, message: str, addresses: List[str]) -> None:
        """Send an alert email once the triggering transaction has committed."""
        try:
            retry_with_backoff(
                lambda: send_mail(title, message, settings.DEFAULT_FROM_EMAIL, addresses),
                retries=settings.REPORT_DELIVERY_RETRIES,
            )
        except RetryExhaustedException as exc:
            KpiLogger.log_delivery_error(alert, NotificationChannel.EMAIL, exc)

    @staticmethod
    def get_active_alerts():
        """Alerts currently in the triggered state."""
        return KpiAlert.objects.filter(
            is_active=True,
            triggered_at__isnull=False,
            resolved_at__isnull=True,
        ).select_related('metric').order_by('-triggered_at')

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    @staticmethod
    def refresh_metric(metric: KpiMetric, now: Optional[datetime] = None) -> Optional[KpiDataPoint]:
        """
        Recompute a metric from its collector and store the value.

        Manual metrics (no source) are not refreshed.

        Raises:
            KpiCollectorException: If the source has no registered collector.
        """
        if not metric.source:
            return None
        collector = get_collector(metric.source)
        if collector is None:
            raise KpiCollectorException(
                f"No collector registered for source '{metric.source}'.",
                details={'metric': metric.code, 'source': metric.source}
            )
        now = now or timezone.now()
        value = collector(metric, now)
        return KpiService.add_data_point(metric, value, timestamp=now, metadata={'source': metric.source})

    @staticmethod
    def refresh_dashboard(dashboard: KpiDashboard, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Refresh every active metric of a dashboard.

        A failing metric is logged and skipped so the remaining metrics
        are still refreshed.
        """
        now = now or timezone.now()
        refreshed = 0
        errors = []

        for metric in dashboard.metrics.filter(is_active=True):
            try:
                if KpiService.refresh_metric(metric, now) is not None:
                    refreshed += 1
            except Exception as exc:
                KpiLogger.log_refresh_error(metric, exc)
                errors.append({'metric': metric.code, 'error': str(exc)})

        dashboard.last_refreshed_at = now
        dashboard.save(update_fields=['last_refreshed_at', 'updated_at'])
        cache.delete(DASHBOARD_CACHE_KEY.format(pk=dashboard.pk))
        KpiLogger.log_refresh(dashboard, refreshed, len(errors))
        return {'dashboard': dashboard.code, 'refreshed': refreshed, 'errors': errors}

    @staticmethod
    def is_due(dashboard: KpiDashboard, now: datetime) -> bool:
        if not dashboard.refresh_interval:
            return False
        if dashboard.last_refreshed_at is None:
            return True
        return dashboard.last_refreshed_at + timedelta(seconds=dashboard.refresh_interval) <= now

    @staticmethod
    def refresh_due_dashboards(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Refresh the active dashboards whose refresh interval has elapsed."""
        now = now or timezone.now()
        results = []
        for dashboard in KpiDashboard.objects.filter(is_active=True):
            if KpiService.is_due(dashboard, now):
                results.append(KpiService.refresh_dashboard(dashboard, now))
        return results

    # ------------------------------------------------------------------
    # Dashboard data
    # ------------------------------------------------------------------

    @staticmethod
    def get_metric_summary(metric: KpiMetric) -> Dict[str, Any]:
        point = metric.latest_point()
        value = point.value if point else None
        return {
            'id': metric.pk,
            'code': metric.code,
            'name': metric.name,
            'category': metric.category,
            'unit': metric.unit,
            'value': value,
            'timestamp': point.timestamp if point else None,
            'target': metric.target,
            'warning_threshold': metric.warning_threshold,
            'critical_threshold': metric.critical_threshold,
            'higher_is_better': metric.higher_is_better,
            'trend': metric.trend,
            'status': KpiService.get_status(metric, value),
        }

    @staticmethod
    def get_dashboard_data(dashboard: KpiDashboard, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Dashboard payload with the current value and status of each metric.

        The payload is cached per dashboard; `force_refresh` recomputes
        the metrics first.
        """
        key = DASHBOARD_CACHE_KEY.format(pk=dashboard.pk)
        if force_refresh:
            KpiService.refresh_dashboard(dashboard)
        else:
            cached = cache.get(key)
            if cached is not None:
                return cached

        metrics = [
            KpiService.get_metric_summary(metric)
            for metric in dashboard.metrics.filter(is_active=True).order_by('category', 'name')
        ]
        data = {
            'id': dashboard.pk,
            'code': dashboard.code,
            'name': dashboard.name,
            'description': dashboard.description,
            'refresh_interval': dashboard.refresh_interval,
            'last_refreshed_at': dashboard.last_refreshed_at,
            'metrics': metrics,
            'alerts': [
                {
                    'id': alert.pk,
                    'metric': alert.metric.code,
                    'message': alert.message,
                    'severity': alert.severity,
                    'triggered_at': alert.triggered_at,
                }
                for alert in KpiService.get_active_alerts().filter(metric__dashboards=dashboard)
            ],
        }
        cache.set(key, data, settings.KPI_CACHE_SECONDS)
        return data

    # ------------------------------------------------------------------
    # Utilization snapshots
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def generate_resource_utilization_report(start_date: date, end_date: date,
                                             name: Optional[str] = None,
                                             department: Optional[str] = None,
                                             user=None) -> ResourceUtilizationReport:
        """Persist a snapshot of the manpower utilization report."""
        report = ManpowerService.get_utilization_report(start_date, end_date, department=department)
        return ResourceUtilizationReport.objects.create(
            name=name or f"Resource Utilization {start_date:%Y-%m-%d} to {end_date:%Y-%m-%d}",
            start_date=start_date,
            end_date=end_date,
            department=department or '',
            average_utilization=Decimal(str(report['average_utilization'])).quantize(Decimal('0.01')),
            resources_count=len(report['resources']),
            payload=report,
            generated_by=user,
        )
