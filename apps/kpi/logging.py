"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for KPI refreshes and alerts.
-------------------------------------------------------------------------
"""
import logging

logger = logging.getLogger('kpi')

SEVERITY_LEVELS = {
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'CRITICAL': logging.ERROR,
}


class KpiLogger:
    """Centralized logging for KPI operations"""

    @staticmethod
    def log_alert_triggered(alert, value):
        """Log an alert crossing its threshold"""
        logger.log(
            SEVERITY_LEVELS.get(alert.severity, logging.WARNING),
            f"KPI alert triggered: {alert.metric.code} | "
            f"Condition: {alert.condition} {alert.threshold} | "
            f"Value: {value} | "
            f"Severity: {alert.severity} | "
            f"{alert.message}",
            extra={
                'alert_id': alert.pk,
                'metric': alert.metric.code,
                'value': str(value),
                'severity': alert.severity,
            }
        )

    @staticmethod
    def log_alert_resolved(alert, value):
        """Log an alert returning within its threshold"""
        logger.info(
            f"KPI alert resolved: {alert.metric.code} | "
            f"Condition: {alert.condition} {alert.threshold} | "
            f"Value: {value}",
            extra={
                'alert_id': alert.pk,
                'metric': alert.metric.code,
                'value': str(value),
            }
        )

    @staticmethod
    def log_refresh(dashboard, refreshed: int, errors: int):
        """Log a dashboard refresh"""
        logger.info(
            f"Dashboard refreshed: {dashboard.code} | "
            f"Metrics refreshed: {refreshed} | Errors: {errors}",
            extra={
                'dashboard': dashboard.code,
                'refreshed': refreshed,
                'errors': errors,
            }
        )

    @staticmethod
    def log_refresh_error(metric, error: Exception):
        """Log a metric that could not be refreshed"""
        logger.error(
            f"KPI refresh failed: {metric.code} | "
            f"Source: {metric.source} | "
            f"Error: {type(error).__name__}: {error}",
            extra={
                'metric': metric.code,
                'source': metric.source,
                'error_type': type(error).__name__,
            },
            exc_info=error
        )

    @staticmethod
    def log_delivery_error(alert, channel: str, error: Exception):
        """Log an alert notice that could not be delivered"""
        logger.error(
            f"KPI alert delivery failed: {alert.metric.code} | "
            f"Channel: {channel} | "
            f"Error: {error}",
            extra={
                'alert_id': alert.pk,
                'channel': channel,
            }
        )
