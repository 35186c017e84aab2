"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for report generation and delivery.
-------------------------------------------------------------------------
"""
import logging

logger = logging.getLogger('reporting')


class ReportingLogger:
    """Centralized logging for reporting operations"""

    @staticmethod
    def log_generated(report, user=None):
        """Log a generated report file"""
        logger.info(
            f"Report generated: {report.template.code} | "
            f"File: {report.filename} | "
            f"Rows: {report.row_count} | "
            f"By: {user.emirates_id if user else 'scheduler'}",
            extra={
                'report_id': report.pk,
                'template': report.template.code,
                'format': report.format,
                'rows': report.row_count,
                'schedule_id': report.schedule_id,
            }
        )

    @staticmethod
    def log_generation_failed(schedule, error: Exception):
        """Log a scheduled report that could not be generated"""
        logger.error(
            f"Scheduled report failed: {schedule.template.code} | "
            f"Schedule: {schedule.pk} | "
            f"Error: {type(error).__name__}: {error}",
            extra={
                'schedule_id': schedule.pk,
                'template': schedule.template.code,
                'error_type': type(error).__name__,
            },
            exc_info=error
        )

    @staticmethod
    def log_delivery(report, recipients):
        """Log a report emailed to its recipients"""
        logger.info(
            f"Report delivered: {report.filename} | "
            f"Recipients: {', '.join(recipients)}",
            extra={
                'report_id': report.pk,
                'recipients': list(recipients),
            }
        )

    @staticmethod
    def log_delivery_error(report, recipients, error: Exception):
        """Log a report that could not be emailed"""
        logger.error(
            f"Report delivery failed: {report.filename} | "
            f"Recipients: {', '.join(recipients)} | "
            f"Error: {error}",
            extra={
                'report_id': report.pk,
                'recipients': list(recipients),
            }
        )
