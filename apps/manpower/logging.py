"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Centralized logging for manpower operations.
-------------------------------------------------------------------------
"""
import logging

logger = logging.getLogger('manpower')


class ManpowerLogger:
    """Centralized logging for manpower operations"""

    @staticmethod
    def log_allocation(allocation, user):
        """Log a new resource allocation"""
        logger.info(
            f"Allocation created: {allocation.resource.name} -> {allocation.project.code} | "
            f"Period: {allocation.start_date} to {allocation.end_date} | "
            f"Share: {allocation.allocation_percentage}% | "
            f"By: {user.emirates_id}",
            extra={
                'allocation_id': allocation.pk,
                'resource_id': allocation.resource_id,
                'project_id': allocation.project_id,
                'percentage': allocation.allocation_percentage,
                'user_id': user.id,
            }
        )

    @staticmethod
    def log_allocation_conflict(resource, start, end, requested: int, peak: int):
        """Log a rejected allocation"""
        logger.warning(
            f"Allocation conflict: {resource.name} | "
            f"Period: {start} to {end} | "
            f"Requested: {requested}% | Already allocated: {peak}%",
            extra={
                'resource_id': resource.pk,
                'requested': requested,
                'allocated': peak,
            }
        )

    @staticmethod
    def log_timesheet_transition(timesheet, old_status: str, new_status: str, user):
        """Log a timesheet status change"""
        logger.info(
            f"Timesheet {timesheet.pk}: {old_status} -> {new_status} | "
            f"Resource: {timesheet.resource.name} | "
            f"Date: {timesheet.date} | Hours: {timesheet.hours} | "
            f"By: {user.emirates_id}",
            extra={
                'timesheet_id': timesheet.pk,
                'resource_id': timesheet.resource_id,
                'old_status': old_status,
                'new_status': new_status,
                'user_id': user.id,
            }
        )
