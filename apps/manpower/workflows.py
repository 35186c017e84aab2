"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Timesheet approval workflow.
-------------------------------------------------------------------------
"""
from typing import List

from apps.core.exceptions import WorkflowTransitionException
from apps.manpower.models import TimesheetStatus


# Define valid state transitions
TIMESHEET_TRANSITIONS = {
    TimesheetStatus.DRAFT: [TimesheetStatus.SUBMITTED],
    TimesheetStatus.SUBMITTED: [TimesheetStatus.APPROVED, TimesheetStatus.REJECTED],
    TimesheetStatus.REJECTED: [TimesheetStatus.DRAFT],
    TimesheetStatus.APPROVED: [],
}

# Statuses an approver moves a timesheet into
APPROVAL_STATUSES = (TimesheetStatus.APPROVED, TimesheetStatus.REJECTED)

# Timesheet hours can only be edited while the entry is with its owner
EDITABLE_STATUSES = (TimesheetStatus.DRAFT, TimesheetStatus.REJECTED)


def get_valid_transitions(current_status: str) -> List[str]:
    """Return the timesheet statuses reachable from current_status."""
    return list(TIMESHEET_TRANSITIONS.get(current_status, []))


def can_transition(current_status: str, target_status: str) -> bool:
    return target_status in get_valid_transitions(current_status)


def validate_transition(timesheet, target_status: str) -> None:
    """
    Raises:
        WorkflowTransitionException: If the timesheet cannot move to target_status.
    """
    allowed = get_valid_transitions(timesheet.status)
    if target_status not in allowed:
        raise WorkflowTransitionException(
            f"Timesheet cannot move from {timesheet.status} to {target_status}.",
            details={
                'timesheet_id': timesheet.pk,
                'current_status': timesheet.status,
                'target_status': target_status,
                'allowed': allowed,
            }
        )
