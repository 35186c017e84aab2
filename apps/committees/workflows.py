"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: State machines for committee submissions and meetings.
-------------------------------------------------------------------------
"""
from typing import List

from apps.committees.models import SubmissionStatus, MeetingStatus, DecisionValue
from apps.core.exceptions import InvalidPayloadException, WorkflowTransitionException


# Define valid state transitions
SUBMISSION_TRANSITIONS = {
    SubmissionStatus.PENDING: [
        SubmissionStatus.APPROVED,
        SubmissionStatus.REJECTED,
        SubmissionStatus.DEFERRED,
    ],
    SubmissionStatus.DEFERRED: [SubmissionStatus.PENDING],
    SubmissionStatus.APPROVED: [],
    SubmissionStatus.REJECTED: [],
}

MEETING_TRANSITIONS = {
    MeetingStatus.SCHEDULED: [MeetingStatus.IN_PROGRESS, MeetingStatus.CANCELLED],
    MeetingStatus.IN_PROGRESS: [MeetingStatus.COMPLETED, MeetingStatus.CANCELLED],
    MeetingStatus.COMPLETED: [],
    MeetingStatus.CANCELLED: [],
}

# Submission status that results from each decision value
DECISION_OUTCOMES = {
    DecisionValue.APPROVED: SubmissionStatus.APPROVED,
    DecisionValue.MODIFIED: SubmissionStatus.APPROVED,
    DecisionValue.REJECTED: SubmissionStatus.REJECTED,
    DecisionValue.DEFERRED: SubmissionStatus.DEFERRED,
}


def get_valid_transitions(current_status: str) -> List[str]:
    """Return the submission statuses reachable from current_status."""
    return list(SUBMISSION_TRANSITIONS.get(current_status, []))


def can_transition(current_status: str, target_status: str) -> bool:
    return target_status in get_valid_transitions(current_status)


def get_valid_meeting_transitions(current_status: str) -> List[str]:
    return list(MEETING_TRANSITIONS.get(current_status, []))


def validate_meeting_transition(meeting, target_status: str) -> None:
    """
    Raises:
        WorkflowTransitionException: If the meeting cannot move to target_status.
    """
    allowed = get_valid_meeting_transitions(meeting.status)
    if target_status not in allowed:
        raise WorkflowTransitionException(
            f"Meeting {meeting.meeting_code} cannot move from {meeting.status} to {target_status}.",
            details={
                'current_status': meeting.status,
                'target_status': target_status,
                'allowed': allowed,
            }
        )


def submission_status_for(decision: str) -> str:
    """
    Map a decision value to the resulting submission status.

    Raises:
        InvalidPayloadException: If the decision value is unknown.
    """
    try:
        return DECISION_OUTCOMES[decision]
    except KeyError:
        raise InvalidPayloadException(
            f"Unknown decision '{decision}'.",
            details={'allowed': [choice for choice, _label in DecisionValue.choices]}
        )
