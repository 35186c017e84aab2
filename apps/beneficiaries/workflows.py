"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Case status state machine for beneficiaries. Every
             status change is recorded in the audit trail.
-------------------------------------------------------------------------
"""
import logging
from typing import List, Optional

from django.db import transaction

from apps.beneficiaries.models import Beneficiary, BeneficiaryStatus
from apps.core.exceptions import WorkflowTransitionException
from apps.core.services import AuditService

logger = logging.getLogger(__name__)


# Define valid state transitions
BENEFICIARY_TRANSITIONS = {
    BeneficiaryStatus.REGISTERED: [
        BeneficiaryStatus.UNDER_ASSESSMENT,
        BeneficiaryStatus.REJECTED,
        BeneficiaryStatus.WITHDRAWN,
    ],
    BeneficiaryStatus.UNDER_ASSESSMENT: [
        BeneficiaryStatus.APPROVED,
        BeneficiaryStatus.REJECTED,
        BeneficiaryStatus.WITHDRAWN,
    ],
    BeneficiaryStatus.APPROVED: [
        BeneficiaryStatus.IN_PROGRESS,
        BeneficiaryStatus.WITHDRAWN,
    ],
    BeneficiaryStatus.IN_PROGRESS: [
        BeneficiaryStatus.COMPLETED,
        BeneficiaryStatus.WITHDRAWN,
    ],
    BeneficiaryStatus.REJECTED: [BeneficiaryStatus.UNDER_ASSESSMENT],
    BeneficiaryStatus.COMPLETED: [],
    BeneficiaryStatus.WITHDRAWN: [],
}


def get_valid_transitions(current_status: str) -> List[str]:
    """Return the statuses reachable from current_status."""
    return list(BENEFICIARY_TRANSITIONS.get(current_status, []))


def can_transition(current_status: str, target_status: str) -> bool:
    return target_status in get_valid_transitions(current_status)


@transaction.atomic
def change_status(
    beneficiary: Beneficiary,
    target_status: str,
    user,
    reason: str = '',
    source: Optional[str] = None
) -> Beneficiary:
    """
    Move a beneficiary to a new case status.

    Args:
        beneficiary: The beneficiary to update.
        target_status: Desired BeneficiaryStatus.
        user: User performing the change (None for system jobs).
        reason: Free-text reason stored in the audit trail.
        source: Originating workflow (e.g. 'committee_decision').

    Raises:
        WorkflowTransitionException: If the transition is not allowed.
    """
    current_status = beneficiary.status
    if not can_transition(current_status, target_status):
        raise WorkflowTransitionException(
            f"Invalid transition from {current_status} to {target_status}.",
            details={
                'current_status': current_status,
                'target_status': target_status,
                'allowed': get_valid_transitions(current_status),
            }
        )

    beneficiary.status = target_status
    beneficiary.save_with_user(user if getattr(user, 'pk', None) else None,
                               update_fields=['status', 'updated_at', 'updated_by'])

    extra = {}
    if reason:
        extra['reason'] = reason
    if source:
        extra['source'] = source
    AuditService.record_status_change(user, beneficiary, current_status, target_status, **extra)

    logger.info(
        "Beneficiary %s status %s -> %s",
        beneficiary.beneficiary_code, current_status, target_status,
        extra={'beneficiary': beneficiary.beneficiary_code, 'source': source}
    )
    return beneficiary
