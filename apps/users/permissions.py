"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Role checks used by the API views and the
             segregation-of-duties check used by the approval workflows.
-------------------------------------------------------------------------
"""
from typing import Any, Optional, Sequence

from apps.core.exceptions import SelfApprovalException


def check_segregation_of_duties(
    creator_id: Optional[int],
    current_user_id: int,
    action: str = "approve"
) -> None:
    """
    Verify segregation of duties - a user cannot decide on their own work.

    Args:
        creator_id: ID of the user who created the record.
        current_user_id: ID of the user attempting the action.
        action: Description of the action being attempted.

    Raises:
        SelfApprovalException: If the user is trying to act on their own work.
    """
    if creator_id is not None and creator_id == current_user_id:
        raise SelfApprovalException(
            f"You cannot {action} a record you submitted (Segregation of Duties).",
            details={'action': action}
        )


def has_role(user: Any, roles: Sequence[str]) -> bool:
    """
    Check if user has any of the specified roles.

    Args:
        user: The user object to check.
        roles: Role codes to check against.

    Returns:
        True if user has any of the specified roles or is superuser.
    """
    if not user.is_authenticated:
        return False

    if user.is_superuser:
        return True

    return user.has_any_role(list(roles))
