"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom exceptions for the Barakatna CMS system. These provide
             specific error codes for workflow, scheduling and reporting
             violations.
-------------------------------------------------------------------------
"""
from typing import Optional


class CMSException(Exception):
    """Base exception for all Barakatna CMS specific errors."""

    error_code: str = "ERR_CMS_GENERIC"
    default_message: str = "An error occurred in the case management system."
    status_code: int = 400

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize CMS exception.

        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for debugging.
        """
        self.message = str(message or self.default_message)
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class InvalidPayloadException(CMSException):
    """Raised when an API request body or parameter is invalid."""

    error_code = "ERR_INVALID_PAYLOAD"
    default_message = "The request body is not valid JSON."


class RecordNotFoundException(CMSException):
    """Raised when a referenced record does not exist."""

    error_code = "ERR_NOT_FOUND"
    default_message = "The requested record was not found."
    status_code = 404


# Workflow-related Exceptions
class WorkflowTransitionException(CMSException):
    """Raised when an invalid state transition is attempted."""

    error_code = "ERR_INVALID_TRANSITION"
    default_message = "Invalid workflow transition attempted."
    status_code = 409


class SelfApprovalException(CMSException):
    """Raised when a user tries to approve or decide their own work."""

    error_code = "ERR_SELF_APPROVAL"
    default_message = "You cannot approve your own submission (Segregation of Duties)."
    status_code = 403


class UnauthorizedRoleException(CMSException):
    """Raised when a user lacks the required role for an action."""

    error_code = "ERR_UNAUTHORIZED_ROLE"
    default_message = "You do not have the required role to perform this action."
    status_code = 403


# Committee-related Exceptions
class SubmissionAlreadyDecidedException(CMSException):
    """Raised when a decision is submitted for a submission that is no longer pending."""

    error_code = "ERR_SUBMISSION_DECIDED"
    default_message = "This submission has already been decided."
    status_code = 409


class QuorumNotMetException(CMSException):
    """Raised when a meeting is completed without the required quorum."""

    error_code = "ERR_QUORUM_NOT_MET"
    default_message = "The committee quorum requirement has not been met."


# Beneficiary-related Exceptions
class BeneficiaryIneligibleException(CMSException):
    """Raised when a beneficiary fails programme eligibility rules."""

    error_code = "ERR_BENEFICIARY_INELIGIBLE"
    default_message = "The beneficiary does not meet the programme eligibility rules."


# Manpower-related Exceptions
class AllocationConflictException(CMSException):
    """Raised when a resource would be allocated beyond 100% for a period."""

    error_code = "ERR_ALLOCATION_CONFLICT"
    default_message = "The resource is already fully allocated for this period."
    status_code = 409


class ResourceUnavailableException(CMSException):
    """Raised when a resource is on leave or training for the requested period."""

    error_code = "ERR_RESOURCE_UNAVAILABLE"
    default_message = "The resource is not available for the requested period."
    status_code = 409


# KPI-related Exceptions
class KpiCollectorException(CMSException):
    """Raised when a metric refers to a collector that is not registered."""

    error_code = "ERR_KPI_COLLECTOR"
    default_message = "The metric has no registered data collector."


# Reporting-related Exceptions
class TemplateNotFoundException(CMSException):
    """Raised when a report template code is unknown or inactive."""

    error_code = "ERR_TEMPLATE_NOT_FOUND"
    default_message = "The requested report template was not found."
    status_code = 404


class ReportGenerationException(CMSException):
    """Raised when a report cannot be rendered in the requested format."""

    error_code = "ERR_REPORT_GENERATION"
    default_message = "The report could not be generated."


# Infrastructure Exceptions
class RetryExhaustedException(CMSException):
    """Raised by retry_with_backoff once every attempt has failed."""

    error_code = "ERR_RETRY_EXHAUSTED"
    default_message = "The operation failed after all retry attempts."
    status_code = 503
