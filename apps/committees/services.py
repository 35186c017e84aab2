"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Committee business logic: submission review queue, voting,
             quorum, decisions with their workflow follow-ups and
             notifications, and meeting scheduling.
-------------------------------------------------------------------------
"""
from datetime import date, time
from typing import Any, Dict, Iterable, Optional

from django.db import transaction
from django.db.models import Case, IntegerField, Q, Value, When

from apps.beneficiaries import workflows as beneficiary_workflows
from apps.beneficiaries.models import BeneficiaryStatus
from apps.committees.logging import CommitteeLogger
from apps.committees.models import (
    Committee, CommitteeMember, CommitteeMeeting, CommitteeSubmission,
    CommitteeDecision, SubmissionVote, SubmissionStatus, SubmissionType,
    SubmissionPriority, MeetingStatus, MemberRole, VoteChoice,
)
from apps.committees.workflows import (
    can_transition, get_valid_transitions, submission_status_for, validate_meeting_transition,
)
from apps.core.api import parse_date_param, parse_int_param
from apps.core.exceptions import (
    InvalidPayloadException, QuorumNotMetException, RecordNotFoundException,
    SubmissionAlreadyDecidedException, UnauthorizedRoleException,
    WorkflowTransitionException,
)
from apps.core.models import AuditAction, NotificationCategory, NotificationPriority
from apps.core.services import AuditService, NotificationService
from apps.users.permissions import check_segregation_of_duties

# Workflow follow-ups per submission type: (workflow type, {submission status: step})
WORKFLOW_STEPS = {
    SubmissionType.ASSESSMENT: ('assessment', {
        SubmissionStatus.APPROVED: 'committee_approved',
        SubmissionStatus.REJECTED: 'committee_rejected',
    }),
    SubmissionType.BUDGET: ('budget', {
        SubmissionStatus.APPROVED: 'budget_approved',
        SubmissionStatus.REJECTED: 'budget_rejected',
    }),
    SubmissionType.PROJECT: ('project', {
        SubmissionStatus.APPROVED: 'project_approved',
        SubmissionStatus.REJECTED: 'project_rejected',
    }),
}

# Beneficiary case status that follows an assessment decision
ASSESSMENT_BENEFICIARY_STATUS = {
    SubmissionStatus.APPROVED: BeneficiaryStatus.APPROVED,
    SubmissionStatus.REJECTED: BeneficiaryStatus.REJECTED,
}

DECISION_MESSAGES = {
    SubmissionStatus.APPROVED: "Your submission has been approved by the committee.",
    SubmissionStatus.REJECTED: "Your submission has been rejected by the committee.",
    SubmissionStatus.DEFERRED: "Your submission has been deferred for further review.",
}

PRIORITY_ORDER = Case(
    When(priority=SubmissionPriority.HIGH, then=Value(0)),
    When(priority=SubmissionPriority.MEDIUM, then=Value(1)),
    When(priority=SubmissionPriority.LOW, then=Value(2)),
    default=Value(3),
    output_field=IntegerField(),
)


def _as_list(value) -> list:
    if value in (None, ''):
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).upper() for v in value if v not in (None, '')]
    return [part.strip().upper() for part in str(value).split(',') if part.strip()]


class CommitteeService:
    """
    Service class for committee operations.

    All methods are static and can be called without instantiation.
    """

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    @staticmethod
    def filter_submissions(filters: Dict[str, Any], queryset=None):
        """
        Filter submissions.

        Args:
            filters: Mapping with any of committee, status (single value, list
                or comma-separated), submission_type, priority, client_type,
                beneficiary, submitted_by, submitted_from, submitted_to,
                due_from, due_to, search.
            queryset: Base queryset (default: all submissions).

        Returns:
            Queryset ordered by priority (HIGH first) then oldest submission first.
        """
        if queryset is None:
            queryset = CommitteeSubmission.objects.all()
        queryset = queryset.select_related('committee', 'submitted_by', 'beneficiary', 'client_type')

        if filters.get('committee'):
            committee = str(filters['committee'])
            if committee.isdigit():
                queryset = queryset.filter(committee_id=int(committee))
            else:
                queryset = queryset.filter(committee__code=committee)

        statuses = _as_list(filters.get('status'))
        if statuses:
            queryset = queryset.filter(status__in=statuses)

        for field, key in (('submission_type', 'submission_type'), ('priority', 'priority')):
            values = _as_list(filters.get(key))
            if values:
                queryset = queryset.filter(**{f'{field}__in': values})

        client_type = filters.get('client_type')
        if client_type:
            if str(client_type).isdigit():
                queryset = queryset.filter(client_type__type_id=int(client_type))
            else:
                queryset = queryset.filter(client_type__code=str(client_type).upper())

        if filters.get('beneficiary'):
            queryset = queryset.filter(beneficiary_id=parse_int_param(filters['beneficiary'], 'beneficiary'))
        if filters.get('submitted_by'):
            queryset = queryset.filter(submitted_by_id=parse_int_param(filters['submitted_by'], 'submitted_by'))

        submitted_from = parse_date_param(filters.get('submitted_from'), 'submitted_from')
        submitted_to = parse_date_param(filters.get('submitted_to'), 'submitted_to')
        due_from = parse_date_param(filters.get('due_from'), 'due_from')
        due_to = parse_date_param(filters.get('due_to'), 'due_to')
        if submitted_from:
            queryset = queryset.filter(submission_date__date__gte=submitted_from)
        if submitted_to:
            queryset = queryset.filter(submission_date__date__lte=submitted_to)
        if due_from:
            queryset = queryset.filter(due_date__gte=due_from)
        if due_to:
            queryset = queryset.filter(due_date__lte=due_to)

        search = (filters.get('search') or '').strip()
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) |
                Q(description__icontains=search) |
                Q(beneficiary__full_name_en__icontains=search) |
                Q(beneficiary__beneficiary_code__icontains=search)
            )

        return queryset.order_by(PRIORITY_ORDER, 'submission_date', 'id')

    @staticmethod
    def get_pending_submissions(filters: Optional[Dict[str, Any]] = None, queryset=None):
        """
        Submissions awaiting review.

        The status filter defaults to PENDING when not given.
        """
        filters = dict(filters or {})
        if not filters.get('status'):
            filters['status'] = SubmissionStatus.PENDING
        return CommitteeService.filter_submissions(filters, queryset)

    @staticmethod
    def get_submission(submission_id, committee: Optional[Committee] = None,
                       for_update: bool = False) -> CommitteeSubmission:
        """
        Raises:
            RecordNotFoundException: If the submission does not exist.
        """
        queryset = CommitteeSubmission.objects.select_related('committee', 'submitted_by', 'beneficiary')
        if for_update:
            queryset = queryset.select_for_update()
        if committee is not None:
            queryset = queryset.filter(committee=committee)
        try:
            return queryset.get(pk=submission_id)
        except (CommitteeSubmission.DoesNotExist, ValueError):
            raise RecordNotFoundException(
                "Submission not found.",
                details={'submission_id': submission_id}
            )

    @staticmethod
    @transaction.atomic
    def reopen_submission(user, submission: CommitteeSubmission, reason: str = '') -> CommitteeSubmission:
        """
        Return a deferred submission to the review queue.

        Raises:
            WorkflowTransitionException: If the submission is not DEFERRED.
        """
        old_status = submission.status
        if not can_transition(old_status, SubmissionStatus.PENDING):
            raise WorkflowTransitionException(
                f"Invalid transition from {old_status} to {SubmissionStatus.PENDING}.",
                details={'current_status': old_status, 'allowed': get_valid_transitions(old_status)}
            )
        submission.status = SubmissionStatus.PENDING
        submission.save_with_user(user, update_fields=['status', 'updated_at', 'updated_by'])
        AuditService.record_status_change(user, submission, old_status, submission.status, reason=reason)
        return submission

    # ------------------------------------------------------------------
    # Permissions and voting
    # ------------------------------------------------------------------

    @staticmethod
    def get_membership(user, committee: Committee) -> Optional[CommitteeMember]:
        return CommitteeMember.objects.filter(
            committee=committee, user=user, is_active=True
        ).first()

    @staticmethod
    def validate_permissions(user, committee: Committee, action: str = 'submit_decision') -> bool:
        """
        Check whether a user may act for a committee.

        Args:
            user: The acting user.
            committee: The committee.
            action: 'submit_decision' and 'vote' need an active voting member
                or the chair; 'manage' needs the chair or secretary, or a
                programme manager.

        Returns:
            True if permitted. Super admins are always permitted.
        """
        if user.is_super_admin():
            return True

        membership = CommitteeService.get_membership(user, committee)
        if action == 'manage':
            if user.is_program_manager():
                return True
            return membership is not None and membership.role_in_committee in (
                MemberRole.CHAIR, MemberRole.SECRETARY
            )

        if membership is None:
            return False
        return membership.voting_rights or membership.is_chair

    @staticmethod
    def require_permission(user, committee: Committee, action: str) -> None:
        """
        Raises:
            UnauthorizedRoleException: If validate_permissions fails.
        """
        if not CommitteeService.validate_permissions(user, committee, action):
            CommitteeLogger.log_permission_denied(user, committee, action)
            if action == 'submit_decision':
                message = "You don't have permission to submit decisions for this committee."
            else:
                message = f"You don't have permission to {action.replace('_', ' ')} for this committee."
            raise UnauthorizedRoleException(
                message,
                details={'committee': committee.code, 'action': action}
            )

    @staticmethod
    @transaction.atomic
    def record_vote(submission: CommitteeSubmission, user, vote: str, comments: str = '') -> SubmissionVote:
        """
        Record or update the vote of a member on a pending submission.

        Raises:
            UnauthorizedRoleException: If the user is not a voting member.
            SubmissionAlreadyDecidedException: If the submission is not PENDING.
            InvalidPayloadException: If the vote value is unknown.
        """
        vote = str(vote or '').upper()
        if vote not in VoteChoice.values:
            raise InvalidPayloadException(
                f"Unknown vote '{vote}'.",
                details={'allowed': list(VoteChoice.values)}
            )

        membership = CommitteeService.get_membership(user, submission.committee)
        if membership is None or not membership.voting_rights:
            CommitteeLogger.log_permission_denied(user, submission.committee, 'vote')
            raise UnauthorizedRoleException(
                "Only voting members of this committee can vote.",
                details={'committee': submission.committee.code}
            )

        if submission.status != SubmissionStatus.PENDING:
            raise SubmissionAlreadyDecidedException(
                f"This submission has already been {submission.status.lower()}",
                details={'status': submission.status}
            )

        record, _created = SubmissionVote.objects.update_or_create(
            submission=submission,
            member=membership,
            defaults={'vote': vote, 'comments': comments or ''}
        )
        CommitteeLogger.log_vote(record, user)
        return record

    @staticmethod
    def tally_votes(submission: CommitteeSubmission) -> Dict[str, int]:
        """Count votes on a submission by choice."""
        counts = {choice: 0 for choice in VoteChoice.values}
        for vote in submission.votes.values_list('vote', flat=True):
            counts[vote] = counts.get(vote, 0) + 1
        return {
            'for': counts[VoteChoice.FOR],
            'against': counts[VoteChoice.AGAINST],
            'abstain': counts[VoteChoice.ABSTAIN],
            'total': sum(counts.values()),
        }

    @staticmethod
    def check_quorum(meeting: CommitteeMeeting) -> bool:
        """Attendees who are active voting members must reach the quorum requirement."""
        present = meeting.committee.voting_members().filter(
            user__in=meeting.attendees.all()
        ).count()
        return present >= meeting.committee.quorum_requirement

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def submit_decision(
        user,
        committee: Committee,
        submission_id,
        status: str,
        comments: str = '',
        conditions: str = '',
        rationale: str = '',
        title: str = '',
        meeting: Optional[CommitteeMeeting] = None,
        follow_up_required: bool = False,
        follow_up_date: Optional[date] = None,
        follow_up_assignee=None,
        next_review_date: Optional[date] = None,
    ) -> CommitteeDecision:
        """
        Record a committee decision on a pending submission.

        Steps:
            1. The user must be allowed to decide for the committee.
            2. The submission must exist and still be PENDING.
            3. The submitter cannot decide their own submission.
            4. The decision is stored with the current vote tally and the
               submission moves to the matching status.
            5. Workflow follow-ups run, the submitter and committee members
               are notified and the event is logged.

        Args:
            user: User submitting the decision.
            committee: Committee taking the decision.
            submission_id: Primary key of the submission.
            status: DecisionValue (APPROVED, REJECTED, DEFERRED, MODIFIED).
            comments: Description stored on the decision and sent to the submitter.

        Returns:
            The created CommitteeDecision.

        Raises:
            UnauthorizedRoleException: If the user cannot decide for the committee.
            RecordNotFoundException: If the submission does not belong to the committee.
            SubmissionAlreadyDecidedException: If the submission is not PENDING.
            SelfApprovalException: If the user submitted the submission.
            QuorumNotMetException: If the meeting did not reach quorum.
        """
        CommitteeService.require_permission(user, committee, 'submit_decision')

        submission = CommitteeService.get_submission(submission_id, committee, for_update=True)
        if submission.status != SubmissionStatus.PENDING:
            raise SubmissionAlreadyDecidedException(
                f"This submission has already been {submission.status.lower()}",
                details={'submission_id': submission.pk, 'status': submission.status}
            )

        check_segregation_of_duties(submission.submitted_by_id, user.id, action="decide")

        decision_value = str(status or '').upper()
        new_status = submission_status_for(decision_value)

        if meeting is not None:
            if meeting.committee_id != committee.pk:
                raise InvalidPayloadException(
                    "The meeting belongs to a different committee.",
                    details={'meeting': meeting.meeting_code}
                )
            quorum = meeting.quorum_met if meeting.status == MeetingStatus.COMPLETED \
                else CommitteeService.check_quorum(meeting)
            if not quorum:
                raise QuorumNotMetException(
                    f"Meeting {meeting.meeting_code} did not reach quorum.",
                    details={'quorum_requirement': committee.quorum_requirement}
                )

        tally = CommitteeService.tally_votes(submission)
        decision = CommitteeDecision.objects.create(
            committee=committee,
            meeting=meeting,
            submission=submission,
            title=title or submission.title,
            description=comments or '',
            decision=decision_value,
            rationale=rationale or '',
            conditions=conditions or '',
            votes_for=tally['for'],
            votes_against=tally['against'],
            votes_abstain=tally['abstain'],
            follow_up_required=follow_up_required,
            follow_up_date=follow_up_date,
            follow_up_assignee=follow_up_assignee,
            next_review_date=next_review_date,
            created_by=user,
        )

        old_status = submission.status
        submission.status = new_status
        submission.save_with_user(user, update_fields=['status', 'updated_at', 'updated_by'])
        AuditService.record(
            user,
            AuditAction.DECIDED,
            submission,
            changes={
                'from': old_status,
                'to': new_status,
                'decision': decision_value,
                'decision_id': decision.pk,
                'votes': tally,
            },
            description=f"{old_status} -> {new_status}"
        )

        CommitteeService.trigger_workflow_steps(user, submission, new_status, decision)
        CommitteeService.send_decision_notifications(user, submission, new_status, comments)
        CommitteeLogger.log_decision(decision, user)
        return decision

    @staticmethod
    def trigger_workflow_steps(user, submission: CommitteeSubmission, status: str,
                               decision: CommitteeDecision) -> Optional[str]:
        """
        Run the follow-up of a decision for the submission type.

        Returns:
            The workflow step name, or None when the decision has no follow-up.
        """
        if submission.submission_type in WORKFLOW_STEPS:
            workflow_type, steps = WORKFLOW_STEPS[submission.submission_type]
            step = steps.get(status)
        else:
            workflow_type, step = 'committee_review', f"submission_{status.lower()}"

        if step is None:
            return None

        data = {
            'workflow_type': workflow_type,
            'step': step,
            'entity_id': submission.workflow_entity_id,
            'submission_id': submission.pk,
            'decision_id': decision.pk,
        }
        if submission.submission_type == SubmissionType.ASSESSMENT and status == SubmissionStatus.REJECTED:
            data['requires_revision'] = True

        AuditService.record(
            user, AuditAction.WORKFLOW_STEP, submission,
            changes=data,
            description=f"{workflow_type}.{step}"
        )
        CommitteeLogger.log_workflow_step(submission, workflow_type, step)

        beneficiary = submission.beneficiary
        target = ASSESSMENT_BENEFICIARY_STATUS.get(status)
        if (submission.submission_type == SubmissionType.ASSESSMENT and beneficiary is not None
                and target and beneficiary_workflows.can_transition(beneficiary.status, target)):
            beneficiary_workflows.change_status(
                beneficiary, target, user,
                reason=f"Committee decision on submission {submission.pk}",
                source='committee_decision'
            )
        return step

    @staticmethod
    def send_decision_notifications(user, submission: CommitteeSubmission, status: str,
                                    comments: str = '') -> None:
        """Notify the submitter and the other committee members."""
        link = f"/api/committees/submissions/{submission.pk}/"
        message = DECISION_MESSAGES.get(status, '')
        if comments:
            message = f"{message}\n\n{comments}"

        NotificationService.send_notification(
            recipient=submission.submitted_by,
            title=f"Your submission has been {status.lower()}",
            message=message,
            link=link,
            category=NotificationCategory.WORKFLOW,
            icon='bi-clipboard-check',
            priority=NotificationPriority.HIGH if status == SubmissionStatus.REJECTED
            else NotificationPriority.MEDIUM
        )

        members = [
            m.user for m in submission.committee.members.filter(is_active=True).select_related('user')
            if m.user_id not in (submission.submitted_by_id, user.id)
        ]
        NotificationService.send_bulk_notification(
            members,
            title=f"Committee decision: {submission.title} - {status.lower()}",
            message=f"A committee decision has been made regarding {submission.title}.",
            link=link,
            category=NotificationCategory.WORKFLOW,
            icon='bi-people'
        )

    @staticmethod
    def list_decisions(filters: Optional[Dict[str, Any]] = None, queryset=None):
        """
        Filter decisions by committee, meeting, submission, decision value
        and decision date range. Newest first.
        """
        filters = filters or {}
        if queryset is None:
            queryset = CommitteeDecision.objects.all()
        queryset = queryset.select_related('committee', 'meeting', 'submission', 'created_by')

        if filters.get('committee'):
            committee = str(filters['committee'])
            if committee.isdigit():
                queryset = queryset.filter(committee_id=int(committee))
            else:
                queryset = queryset.filter(committee__code=committee)
        if filters.get('meeting'):
            queryset = queryset.filter(meeting_id=parse_int_param(filters['meeting'], 'meeting'))
        if filters.get('submission'):
            queryset = queryset.filter(submission_id=parse_int_param(filters['submission'], 'submission'))

        decisions = _as_list(filters.get('decision'))
        if decisions:
            queryset = queryset.filter(decision__in=decisions)

        date_from = parse_date_param(filters.get('date_from'), 'date_from')
        date_to = parse_date_param(filters.get('date_to'), 'date_to')
        if date_from:
            queryset = queryset.filter(decision_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(decision_date__lte=date_to)

        return queryset.order_by('-decision_date', '-created_at', '-id')

    # ------------------------------------------------------------------
    # Meetings
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def schedule_meeting(
        user,
        committee: Committee,
        title: str,
        meeting_date: date,
        start_time: time,
        end_time: Optional[time] = None,
        location: str = '',
        is_virtual: bool = False,
        meeting_link: str = '',
        description: str = '',
    ) -> CommitteeMeeting:
        """
        Schedule a meeting and notify the active members.

        Raises:
            UnauthorizedRoleException: If the user cannot manage the committee.
            InvalidPayloadException: If the end time is before the start time.
        """
        CommitteeService.require_permission(user, committee, 'manage')
        if end_time and end_time <= start_time:
            raise InvalidPayloadException(
                "The end time must be after the start time.",
                details={'start_time': str(start_time), 'end_time': str(end_time)}
            )

        meeting = CommitteeMeeting(
            committee=committee,
            title=title,
            description=description,
            meeting_date=meeting_date,
            start_time=start_time,
            end_time=end_time,
            location=location,
            is_virtual=is_virtual,
            meeting_link=meeting_link,
        )
        meeting.save_with_user(user)
        AuditService.record(user, AuditAction.CREATED, meeting,
                            description=f"Meeting {meeting.meeting_code} scheduled")

        NotificationService.send_bulk_notification(
            [m.user for m in committee.members.filter(is_active=True).select_related('user')],
            title=f"Meeting scheduled: {meeting.title}",
            message=f"{committee.name_en} meets on {meeting_date.isoformat()} at {start_time.strftime('%H:%M')}.",
            link=f"/api/committees/meetings/{meeting.pk}/",
            icon='bi-calendar-event'
        )
        return meeting

    @staticmethod
    def _transition_meeting(user, meeting: CommitteeMeeting, target_status: str,
                            extra_fields: Iterable[str] = ()) -> CommitteeMeeting:
        old_status = meeting.status
        meeting.status = target_status
        meeting.save_with_user(user, update_fields=['status', 'updated_at', 'updated_by', *extra_fields])
        AuditService.record_status_change(user, meeting, old_status, target_status)
        CommitteeLogger.log_meeting_status(meeting, user, old_status)
        return meeting

    @staticmethod
    @transaction.atomic
    def start_meeting(user, meeting: CommitteeMeeting, attendees=None) -> CommitteeMeeting:
        CommitteeService.require_permission(user, meeting.committee, 'manage')
        validate_meeting_transition(meeting, MeetingStatus.IN_PROGRESS)
        if attendees is not None:
            meeting.attendees.set(attendees)
        return CommitteeService._transition_meeting(user, meeting, MeetingStatus.IN_PROGRESS)

    @staticmethod
    @transaction.atomic
    def complete_meeting(user, meeting: CommitteeMeeting, minutes: str = '', attendees=None,
                         next_meeting_date: Optional[date] = None) -> CommitteeMeeting:
        """Close a meeting, recording whether quorum was met."""
        CommitteeService.require_permission(user, meeting.committee, 'manage')
        validate_meeting_transition(meeting, MeetingStatus.COMPLETED)
        if attendees is not None:
            meeting.attendees.set(attendees)
        meeting.minutes = minutes or meeting.minutes
        meeting.next_meeting_date = next_meeting_date or meeting.next_meeting_date
        meeting.quorum_met = CommitteeService.check_quorum(meeting)
        return CommitteeService._transition_meeting(
            user, meeting, MeetingStatus.COMPLETED,
            extra_fields=['minutes', 'next_meeting_date', 'quorum_met']
        )

    @staticmethod
    @transaction.atomic
    def cancel_meeting(user, meeting: CommitteeMeeting, reason: str = '') -> CommitteeMeeting:
        CommitteeService.require_permission(user, meeting.committee, 'manage')
        validate_meeting_transition(meeting, MeetingStatus.CANCELLED)
        if reason:
            meeting.minutes = f"Cancelled: {reason}"
        meeting = CommitteeService._transition_meeting(
            user, meeting, MeetingStatus.CANCELLED, extra_fields=['minutes']
        )
        NotificationService.send_bulk_notification(
            [m.user for m in meeting.committee.members.filter(is_active=True).select_related('user')],
            title=f"Meeting cancelled: {meeting.title}",
            message=reason or f"Meeting {meeting.meeting_code} has been cancelled.",
            link=f"/api/committees/meetings/{meeting.pk}/",
            icon='bi-calendar-x'
        )
        return meeting
