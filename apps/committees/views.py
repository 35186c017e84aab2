"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Committee API views: committees, members, meetings,
             submissions, votes and decisions.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.forms.models import model_to_dict
from django.shortcuts import get_object_or_404
from django.utils import timezone

from apps.committees.forms import (
    CommitteeForm, CommitteeMemberForm, MeetingForm, AgendaItemForm, SubmissionForm, DecisionForm,
)
from apps.committees.models import (
    Committee, CommitteeMember, CommitteeMeeting, CommitteeSubmission, CommitteeDecision, AgendaItem,
    SubmissionStatus,
)
from apps.committees.services import CommitteeService
from apps.committees.workflows import get_valid_transitions, get_valid_meeting_transitions
from apps.core.api import ApiView, json_response, paginate, parse_date_param
from apps.core.exceptions import InvalidPayloadException, UnauthorizedRoleException
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.users.models import RoleCode


def serialize_committee(committee: Committee, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': committee.pk,
        'code': committee.code,
        'name_en': committee.name_en,
        'name_ar': committee.name_ar,
        'committee_type': committee.committee_type,
        'client_type': committee.client_type.code if committee.client_type else None,
        'chairperson': committee.chairperson.get_full_name() if committee.chairperson else None,
        'meeting_frequency': committee.meeting_frequency,
        'quorum_requirement': committee.quorum_requirement,
        'is_active': committee.is_active,
    }
    if detail:
        data.update({
            'description': committee.description,
            'formation_date': committee.formation_date,
            'dissolution_date': committee.dissolution_date,
            'members': [serialize_member(m) for m in committee.members.filter(is_active=True)
                        .select_related('user')],
            'pending_submissions': committee.submissions.filter(status=SubmissionStatus.PENDING).count(),
        })
    return data


def serialize_member(member: CommitteeMember) -> Dict[str, Any]:
    return {
        'id': member.pk,
        'user_id': member.user_id,
        'name': member.user.get_full_name(),
        'role_in_committee': member.role_in_committee,
        'position': member.position,
        'department': member.department,
        'join_date': member.join_date,
        'end_date': member.end_date,
        'voting_rights': member.voting_rights,
        'is_active': member.is_active,
    }


def serialize_agenda_item(item: AgendaItem) -> Dict[str, Any]:
    return {
        'id': item.pk,
        'order': item.order,
        'title': item.title,
        'description': item.description,
        'presenter': item.presenter.get_full_name() if item.presenter else None,
        'duration_minutes': item.duration_minutes,
        'status': item.status,
        'notes': item.notes,
        'submission_id': item.submission_id,
    }


def serialize_meeting(meeting: CommitteeMeeting, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': meeting.pk,
        'meeting_code': meeting.meeting_code,
        'committee': meeting.committee.code,
        'title': meeting.title,
        'meeting_date': meeting.meeting_date,
        'start_time': meeting.start_time,
        'end_time': meeting.end_time,
        'location': meeting.location,
        'is_virtual': meeting.is_virtual,
        'meeting_link': meeting.meeting_link,
        'status': meeting.status,
        'quorum_met': meeting.quorum_met,
    }
    if detail:
        data.update({
            'description': meeting.description,
            'minutes': meeting.minutes,
            'next_meeting_date': meeting.next_meeting_date,
            'attendees': [
                {'id': user.pk, 'name': user.get_full_name()} for user in meeting.attendees.all()
            ],
            'agenda_items': [serialize_agenda_item(i) for i in meeting.agenda_items.all()],
            'allowed_transitions': get_valid_meeting_transitions(meeting.status),
        })
    return data


def serialize_submission(submission: CommitteeSubmission, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': submission.pk,
        'committee': submission.committee.code,
        'title': submission.title,
        'submission_type': submission.submission_type,
        'priority': submission.priority,
        'status': submission.status,
        'submitted_by': submission.submitted_by.get_full_name(),
        'submitted_by_id': submission.submitted_by_id,
        'submission_date': submission.submission_date,
        'due_date': submission.due_date,
        'beneficiary': submission.beneficiary.beneficiary_code if submission.beneficiary else None,
        'client_type': submission.client_type.code if submission.client_type else None,
    }
    if detail:
        data.update({
            'description': submission.description,
            'related_entity_type': submission.related_entity_type,
            'related_entity_id': submission.related_entity_id,
            'metadata': submission.metadata,
            'votes': CommitteeService.tally_votes(submission),
            'allowed_transitions': get_valid_transitions(submission.status),
            'decisions': [serialize_decision(d) for d in submission.decisions.all()],
        })
    return data


def serialize_decision(decision: CommitteeDecision) -> Dict[str, Any]:
    return {
        'id': decision.pk,
        'committee': decision.committee.code,
        'meeting': decision.meeting.meeting_code if decision.meeting else None,
        'submission_id': decision.submission_id,
        'title': decision.title,
        'description': decision.description,
        'decision': decision.decision,
        'decision_date': decision.decision_date,
        'rationale': decision.rationale,
        'conditions': decision.conditions,
        'votes': {
            'for': decision.votes_for,
            'against': decision.votes_against,
            'abstain': decision.votes_abstain,
        },
        'follow_up_required': decision.follow_up_required,
        'follow_up_date': decision.follow_up_date,
        'follow_up_assignee': decision.follow_up_assignee.get_full_name()
        if decision.follow_up_assignee else None,
        'next_review_date': decision.next_review_date,
        'created_by': decision.created_by.get_full_name(),
        'created_at': decision.created_at,
    }


class CommitteeScopeMixin:
    """
    Scoped staff see committees of their client type and the generic ones.
    """

    def scope_committees(self, queryset):
        client_type = getattr(self.request, 'client_type', None)
        if client_type is None:
            return queryset
        return queryset.filter(Q(client_type=client_type) | Q(client_type__isnull=True))

    def get_committee(self, pk) -> Committee:
        queryset = self.scope_committees(Committee.objects.select_related('client_type', 'chairperson'))
        return get_object_or_404(queryset, pk=pk)

    def scope_submissions(self, queryset):
        client_type = getattr(self.request, 'client_type', None)
        if client_type is None:
            return queryset
        return queryset.filter(
            Q(client_type=client_type) | Q(client_type__isnull=True),
            Q(committee__client_type=client_type) | Q(committee__client_type__isnull=True)
        )

    def get_submission(self, pk) -> CommitteeSubmission:
        queryset = self.scope_submissions(CommitteeSubmission.objects.select_related(
            'committee', 'submitted_by', 'beneficiary', 'client_type'
        ))
        return get_object_or_404(queryset, pk=pk)

    def get_meeting(self, pk) -> CommitteeMeeting:
        queryset = CommitteeMeeting.objects.select_related('committee').filter(
            committee__in=self.scope_committees(Committee.objects.all())
        )
        return get_object_or_404(queryset, pk=pk)


# =====================================================================
# COMMITTEES
# =====================================================================

class CommitteeListView(CommitteeScopeMixin, ApiView):
    """GET: list committees (?committee_type, ?active). POST: create a committee."""

    write_roles = (RoleCode.PROGRAM_MANAGER,)

    def get(self, request):
        queryset = self.scope_committees(Committee.objects.select_related('client_type', 'chairperson'))
        committee_type = request.GET.get('committee_type')
        if committee_type:
            queryset = queryset.filter(committee_type=committee_type.upper())
        if request.GET.get('active') in ('1', 'true'):
            queryset = queryset.filter(is_active=True)
        return json_response(paginate(queryset, request, serialize_committee))

    def post(self, request):
        form = CommitteeForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        committee = form.save(commit=False)
        committee.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, committee,
                            description=f"Committee {committee.code} created")
        return json_response(serialize_committee(committee, detail=True), status=201)


class CommitteeDetailView(CommitteeScopeMixin, ApiView):

    write_roles = (RoleCode.PROGRAM_MANAGER,)

    def get(self, request, pk):
        return json_response(serialize_committee(self.get_committee(pk), detail=True))

    def patch(self, request, pk):
        committee = self.get_committee(pk)
        data = model_to_dict(committee, fields=CommitteeForm.Meta.fields)
        data['client_type'] = committee.client_type.code if committee.client_type else None
        data.update(self.get_json())
        form = CommitteeForm(data=data, instance=committee)
        if not form.is_valid():
            return self.form_errors(form)
        changed = form.changed_data
        committee = form.save(commit=False)
        committee.save_with_user(request.user)
        if changed:
            AuditService.record(request.user, AuditAction.UPDATED, committee, changes={'fields': changed})
        return json_response(serialize_committee(committee, detail=True))


class CommitteeMemberListView(CommitteeScopeMixin, ApiView):
    """GET: active members. POST: add a member (committee managers)."""

    def get(self, request, pk):
        committee = self.get_committee(pk)
        members = committee.members.select_related('user')
        if request.GET.get('include_inactive') not in ('1', 'true'):
            members = members.filter(is_active=True)
        return json_response({'results': [serialize_member(m) for m in members]})

    def post(self, request, pk):
        committee = self.get_committee(pk)
        CommitteeService.require_permission(request.user, committee, 'manage')
        form = CommitteeMemberForm(data=self.get_json(), committee=committee)
        if not form.is_valid():
            return self.form_errors(form)
        member = form.save(commit=False)
        member.committee = committee
        member.save()
        AuditService.record(
            request.user, AuditAction.CREATED, member,
            changes={'committee': committee.code, 'role': member.role_in_committee},
            description=f"{member.user.get_full_name()} added to {committee.code}"
        )
        return json_response(serialize_member(member), status=201)


class CommitteeMemberDetailView(CommitteeScopeMixin, ApiView):
    """DELETE ends the membership (kept for the voting history)."""

    def delete(self, request, pk, member_id):
        committee = self.get_committee(pk)
        CommitteeService.require_permission(request.user, committee, 'manage')
        member = get_object_or_404(CommitteeMember, pk=member_id, committee=committee)
        member.is_active = False
        member.end_date = member.end_date or timezone.localdate()
        member.save(update_fields=['is_active', 'end_date', 'updated_at'])
        AuditService.record(
            request.user, AuditAction.DEACTIVATED, member,
            description=f"{member.user.get_full_name()} removed from {committee.code}"
        )
        return json_response(serialize_member(member))


# =====================================================================
# MEETINGS
# =====================================================================

class CommitteeMeetingListView(CommitteeScopeMixin, ApiView):
    """GET: meetings of a committee (?status). POST: schedule a meeting."""

    def get(self, request, pk):
        committee = self.get_committee(pk)
        meetings = committee.meetings.select_related('committee')
        status = request.GET.get('status')
        if status:
            meetings = meetings.filter(status=status.upper())
        return json_response(paginate(meetings, request, serialize_meeting))

    def post(self, request, pk):
        committee = self.get_committee(pk)
        form = MeetingForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        meeting = CommitteeService.schedule_meeting(request.user, committee, **form.cleaned_data)
        return json_response(serialize_meeting(meeting, detail=True), status=201)


class MeetingDetailView(CommitteeScopeMixin, ApiView):

    def get(self, request, pk):
        return json_response(serialize_meeting(self.get_meeting(pk), detail=True))


class MeetingTransitionView(CommitteeScopeMixin, ApiView):
    """
    POST start / complete / cancel.

    Body (optional): {"attendees": [user ids], "minutes": "...",
    "next_meeting_date": "YYYY-MM-DD", "reason": "..."}
    """

    ACTIONS = ('start', 'complete', 'cancel')

    def post(self, request, pk, action):
        if action not in self.ACTIONS:
            raise InvalidPayloadException(
                f"Unknown meeting action '{action}'.", details={'allowed': list(self.ACTIONS)}
            )
        meeting = self.get_meeting(pk)
        data = self.get_json()

        attendees = None
        if 'attendees' in data:
            if not isinstance(data['attendees'], list):
                raise InvalidPayloadException("'attendees' must be a list of user ids.")
            attendees = list(get_user_model().objects.filter(pk__in=data['attendees']))

        if action == 'start':
            meeting = CommitteeService.start_meeting(request.user, meeting, attendees=attendees)
        elif action == 'complete':
            meeting = CommitteeService.complete_meeting(
                request.user, meeting,
                minutes=data.get('minutes', ''),
                attendees=attendees,
                next_meeting_date=parse_date_param(data.get('next_meeting_date'), 'next_meeting_date')
            )
        else:
            meeting = CommitteeService.cancel_meeting(request.user, meeting, reason=data.get('reason', ''))
        return json_response(serialize_meeting(meeting, detail=True))


class AgendaItemListView(CommitteeScopeMixin, ApiView):

    def get(self, request, pk):
        meeting = self.get_meeting(pk)
        return json_response({'results': [serialize_agenda_item(i) for i in meeting.agenda_items.all()]})

    def post(self, request, pk):
        meeting = self.get_meeting(pk)
        CommitteeService.require_permission(request.user, meeting.committee, 'manage')
        form = AgendaItemForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        item = form.save(commit=False)
        item.meeting = meeting
        if item.submission and item.submission.committee_id != meeting.committee_id:
            raise InvalidPayloadException("The submission belongs to a different committee.")
        item.save()
        return json_response(serialize_agenda_item(item), status=201)


# =====================================================================
# SUBMISSIONS AND DECISIONS
# =====================================================================

class SubmissionListView(CommitteeScopeMixin, ApiView):
    """
    GET: all submissions with the filters of CommitteeService.filter_submissions.
    POST: submit an item for committee review.
    """

    write_roles = (RoleCode.CASE_WORKER, RoleCode.ASSESSOR, RoleCode.PROGRAM_MANAGER,
                   RoleCode.FINANCE_OFFICER)

    def get(self, request):
        queryset = CommitteeService.filter_submissions(
            request.GET.dict(), self.scope_submissions(CommitteeSubmission.objects.all())
        )
        return json_response(paginate(queryset, request, serialize_submission))

    def post(self, request):
        form = SubmissionForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        submission = form.save(commit=False)
        if submission.beneficiary is not None:
            submission.client_type = submission.beneficiary.client_type
        else:
            submission.client_type = request.user.client_type or submission.committee.client_type
        if not request.user.can_access_client_type(submission.client_type) or \
                not request.user.can_access_client_type(submission.committee.client_type):
            raise UnauthorizedRoleException(
                "You cannot submit items for another client type.",
                details={'committee': submission.committee.code}
            )
        submission.submitted_by = request.user
        submission.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, submission,
                            description=f"Submitted to {submission.committee.code}")
        return json_response(serialize_submission(submission, detail=True), status=201)


class PendingSubmissionListView(CommitteeScopeMixin, ApiView):
    """Review queue: status defaults to PENDING."""

    def get(self, request):
        queryset = CommitteeService.get_pending_submissions(
            request.GET.dict(), self.scope_submissions(CommitteeSubmission.objects.all())
        )
        return json_response(paginate(queryset, request, serialize_submission))


class SubmissionDetailView(CommitteeScopeMixin, ApiView):

    def get(self, request, pk):
        return json_response(serialize_submission(self.get_submission(pk), detail=True))


class SubmissionVoteView(CommitteeScopeMixin, ApiView):
    """
    GET: vote tally and the individual votes.
    POST: {"vote": "FOR" | "AGAINST" | "ABSTAIN", "comments": "..."}
    """

    def get(self, request, pk):
        submission = self.get_submission(pk)
        votes = submission.votes.select_related('member__user')
        return json_response({
            'tally': CommitteeService.tally_votes(submission),
            'results': [
                {
                    'member': vote.member.user.get_full_name(),
                    'vote': vote.vote,
                    'comments': vote.comments,
                    'updated_at': vote.updated_at,
                }
                for vote in votes
            ],
        })

    def post(self, request, pk):
        submission = self.get_submission(pk)
        data = self.get_json()
        CommitteeService.record_vote(submission, request.user, data.get('vote'), data.get('comments', ''))
        return json_response({'tally': CommitteeService.tally_votes(submission)}, status=201)


class SubmissionDecisionView(CommitteeScopeMixin, ApiView):
    """
    POST a decision on a pending submission.

    Body: {"status": "APPROVED", "comments": "...", "conditions": "...",
    "meeting": <id>, "follow_up_required": true, "follow_up_date": "YYYY-MM-DD"}
    """

    def post(self, request, pk):
        submission = self.get_submission(pk)
        data = self.get_json()
        if isinstance(data.get('status'), str):
            data['status'] = data['status'].upper()
        form = DecisionForm(data=data)
        if not form.is_valid():
            return self.form_errors(form)

        decision = CommitteeService.submit_decision(
            request.user,
            submission.committee,
            submission.pk,
            **form.cleaned_data
        )
        return json_response(serialize_decision(decision), status=201)


class SubmissionReopenView(CommitteeScopeMixin, ApiView):
    """Return a deferred submission to the review queue."""

    def post(self, request, pk):
        submission = self.get_submission(pk)
        CommitteeService.require_permission(request.user, submission.committee, 'submit_decision')
        CommitteeService.reopen_submission(request.user, submission, self.get_json().get('reason', ''))
        return json_response(serialize_submission(submission, detail=True))


class DecisionListView(CommitteeScopeMixin, ApiView):
    """
    Committee decision list.

    Query parameters: committee, meeting, submission, decision,
    date_from, date_to, page, page_size.
    """

    def get(self, request):
        queryset = CommitteeService.list_decisions(
            request.GET.dict(),
            CommitteeDecision.objects.filter(
                committee__in=self.scope_committees(Committee.objects.all())
            )
        )
        return json_response(paginate(queryset, request, serialize_decision))
