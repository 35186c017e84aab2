"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for committee voting, decisions, meetings and
             the committee decision list API.
-------------------------------------------------------------------------
"""
import json
from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.beneficiaries.models import Beneficiary, BeneficiaryStatus
from apps.clients.models import ClientType
from apps.committees.models import (
    Committee, CommitteeMember, CommitteeSubmission, CommitteeDecision, MemberRole,
    SubmissionStatus, SubmissionType, SubmissionPriority, MeetingStatus,
)
from apps.committees.services import CommitteeService
from apps.core.exceptions import (
    SubmissionAlreadyDecidedException, SelfApprovalException, UnauthorizedRoleException,
    QuorumNotMetException, WorkflowTransitionException, InvalidPayloadException,
)
from apps.core.models import AuditLog, AuditAction, Notification, NotificationPriority


User = get_user_model()


class CommitteeTestMixin:
    """Creates a committee with a chair, a voting member, a non-voting secretary and a case worker."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')
        self.case_worker = self.make_user('784-1985-0000001-1', 'cw@test.ae', 'Case')
        self.chair = self.make_user('784-1970-0000002-2', 'chair@test.ae', 'Chair')
        self.member = self.make_user('784-1975-0000003-3', 'member@test.ae', 'Member')
        self.secretary = self.make_user('784-1980-0000004-4', 'sec@test.ae', 'Secretary')
        self.outsider = self.make_user('784-1990-0000005-5', 'out@test.ae', 'Outsider')

        self.committee = Committee.objects.create(
            code='ARC', name_en='Assessment Review Committee', quorum_requirement=2,
            chairperson=self.chair
        )
        CommitteeMember.objects.create(committee=self.committee, user=self.chair, role_in_committee=MemberRole.CHAIR)
        CommitteeMember.objects.create(committee=self.committee, user=self.member)
        CommitteeMember.objects.create(
            committee=self.committee, user=self.secretary,
            role_in_committee=MemberRole.SECRETARY, voting_rights=False
        )

        self.beneficiary = Beneficiary.objects.create(
            registration_date=date(2024, 1, 15),
            emirates_id='784-1950-1234567-1',
            full_name_en='Ahmed Al Mansoori',
            full_name_ar='أحمد المنصوري',
            date_of_birth=date(1950, 5, 1),
            gender='MALE',
            contact_number='050-123-4567',
            emirate='ABU_DHABI',
            client_type=self.fdf,
            status=BeneficiaryStatus.UNDER_ASSESSMENT,
        )
        self.submission = self.make_submission()

    def make_user(self, emirates_id, email, first_name):
        return User.objects.create_user(
            emirates_id=emirates_id, email=email, password='pass', first_name=first_name
        )

    def make_submission(self, **kwargs):
        data = {
            'committee': self.committee,
            'title': 'Home assessment for BEN-00001',
            'submission_type': SubmissionType.ASSESSMENT,
            'submitted_by': self.case_worker,
            'beneficiary': self.beneficiary,
            'client_type': self.fdf,
        }
        data.update(kwargs)
        return CommitteeSubmission.objects.create(**data)


class VotingTests(CommitteeTestMixin, TestCase):

    def test_tally_and_revote(self):
        CommitteeService.record_vote(self.submission, self.chair, 'for')
        CommitteeService.record_vote(self.submission, self.member, 'AGAINST', 'Budget too high')
        self.assertEqual(
            CommitteeService.tally_votes(self.submission),
            {'for': 1, 'against': 1, 'abstain': 0, 'total': 2}
        )

        CommitteeService.record_vote(self.submission, self.member, 'FOR')
        self.assertEqual(CommitteeService.tally_votes(self.submission)['for'], 2)
        self.assertEqual(self.submission.votes.count(), 2)

    def test_non_voting_member_cannot_vote(self):
        with self.assertRaises(UnauthorizedRoleException):
            CommitteeService.record_vote(self.submission, self.secretary, 'FOR')
        with self.assertRaises(UnauthorizedRoleException):
            CommitteeService.record_vote(self.submission, self.outsider, 'FOR')

    def test_unknown_vote(self):
        with self.assertRaises(InvalidPayloadException):
            CommitteeService.record_vote(self.submission, self.chair, 'MAYBE')

    def test_cannot_vote_on_decided_submission(self):
        self.submission.status = SubmissionStatus.APPROVED
        self.submission.save()
        with self.assertRaises(SubmissionAlreadyDecidedException):
            CommitteeService.record_vote(self.submission, self.chair, 'FOR')

    def test_permissions(self):
        self.assertTrue(CommitteeService.validate_permissions(self.chair, self.committee, 'submit_decision'))
        self.assertTrue(CommitteeService.validate_permissions(self.member, self.committee, 'submit_decision'))
        self.assertFalse(CommitteeService.validate_permissions(self.secretary, self.committee, 'submit_decision'))
        self.assertFalse(CommitteeService.validate_permissions(self.outsider, self.committee, 'submit_decision'))
        self.assertTrue(CommitteeService.validate_permissions(self.secretary, self.committee, 'manage'))
        self.assertFalse(CommitteeService.validate_permissions(self.member, self.committee, 'manage'))


class SubmitDecisionTests(CommitteeTestMixin, TestCase):

    def test_approve_assessment(self):
        CommitteeService.record_vote(self.submission, self.member, 'FOR')
        decision = CommitteeService.submit_decision(
            self.chair, self.committee, self.submission.pk, 'APPROVED', comments='Proceed with works'
        )

        self.assertEqual(decision.decision, 'APPROVED')
        self.assertEqual(decision.votes_for, 1)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, SubmissionStatus.APPROVED)

        # Assessment approval moves the beneficiary case forward
        self.beneficiary.refresh_from_db()
        self.assertEqual(self.beneficiary.status, BeneficiaryStatus.APPROVED)

        step = AuditLog.objects.get(action=AuditAction.WORKFLOW_STEP)
        self.assertEqual(step.changes['workflow_type'], 'assessment')
        self.assertEqual(step.changes['step'], 'committee_approved')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.DECIDED).exists())

        notice = Notification.objects.get(recipient=self.case_worker)
        self.assertEqual(notice.title, 'Your submission has been approved')
        self.assertEqual(notice.priority, NotificationPriority.MEDIUM)
        self.assertIn('Proceed with works', notice.message)
        # Other members hear about it, the decider does not
        self.assertTrue(Notification.objects.filter(recipient=self.member).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.secretary).exists())
        self.assertFalse(Notification.objects.filter(recipient=self.chair).exists())

    def test_reject_assessment_requires_revision(self):
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'rejected')
        step = AuditLog.objects.get(action=AuditAction.WORKFLOW_STEP)
        self.assertEqual(step.changes['step'], 'committee_rejected')
        self.assertTrue(step.changes['requires_revision'])
        notice = Notification.objects.get(recipient=self.case_worker)
        self.assertEqual(notice.priority, NotificationPriority.HIGH)
        self.beneficiary.refresh_from_db()
        self.assertEqual(self.beneficiary.status, BeneficiaryStatus.REJECTED)

    def test_generic_submission_step(self):
        submission = self.make_submission(submission_type=SubmissionType.OTHER, beneficiary=None)
        CommitteeService.submit_decision(self.chair, self.committee, submission.pk, 'DEFERRED')
        step = AuditLog.objects.get(action=AuditAction.WORKFLOW_STEP)
        self.assertEqual(step.changes['workflow_type'], 'committee_review')
        self.assertEqual(step.changes['step'], 'submission_deferred')

    def test_modified_decision_approves(self):
        decision = CommitteeService.submit_decision(
            self.chair, self.committee, self.submission.pk, 'MODIFIED', conditions='Ramp only'
        )
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, SubmissionStatus.APPROVED)
        self.assertEqual(decision.conditions, 'Ramp only')

    def test_already_decided(self):
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'APPROVED')
        with self.assertRaises(SubmissionAlreadyDecidedException) as ctx:
            CommitteeService.submit_decision(self.member, self.committee, self.submission.pk, 'REJECTED')
        self.assertEqual(ctx.exception.message, 'This submission has already been approved')
        self.assertEqual(CommitteeDecision.objects.count(), 1)

    def test_submitter_cannot_decide(self):
        submission = self.make_submission(submitted_by=self.member)
        with self.assertRaises(SelfApprovalException):
            CommitteeService.submit_decision(self.member, self.committee, submission.pk, 'APPROVED')

    def test_outsider_cannot_decide(self):
        with self.assertRaises(UnauthorizedRoleException):
            CommitteeService.submit_decision(self.outsider, self.committee, self.submission.pk, 'APPROVED')

    def test_deferred_must_be_reopened(self):
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'DEFERRED')
        with self.assertRaises(SubmissionAlreadyDecidedException):
            CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'APPROVED')

        self.submission.refresh_from_db()
        CommitteeService.reopen_submission(self.chair, self.submission, reason='More documents received')
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'APPROVED')
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, SubmissionStatus.APPROVED)
        self.assertEqual(self.submission.decisions.count(), 2)

        with self.assertRaises(WorkflowTransitionException):
            CommitteeService.reopen_submission(self.chair, self.submission)

    def test_decision_requires_quorum(self):
        meeting = CommitteeService.schedule_meeting(
            self.chair, self.committee, 'Monthly review', date(2024, 3, 4), time(10, 0)
        )
        CommitteeService.start_meeting(self.chair, meeting, attendees=[self.chair, self.secretary])
        with self.assertRaises(QuorumNotMetException):
            CommitteeService.submit_decision(
                self.chair, self.committee, self.submission.pk, 'APPROVED', meeting=meeting
            )

        meeting.attendees.add(self.member)
        decision = CommitteeService.submit_decision(
            self.chair, self.committee, self.submission.pk, 'APPROVED', meeting=meeting
        )
        self.assertEqual(decision.meeting, meeting)


class PendingSubmissionTests(CommitteeTestMixin, TestCase):

    def test_defaults_to_pending_and_orders_by_priority(self):
        high = self.make_submission(title='Urgent ramp', priority=SubmissionPriority.HIGH)
        low = self.make_submission(title='Garden path', priority=SubmissionPriority.LOW)
        decided = self.make_submission(title='Old case', status=SubmissionStatus.APPROVED)

        pending = list(CommitteeService.get_pending_submissions())
        self.assertEqual(pending, [high, self.submission, low])
        self.assertNotIn(decided, pending)

        approved = list(CommitteeService.get_pending_submissions({'status': 'approved'}))
        self.assertEqual(approved, [decided])

    def test_filters(self):
        budget = self.make_submission(title='Budget request', submission_type=SubmissionType.BUDGET)
        self.assertEqual(list(CommitteeService.get_pending_submissions({'submission_type': 'BUDGET'})), [budget])
        self.assertEqual(list(CommitteeService.get_pending_submissions({'search': 'budget'})), [budget])
        self.assertEqual(
            set(CommitteeService.get_pending_submissions({'status': 'PENDING,APPROVED'})),
            {self.submission, budget}
        )


class MeetingTests(CommitteeTestMixin, TestCase):

    def test_meeting_codes_and_lifecycle(self):
        first = CommitteeService.schedule_meeting(
            self.secretary, self.committee, 'March review', date(2024, 3, 4), time(10, 0)
        )
        second = CommitteeService.schedule_meeting(
            self.secretary, self.committee, 'April review', date(2024, 4, 1), time(10, 0)
        )
        self.assertEqual(first.meeting_code, 'MTG-ARC-0001')
        self.assertEqual(second.meeting_code, 'MTG-ARC-0002')

        CommitteeService.start_meeting(self.secretary, first, attendees=[self.chair, self.member])
        CommitteeService.complete_meeting(self.secretary, first, minutes='All items discussed')
        first.refresh_from_db()
        self.assertEqual(first.status, MeetingStatus.COMPLETED)
        self.assertTrue(first.quorum_met)

        with self.assertRaises(WorkflowTransitionException):
            CommitteeService.cancel_meeting(self.secretary, first)

        CommitteeService.cancel_meeting(self.secretary, second, reason='Public holiday')
        second.refresh_from_db()
        self.assertEqual(second.status, MeetingStatus.CANCELLED)

    def test_quorum_ignores_non_voting_attendees(self):
        meeting = CommitteeService.schedule_meeting(
            self.chair, self.committee, 'Review', date(2024, 3, 4), time(10, 0)
        )
        meeting.attendees.set([self.chair, self.secretary, self.outsider])
        self.assertFalse(CommitteeService.check_quorum(meeting))

    def test_member_cannot_schedule(self):
        with self.assertRaises(UnauthorizedRoleException):
            CommitteeService.schedule_meeting(self.member, self.committee, 'Review', date(2024, 3, 4), time(10, 0))


class CommitteeDecisionListApiTests(CommitteeTestMixin, TestCase):
    """Behaviour of the committee decision list endpoint."""

    def setUp(self):
        super().setUp()
        self.client.force_login(self.chair)
        self.url = reverse('committees:decision_list')

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 401)

    def test_empty_list(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['count'], 0)
        self.assertEqual(body['results'], [])

    def test_list_returns_decisions(self):
        CommitteeService.submit_decision(
            self.chair, self.committee, self.submission.pk, 'APPROVED', comments='Approved as assessed'
        )
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['results'][0]['decision'], 'APPROVED')
        self.assertEqual(body['results'][0]['committee'], 'ARC')
        self.assertEqual(body['results'][0]['description'], 'Approved as assessed')

    def test_error_body(self):
        response = self.client.get(self.url, {'date_from': 'not-a-date'})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body['error_code'], 'ERR_INVALID_PAYLOAD')
        self.assertEqual(body['details']['field'], 'date_from')

    def test_non_numeric_ids_are_rejected(self):
        for field in ('meeting', 'submission'):
            with self.subTest(field=field):
                response = self.client.get(self.url, {field: 'abc'})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')
                self.assertEqual(response.json()['details']['field'], field)

    def test_filter_by_submission(self):
        other = self.make_submission(title='Second')
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'APPROVED')
        CommitteeService.submit_decision(self.chair, self.committee, other.pk, 'REJECTED')
        response = self.client.get(self.url, {'submission': str(other.pk)})
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['results'][0]['decision'], 'REJECTED')

    def test_requery_returns_new_decisions(self):
        response = self.client.get(self.url)
        self.assertEqual(response.json()['count'], 0)

        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'REJECTED')
        response = self.client.get(self.url)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['results'][0]['decision'], 'REJECTED')

    def test_filter_by_decision(self):
        other = self.make_submission(title='Second')
        CommitteeService.submit_decision(self.chair, self.committee, self.submission.pk, 'APPROVED')
        CommitteeService.submit_decision(self.chair, self.committee, other.pk, 'DEFERRED')
        response = self.client.get(self.url, {'decision': 'deferred'})
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['results'][0]['submission_id'], other.pk)


class SubmissionApiTests(CommitteeTestMixin, TestCase):

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_decision_endpoint(self):
        self.client.force_login(self.chair)
        url = reverse('committees:submission_decision', args=[self.submission.pk])
        response = self.post_json(url, {'status': 'approved', 'comments': 'OK'})
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['decision'], 'APPROVED')

        response = self.post_json(url, {'status': 'REJECTED'})
        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertEqual(body['error_code'], 'ERR_SUBMISSION_DECIDED')
        self.assertEqual(body['message'], 'This submission has already been approved')

    def test_decision_validation(self):
        self.client.force_login(self.chair)
        url = reverse('committees:submission_decision', args=[self.submission.pk])
        response = self.post_json(url, {'status': 'MAYBE'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('status', response.json()['details'])

    def test_self_decision_forbidden(self):
        submission = self.make_submission(submitted_by=self.chair)
        self.client.force_login(self.chair)
        response = self.post_json(
            reverse('committees:submission_decision', args=[submission.pk]), {'status': 'APPROVED'}
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error_code'], 'ERR_SELF_APPROVAL')

    def test_vote_endpoint(self):
        self.client.force_login(self.member)
        url = reverse('committees:submission_votes', args=[self.submission.pk])
        response = self.post_json(url, {'vote': 'FOR'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['tally']['for'], 1)

        response = self.client.get(url)
        self.assertEqual(response.json()['results'][0]['vote'], 'FOR')

    def test_pending_queue(self):
        self.client.force_login(self.member)
        response = self.client.get(reverse('committees:submission_pending'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['results'][0]['beneficiary'], self.beneficiary.beneficiary_code)

    def test_pending_queue_rejects_non_numeric_ids(self):
        self.client.force_login(self.member)
        url = reverse('committees:submission_pending')
        for field in ('beneficiary', 'submitted_by'):
            with self.subTest(field=field):
                response = self.client.get(url, {field: 'abc'})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['details']['field'], field)

        response = self.client.get(url, {'beneficiary': str(self.beneficiary.pk)})
        self.assertEqual(response.json()['count'], 1)
