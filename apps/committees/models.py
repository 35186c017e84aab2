"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Committee models: committees and their members, meetings
             with agenda items, submissions for review, votes and the
             decisions taken on submissions.
-------------------------------------------------------------------------
"""
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, ClientScopedMixin, TimeStampedMixin
from apps.core.utils import next_sequence_code


class CommitteeType(models.TextChoices):
    ASSESSMENT_REVIEW = 'ASSESSMENT_REVIEW', _('Assessment Review')
    FUNDING = 'FUNDING', _('Funding')
    PROJECT_APPROVAL = 'PROJECT_APPROVAL', _('Project Approval')
    GENERAL = 'GENERAL', _('General')


class MeetingFrequency(models.TextChoices):
    WEEKLY = 'WEEKLY', _('Weekly')
    BIWEEKLY = 'BIWEEKLY', _('Bi-weekly')
    MONTHLY = 'MONTHLY', _('Monthly')
    QUARTERLY = 'QUARTERLY', _('Quarterly')
    AD_HOC = 'AD_HOC', _('As Needed')


class MemberRole(models.TextChoices):
    CHAIR = 'CHAIR', _('Chair')
    SECRETARY = 'SECRETARY', _('Secretary')
    MEMBER = 'MEMBER', _('Member')


class MeetingStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', _('Scheduled')
    IN_PROGRESS = 'IN_PROGRESS', _('In Progress')
    COMPLETED = 'COMPLETED', _('Completed')
    CANCELLED = 'CANCELLED', _('Cancelled')


class AgendaItemStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    DISCUSSED = 'DISCUSSED', _('Discussed')
    DEFERRED = 'DEFERRED', _('Deferred')


class SubmissionType(models.TextChoices):
    ASSESSMENT = 'ASSESSMENT', _('Assessment')
    BUDGET = 'BUDGET', _('Budget')
    PROJECT = 'PROJECT', _('Project')
    OTHER = 'OTHER', _('Other')


class SubmissionPriority(models.TextChoices):
    HIGH = 'HIGH', _('High')
    MEDIUM = 'MEDIUM', _('Medium')
    LOW = 'LOW', _('Low')


class SubmissionStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    APPROVED = 'APPROVED', _('Approved')
    REJECTED = 'REJECTED', _('Rejected')
    DEFERRED = 'DEFERRED', _('Deferred')


class DecisionValue(models.TextChoices):
    APPROVED = 'APPROVED', _('Approved')
    REJECTED = 'REJECTED', _('Rejected')
    DEFERRED = 'DEFERRED', _('Deferred')
    MODIFIED = 'MODIFIED', _('Approved with Modifications')


class VoteChoice(models.TextChoices):
    FOR = 'FOR', _('For')
    AGAINST = 'AGAINST', _('Against')
    ABSTAIN = 'ABSTAIN', _('Abstain')


class Committee(AuditLogMixin, StatusMixin, ClientScopedMixin):
    """
    Review body that approves or rejects submissions.

    A committee without a client type reviews submissions of every
    client type.
    """

    code = models.CharField(
        max_length=20,
        unique=True,
        verbose_name=_('Committee Code')
    )
    name_en = models.CharField(max_length=200, verbose_name=_('Name (English)'))
    name_ar = models.CharField(max_length=200, blank=True, verbose_name=_('Name (Arabic)'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    committee_type = models.CharField(
        max_length=20,
        choices=CommitteeType.choices,
        default=CommitteeType.GENERAL,
        verbose_name=_('Committee Type')
    )
    chairperson = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='chaired_committees',
        verbose_name=_('Chairperson')
    )
    formation_date = models.DateField(default=timezone.localdate, verbose_name=_('Formation Date'))
    dissolution_date = models.DateField(null=True, blank=True, verbose_name=_('Dissolution Date'))
    meeting_frequency = models.CharField(
        max_length=20,
        choices=MeetingFrequency.choices,
        default=MeetingFrequency.MONTHLY,
        verbose_name=_('Meeting Frequency')
    )
    quorum_requirement = models.PositiveSmallIntegerField(
        default=3,
        verbose_name=_('Quorum Requirement'),
        help_text=_('Minimum number of voting members present for decisions.')
    )

    class Meta:
        verbose_name = _('Committee')
        verbose_name_plural = _('Committees')
        ordering = ['name_en']

    def __str__(self) -> str:
        return f"{self.code} - {self.name_en}"

    def voting_members(self):
        """Active members with voting rights."""
        return self.members.filter(is_active=True, voting_rights=True)


class CommitteeMember(TimeStampedMixin):
    """Membership of a user in a committee."""

    committee = models.ForeignKey(
        Committee,
        on_delete=models.CASCADE,
        related_name='members',
        verbose_name=_('Committee')
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='committee_memberships',
        verbose_name=_('User')
    )
    role_in_committee = models.CharField(
        max_length=20,
        choices=MemberRole.choices,
        default=MemberRole.MEMBER,
        verbose_name=_('Role in Committee')
    )
    position = models.CharField(max_length=100, blank=True, verbose_name=_('Position'))
    department = models.CharField(max_length=100, blank=True, verbose_name=_('Department'))
    join_date = models.DateField(default=timezone.localdate, verbose_name=_('Join Date'))
    end_date = models.DateField(null=True, blank=True, verbose_name=_('End Date'))
    voting_rights = models.BooleanField(default=True, verbose_name=_('Voting Rights'))
    is_active = models.BooleanField(default=True, verbose_name=_('Is Active'))

    class Meta:
        verbose_name = _('Committee Member')
        verbose_name_plural = _('Committee Members')
        ordering = ['committee', 'role_in_committee', 'user__first_name']
        unique_together = ['committee', 'user']

    def __str__(self) -> str:
        return f"{self.user.get_full_name()} ({self.get_role_in_committee_display()})"

    @property
    def is_chair(self) -> bool:
        return self.role_in_committee == MemberRole.CHAIR


class CommitteeMeeting(AuditLogMixin):
    """
    Scheduled meeting of a committee.

    The meeting code (MTG-<committee code>-0001) is generated on first save.
    """

    committee = models.ForeignKey(
        Committee,
        on_delete=models.CASCADE,
        related_name='meetings',
        verbose_name=_('Committee')
    )
    meeting_code = models.CharField(
        max_length=40,
        unique=True,
        editable=False,
        verbose_name=_('Meeting Code')
    )
    title = models.CharField(max_length=200, verbose_name=_('Title'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    meeting_date = models.DateField(verbose_name=_('Meeting Date'))
    start_time = models.TimeField(verbose_name=_('Start Time'))
    end_time = models.TimeField(null=True, blank=True, verbose_name=_('End Time'))
    location = models.CharField(max_length=200, blank=True, verbose_name=_('Location'))
    is_virtual = models.BooleanField(default=False, verbose_name=_('Virtual Meeting'))
    meeting_link = models.URLField(blank=True, verbose_name=_('Meeting Link'))
    status = models.CharField(
        max_length=20,
        choices=MeetingStatus.choices,
        default=MeetingStatus.SCHEDULED,
        verbose_name=_('Status')
    )
    attendees = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='attended_meetings',
        verbose_name=_('Attendees')
    )
    minutes = models.TextField(blank=True, verbose_name=_('Minutes'))
    quorum_met = models.BooleanField(null=True, blank=True, verbose_name=_('Quorum Met'))
    next_meeting_date = models.DateField(null=True, blank=True, verbose_name=_('Next Meeting Date'))

    class Meta:
        verbose_name = _('Committee Meeting')
        verbose_name_plural = _('Committee Meetings')
        ordering = ['-meeting_date', '-start_time']

    def __str__(self) -> str:
        return f"{self.meeting_code} - {self.title}"

    def save(self, *args, **kwargs):
        if not self.meeting_code:
            self.meeting_code = next_sequence_code(
                CommitteeMeeting.objects.all(),
                'meeting_code',
                f"MTG-{self.committee.code}-",
                width=4
            )
        super().save(*args, **kwargs)


class AgendaItem(TimeStampedMixin):
    """Item on the agenda of a meeting, optionally linked to a submission."""

    meeting = models.ForeignKey(
        CommitteeMeeting,
        on_delete=models.CASCADE,
        related_name='agenda_items',
        verbose_name=_('Meeting')
    )
    title = models.CharField(max_length=200, verbose_name=_('Title'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    presenter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='presented_agenda_items',
        verbose_name=_('Presenter')
    )
    duration_minutes = models.PositiveSmallIntegerField(default=15, verbose_name=_('Duration (minutes)'))
    order = models.PositiveSmallIntegerField(default=0, verbose_name=_('Order'))
    status = models.CharField(
        max_length=20,
        choices=AgendaItemStatus.choices,
        default=AgendaItemStatus.PENDING,
        verbose_name=_('Status')
    )
    notes = models.TextField(blank=True, verbose_name=_('Notes'))
    submission = models.ForeignKey(
        'CommitteeSubmission',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='agenda_items',
        verbose_name=_('Submission')
    )

    class Meta:
        verbose_name = _('Agenda Item')
        verbose_name_plural = _('Agenda Items')
        ordering = ['meeting', 'order', 'id']

    def __str__(self) -> str:
        return f"{self.order}. {self.title}"


class CommitteeSubmission(AuditLogMixin, ClientScopedMixin):
    """
    Item submitted to a committee for a decision, e.g. an assessment
    or a funding request for a beneficiary.
    """

    committee = models.ForeignKey(
        Committee,
        on_delete=models.PROTECT,
        related_name='submissions',
        verbose_name=_('Committee')
    )
    title = models.CharField(max_length=200, verbose_name=_('Title'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    submission_type = models.CharField(
        max_length=20,
        choices=SubmissionType.choices,
        default=SubmissionType.OTHER,
        verbose_name=_('Submission Type')
    )
    priority = models.CharField(
        max_length=10,
        choices=SubmissionPriority.choices,
        default=SubmissionPriority.MEDIUM,
        verbose_name=_('Priority')
    )
    status = models.CharField(
        max_length=20,
        choices=SubmissionStatus.choices,
        default=SubmissionStatus.PENDING,
        verbose_name=_('Status')
    )
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='committee_submissions',
        verbose_name=_('Submitted By')
    )
    submission_date = models.DateTimeField(default=timezone.now, verbose_name=_('Submission Date'))
    due_date = models.DateField(null=True, blank=True, verbose_name=_('Due Date'))
    beneficiary = models.ForeignKey(
        'beneficiaries.Beneficiary',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='committee_submissions',
        verbose_name=_('Beneficiary')
    )
    related_entity_type = models.CharField(max_length=50, blank=True, verbose_name=_('Related Entity Type'))
    related_entity_id = models.CharField(max_length=50, blank=True, verbose_name=_('Related Entity ID'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    class Meta:
        verbose_name = _('Committee Submission')
        verbose_name_plural = _('Committee Submissions')
        ordering = ['-submission_date']
        indexes = [
            models.Index(fields=['status', 'priority'], name='committee_sub_status_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.get_status_display()})"

    @property
    def workflow_entity_id(self) -> str:
        """Entity that workflow follow-ups act on."""
        return self.related_entity_id or str(self.pk)


class CommitteeDecision(TimeStampedMixin):
    """Decision taken by a committee on a submission."""

    committee = models.ForeignKey(
        Committee,
        on_delete=models.PROTECT,
        related_name='decisions',
        verbose_name=_('Committee')
    )
    meeting = models.ForeignKey(
        CommitteeMeeting,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decisions',
        verbose_name=_('Meeting')
    )
    submission = models.ForeignKey(
        CommitteeSubmission,
        on_delete=models.PROTECT,
        related_name='decisions',
        verbose_name=_('Submission')
    )
    title = models.CharField(max_length=200, verbose_name=_('Title'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    decision = models.CharField(
        max_length=20,
        choices=DecisionValue.choices,
        verbose_name=_('Decision')
    )
    decision_date = models.DateField(default=timezone.localdate, verbose_name=_('Decision Date'))
    rationale = models.TextField(blank=True, verbose_name=_('Rationale'))
    conditions = models.TextField(blank=True, verbose_name=_('Conditions'))
    votes_for = models.PositiveSmallIntegerField(default=0, verbose_name=_('Votes For'))
    votes_against = models.PositiveSmallIntegerField(default=0, verbose_name=_('Votes Against'))
    votes_abstain = models.PositiveSmallIntegerField(default=0, verbose_name=_('Abstentions'))
    follow_up_required = models.BooleanField(default=False, verbose_name=_('Follow-up Required'))
    follow_up_date = models.DateField(null=True, blank=True, verbose_name=_('Follow-up Date'))
    follow_up_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_decision_follow_ups',
        verbose_name=_('Follow-up Assignee')
    )
    next_review_date = models.DateField(null=True, blank=True, verbose_name=_('Next Review Date'))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='committee_decisions',
        verbose_name=_('Decided By')
    )

    class Meta:
        verbose_name = _('Committee Decision')
        verbose_name_plural = _('Committee Decisions')
        ordering = ['-decision_date', '-created_at']

    def __str__(self) -> str:
        return f"{self.title} - {self.get_decision_display()}"


class SubmissionVote(TimeStampedMixin):
    """Vote of a committee member on a submission. One vote per member."""

    submission = models.ForeignKey(
        CommitteeSubmission,
        on_delete=models.CASCADE,
        related_name='votes',
        verbose_name=_('Submission')
    )
    member = models.ForeignKey(
        CommitteeMember,
        on_delete=models.PROTECT,
        related_name='votes',
        verbose_name=_('Member')
    )
    vote = models.CharField(max_length=10, choices=VoteChoice.choices, verbose_name=_('Vote'))
    comments = models.TextField(blank=True, verbose_name=_('Comments'))

    class Meta:
        verbose_name = _('Submission Vote')
        verbose_name_plural = _('Submission Votes')
        unique_together = ['submission', 'member']

    def __str__(self) -> str:
        return f"{self.member} - {self.get_vote_display()}"
