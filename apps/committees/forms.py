"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Forms validating committee API request bodies.
-------------------------------------------------------------------------
"""
from django import forms
from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import Beneficiary
from apps.core.forms import ModelDefaultsFormMixin
from apps.clients.models import ClientType
from apps.committees.models import (
    Committee, CommitteeMember, CommitteeMeeting, CommitteeSubmission, DecisionValue, AgendaItem,
)


class CommitteeForm(ModelDefaultsFormMixin, forms.ModelForm):

    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )

    class Meta:
        model = Committee
        fields = [
            'code', 'name_en', 'name_ar', 'description', 'committee_type', 'client_type',
            'chairperson', 'formation_date', 'dissolution_date', 'meeting_frequency',
            'quorum_requirement', 'is_active',
        ]

    def clean_code(self):
        return (self.cleaned_data.get('code') or '').strip().upper()

    def clean(self):
        cleaned_data = super().clean()
        formation = cleaned_data.get('formation_date')
        dissolution = cleaned_data.get('dissolution_date')
        if formation and dissolution and dissolution < formation:
            self.add_error('dissolution_date', _('Dissolution date cannot be before formation date.'))
        if cleaned_data.get('quorum_requirement') == 0:
            self.add_error('quorum_requirement', _('Quorum must be at least 1.'))
        return cleaned_data


class CommitteeMemberForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = CommitteeMember
        fields = [
            'user', 'role_in_committee', 'position', 'department',
            'join_date', 'end_date', 'voting_rights',
        ]

    def __init__(self, *args, committee=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.committee = committee
        self.fields['user'].queryset = get_user_model().objects.filter(is_active=True)

    def clean(self):
        cleaned_data = super().clean()
        user = cleaned_data.get('user')
        if self.committee is not None and user is not None:
            existing = CommitteeMember.objects.filter(committee=self.committee, user=user)
            if self.instance.pk:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                self.add_error('user', _('This user is already a member of the committee.'))
        join_date = cleaned_data.get('join_date')
        end_date = cleaned_data.get('end_date')
        if join_date and end_date and end_date < join_date:
            self.add_error('end_date', _('End date cannot be before join date.'))
        return cleaned_data


class MeetingForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = CommitteeMeeting
        fields = [
            'title', 'description', 'meeting_date', 'start_time', 'end_time',
            'location', 'is_virtual', 'meeting_link',
        ]

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('is_virtual') and not cleaned_data.get('meeting_link'):
            self.add_error('meeting_link', _('A link is required for virtual meetings.'))
        return cleaned_data


class AgendaItemForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = AgendaItem
        fields = ['title', 'description', 'presenter', 'duration_minutes', 'order', 'notes', 'submission']


class SubmissionForm(ModelDefaultsFormMixin, forms.ModelForm):

    committee = forms.ModelChoiceField(queryset=Committee.objects.filter(is_active=True))
    beneficiary = forms.ModelChoiceField(
        queryset=Beneficiary.objects.filter(is_active=True),
        required=False
    )

    class Meta:
        model = CommitteeSubmission
        fields = [
            'committee', 'title', 'description', 'submission_type', 'priority',
            'due_date', 'beneficiary', 'related_entity_type', 'related_entity_id', 'metadata',
        ]


class DecisionForm(forms.Form):
    """Body of a decision: {"status": "APPROVED", "comments": "...", ...}"""

    status = forms.ChoiceField(choices=DecisionValue.choices)
    comments = forms.CharField(required=False)
    conditions = forms.CharField(required=False)
    rationale = forms.CharField(required=False)
    title = forms.CharField(required=False, max_length=200)
    meeting = forms.ModelChoiceField(queryset=CommitteeMeeting.objects.all(), required=False)
    follow_up_required = forms.BooleanField(required=False)
    follow_up_date = forms.DateField(required=False)
    follow_up_assignee = forms.ModelChoiceField(queryset=None, required=False)
    next_review_date = forms.DateField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['follow_up_assignee'].queryset = get_user_model().objects.filter(is_active=True)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('follow_up_required') and not cleaned_data.get('follow_up_date'):
            self.add_error('follow_up_date', _('A follow-up date is required.'))
        return cleaned_data
