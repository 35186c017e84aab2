"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for committees, meetings,
             submissions and decisions.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.committees.models import (
    Committee, CommitteeMember, CommitteeMeeting, AgendaItem,
    CommitteeSubmission, CommitteeDecision, SubmissionVote,
)
from apps.core.admin import AuditedAdmin


class CommitteeMemberInline(admin.TabularInline):
    model = CommitteeMember
    extra = 0
    fields = ['user', 'role_in_committee', 'position', 'join_date', 'end_date', 'voting_rights', 'is_active']
    autocomplete_fields = ['user']


class AgendaItemInline(admin.TabularInline):
    model = AgendaItem
    extra = 0
    fields = ['order', 'title', 'presenter', 'duration_minutes', 'status', 'submission']


class SubmissionVoteInline(admin.TabularInline):
    model = SubmissionVote
    extra = 0
    fields = ['member', 'vote', 'comments']
    readonly_fields = ['member', 'vote', 'comments']
    can_delete = False


@admin.register(Committee)
class CommitteeAdmin(AuditedAdmin):
    list_display = ['code', 'name_en', 'committee_type', 'client_type', 'chairperson',
                    'meeting_frequency', 'quorum_requirement', 'is_active']
    list_filter = ['committee_type', 'client_type', 'meeting_frequency', 'is_active']
    search_fields = ['code', 'name_en', 'name_ar']
    inlines = [CommitteeMemberInline]
    readonly_fields = ['public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = (
        (None, {
            'fields': ('code', 'name_en', 'name_ar', 'description', 'committee_type', 'client_type')
        }),
        (_('Governance'), {
            'fields': ('chairperson', 'formation_date', 'dissolution_date',
                       'meeting_frequency', 'quorum_requirement', 'is_active')
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )


@admin.register(CommitteeMeeting)
class CommitteeMeetingAdmin(AuditedAdmin):
    list_display = ['meeting_code', 'committee', 'title', 'meeting_date', 'start_time', 'status', 'quorum_met']
    list_filter = ['status', 'committee', 'is_virtual']
    search_fields = ['meeting_code', 'title']
    date_hierarchy = 'meeting_date'
    filter_horizontal = ['attendees']
    inlines = [AgendaItemInline]
    readonly_fields = ['meeting_code', 'quorum_met', 'created_at', 'updated_at', 'created_by', 'updated_by']


@admin.register(CommitteeSubmission)
class CommitteeSubmissionAdmin(AuditedAdmin):
    list_display = ['id', 'title', 'committee', 'submission_type', 'priority', 'status',
                    'submitted_by', 'submission_date', 'due_date']
    list_filter = ['status', 'submission_type', 'priority', 'committee', 'client_type']
    search_fields = ['title', 'description', 'beneficiary__beneficiary_code']
    raw_id_fields = ['beneficiary']
    inlines = [SubmissionVoteInline]
    readonly_fields = ['status', 'created_at', 'updated_at', 'created_by', 'updated_by']


@admin.register(CommitteeDecision)
class CommitteeDecisionAdmin(admin.ModelAdmin):
    """Decisions are recorded through the service; the admin is read-only."""

    list_display = ['title', 'committee', 'decision', 'decision_date', 'votes_for',
                    'votes_against', 'votes_abstain', 'created_by']
    list_filter = ['decision', 'committee', 'follow_up_required']
    search_fields = ['title', 'rationale']
    date_hierarchy = 'decision_date'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
