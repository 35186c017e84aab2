"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL configuration for the committee API.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.committees.views import (
    CommitteeListView,
    CommitteeDetailView,
    CommitteeMemberListView,
    CommitteeMemberDetailView,
    CommitteeMeetingListView,
    MeetingDetailView,
    MeetingTransitionView,
    AgendaItemListView,
    SubmissionListView,
    PendingSubmissionListView,
    SubmissionDetailView,
    SubmissionVoteView,
    SubmissionDecisionView,
    SubmissionReopenView,
    DecisionListView,
)

app_name = 'committees'

urlpatterns = [
    # Committees
    path('', CommitteeListView.as_view(), name='committee_list'),
    path('<int:pk>/', CommitteeDetailView.as_view(), name='committee_detail'),
    path('<int:pk>/members/', CommitteeMemberListView.as_view(), name='member_list'),
    path('<int:pk>/members/<int:member_id>/', CommitteeMemberDetailView.as_view(), name='member_detail'),
    path('<int:pk>/meetings/', CommitteeMeetingListView.as_view(), name='meeting_list'),

    # Meetings
    path('meetings/<int:pk>/', MeetingDetailView.as_view(), name='meeting_detail'),
    path('meetings/<int:pk>/agenda/', AgendaItemListView.as_view(), name='agenda_list'),
    path('meetings/<int:pk>/<slug:action>/', MeetingTransitionView.as_view(), name='meeting_transition'),

    # Submissions
    path('submissions/', SubmissionListView.as_view(), name='submission_list'),
    path('submissions/pending/', PendingSubmissionListView.as_view(), name='submission_pending'),
    path('submissions/<int:pk>/', SubmissionDetailView.as_view(), name='submission_detail'),
    path('submissions/<int:pk>/votes/', SubmissionVoteView.as_view(), name='submission_votes'),
    path('submissions/<int:pk>/decision/', SubmissionDecisionView.as_view(), name='submission_decision'),
    path('submissions/<int:pk>/reopen/', SubmissionReopenView.as_view(), name='submission_reopen'),

    # Decisions
    path('decisions/', DecisionListView.as_view(), name='decision_list'),
]
