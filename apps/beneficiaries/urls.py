"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL routing for the beneficiary API.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.beneficiaries.views import (
    BeneficiaryListView,
    BeneficiaryDetailView,
    BeneficiaryStatusView,
    BeneficiaryHistoryView,
    BeneficiarySummaryView,
    BeneficiaryExportView,
    FamilyMemberListView,
    FamilyMemberDetailView,
)

app_name = 'beneficiaries'

urlpatterns = [
    path('', BeneficiaryListView.as_view(), name='beneficiary_list'),
    path('summary/', BeneficiarySummaryView.as_view(), name='beneficiary_summary'),
    path('export/', BeneficiaryExportView.as_view(), name='beneficiary_export'),
    path('<int:pk>/', BeneficiaryDetailView.as_view(), name='beneficiary_detail'),
    path('<int:pk>/status/', BeneficiaryStatusView.as_view(), name='beneficiary_status'),
    path('<int:pk>/history/', BeneficiaryHistoryView.as_view(), name='beneficiary_history'),
    path('<int:pk>/family-members/', FamilyMemberListView.as_view(), name='family_member_list'),
    path('<int:pk>/family-members/<int:member_id>/', FamilyMemberDetailView.as_view(), name='family_member_detail'),
]
