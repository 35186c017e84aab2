"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL routing for client types and business rules.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.clients.views import (
    ClientTypeListView,
    ClientTypeDetailView,
    BusinessRuleListView,
    BusinessRuleDetailView,
    RuleEvaluationView,
)

app_name = 'clients'

urlpatterns = [
    path('types/', ClientTypeListView.as_view(), name='client_type_list'),
    path('types/<str:identifier>/', ClientTypeDetailView.as_view(), name='client_type_detail'),
    path('rules/', BusinessRuleListView.as_view(), name='rule_list'),
    path('rules/evaluate/', RuleEvaluationView.as_view(), name='rule_evaluate'),
    path('rules/<slug:code>/', BusinessRuleDetailView.as_view(), name='rule_detail'),
]
