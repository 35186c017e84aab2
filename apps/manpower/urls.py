"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL configuration for the manpower API.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.manpower.views import (
    ResourceListView,
    ResourceDetailView,
    ResourceSkillListView,
    ResourceAvailabilityView,
    SkillListView,
    ProjectListView,
    ProjectDetailView,
    AllocationListView,
    TimesheetListView,
    TimesheetDetailView,
    TimesheetTransitionView,
    SkillMatrixView,
    UtilizationReportView,
    ForecastListView,
    ExpiringContractsView,
)

app_name = 'manpower'

urlpatterns = [
    # Resources
    path('resources/', ResourceListView.as_view(), name='resource_list'),
    path('resources/<int:pk>/', ResourceDetailView.as_view(), name='resource_detail'),
    path('resources/<int:pk>/skills/', ResourceSkillListView.as_view(), name='resource_skills'),
    path('resources/<int:pk>/availability/', ResourceAvailabilityView.as_view(), name='resource_availability'),
    path('skills/', SkillListView.as_view(), name='skill_list'),

    # Projects and allocations
    path('projects/', ProjectListView.as_view(), name='project_list'),
    path('projects/<int:pk>/', ProjectDetailView.as_view(), name='project_detail'),
    path('allocations/', AllocationListView.as_view(), name='allocation_list'),

    # Timesheets
    path('timesheets/', TimesheetListView.as_view(), name='timesheet_list'),
    path('timesheets/<int:pk>/', TimesheetDetailView.as_view(), name='timesheet_detail'),
    path('timesheets/<int:pk>/<slug:action>/', TimesheetTransitionView.as_view(), name='timesheet_transition'),

    # Reports
    path('skill-matrix/', SkillMatrixView.as_view(), name='skill_matrix'),
    path('utilization/', UtilizationReportView.as_view(), name='utilization'),
    path('forecasts/', ForecastListView.as_view(), name='forecast_list'),
    path('contracts/expiring/', ExpiringContractsView.as_view(), name='expiring_contracts'),
]
