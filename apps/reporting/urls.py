"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL configuration for the reporting API.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.reporting.views import (
    TemplateListView,
    TemplateDetailView,
    GenerateReportView,
    ScheduleListView,
    ScheduleDetailView,
    GeneratedReportListView,
    GeneratedReportDownloadView,
)

app_name = 'reporting'

urlpatterns = [
    # Templates
    path('templates/', TemplateListView.as_view(), name='template_list'),
    path('templates/<slug:code>/', TemplateDetailView.as_view(), name='template_detail'),
    path('templates/<slug:code>/generate/', GenerateReportView.as_view(), name='generate'),

    # Schedules
    path('schedules/', ScheduleListView.as_view(), name='schedule_list'),
    path('schedules/<int:pk>/', ScheduleDetailView.as_view(), name='schedule_detail'),

    # Generated report history
    path('generated/', GeneratedReportListView.as_view(), name='generated_list'),
    path('generated/<int:pk>/download/', GeneratedReportDownloadView.as_view(), name='generated_download'),
]
