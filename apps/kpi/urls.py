"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: URL configuration for the KPI API.
-------------------------------------------------------------------------
"""
from django.urls import path
from apps.kpi.views import (
    DashboardListView,
    DashboardDetailView,
    MetricListView,
    MetricDetailView,
    DataPointCreateView,
    AlertListView,
    ActiveAlertListView,
    UtilizationReportListView,
    UtilizationReportDetailView,
)

app_name = 'kpi'

urlpatterns = [
    # Dashboards
    path('dashboards/', DashboardListView.as_view(), name='dashboard_list'),
    path('dashboards/<int:pk>/', DashboardDetailView.as_view(), name='dashboard_detail'),

    # Metrics
    path('metrics/', MetricListView.as_view(), name='metric_list'),
    path('metrics/<int:pk>/', MetricDetailView.as_view(), name='metric_detail'),
    path('metrics/<int:pk>/data-points/', DataPointCreateView.as_view(), name='data_point_create'),

    # Alerts
    path('alerts/', AlertListView.as_view(), name='alert_list'),
    path('alerts/active/', ActiveAlertListView.as_view(), name='active_alerts'),

    # Utilization snapshots
    path('utilization-reports/', UtilizationReportListView.as_view(), name='utilization_report_list'),
    path('utilization-reports/<int:pk>/', UtilizationReportDetailView.as_view(), name='utilization_report_detail'),
]
