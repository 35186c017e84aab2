"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: KPI app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class KpiConfig(AppConfig):
    """Configuration for the KPI dashboards application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.kpi'
    verbose_name = 'KPI Dashboards'
