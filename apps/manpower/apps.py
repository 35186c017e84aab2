"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Manpower app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class ManpowerConfig(AppConfig):
    """Configuration for the manpower application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.manpower'
    verbose_name = 'Manpower Management'
