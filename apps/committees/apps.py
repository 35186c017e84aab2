"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Committees app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class CommitteesConfig(AppConfig):
    """Configuration for the committees application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.committees'
    verbose_name = 'Committee Management'
