"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Clients app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class ClientsConfig(AppConfig):
    """Configuration for the clients application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.clients'
    verbose_name = 'Client Types & Business Rules'
