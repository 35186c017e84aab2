"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiaries app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class BeneficiariesConfig(AppConfig):
    """Configuration for the beneficiaries application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.beneficiaries'
    verbose_name = 'Beneficiary Management'
