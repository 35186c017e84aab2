"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiaries app initialization. Senior citizen
             registration, family members and case status tracking.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.beneficiaries.apps.BeneficiariesConfig'
