"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Core app initialization. Contains shared mixins, exceptions,
             notifications, the audit trail and JSON API helpers.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.core.apps.CoreConfig'
