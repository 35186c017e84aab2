"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reporting app initialization. Report templates, scheduled
             generation and the history of generated reports.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.reporting.apps.ReportingConfig'
