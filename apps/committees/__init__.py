"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Committees app initialization. Review committees, meetings,
             submissions, votes and decisions.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.committees.apps.CommitteesConfig'
