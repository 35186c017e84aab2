"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Users app initialization. Handles authentication and RBAC.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.users.apps.UsersConfig'
