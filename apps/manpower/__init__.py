"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Manpower app initialization. Staff and contractor
             resources, skills, allocations, timesheets and forecasts.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.manpower.apps.ManpowerConfig'
