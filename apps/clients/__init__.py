"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Clients app initialization. Client types (FDF, ADHA, Cash)
             and their business rules.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.clients.apps.ClientsConfig'
