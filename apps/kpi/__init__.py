"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: KPI app initialization. Performance metrics, dashboards,
             alerts and resource utilization snapshots.
-------------------------------------------------------------------------
"""
default_app_config = 'apps.kpi.apps.KpiConfig'
