"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for KPI metrics, dashboards,
             alerts and utilization snapshots.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.admin import AuditedAdmin
from apps.kpi.models import KpiMetric, KpiDataPoint, KpiDashboard, KpiAlert, ResourceUtilizationReport
from apps.kpi.services import KpiService


class KpiDataPointInline(admin.TabularInline):
    model = KpiDataPoint
    extra = 0
    fields = ['timestamp', 'value', 'metadata']
    ordering = ['-timestamp']


class KpiAlertInline(admin.TabularInline):
    model = KpiAlert
    extra = 0
    fields = ['condition', 'threshold', 'severity', 'message', 'is_active', 'triggered_at', 'resolved_at']
    readonly_fields = ['triggered_at', 'resolved_at']


@admin.register(KpiMetric)
class KpiMetricAdmin(AuditedAdmin):
    list_display = ['code', 'name', 'category', 'unit', 'target', 'trend', 'source', 'client_type', 'is_active']
    list_filter = ['category', 'trend', 'client_type', 'is_active']
    search_fields = ['code', 'name']
    inlines = [KpiAlertInline, KpiDataPointInline]
    readonly_fields = ['trend', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    actions = ['refresh_selected']

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'description', 'category', 'unit', 'client_type', 'is_active')
        }),
        (_('Thresholds'), {
            'fields': ('target', 'warning_threshold', 'critical_threshold', 'higher_is_better', 'trend')
        }),
        (_('Data Source'), {
            'fields': ('aggregation', 'source', 'source_params')
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    @admin.action(description=_('Refresh selected metrics from their data source'))
    def refresh_selected(self, request, queryset):
        now = timezone.now()
        refreshed = sum(1 for metric in queryset if KpiService.refresh_metric(metric, now) is not None)
        self.message_user(request, _('%(count)d metrics refreshed.') % {'count': refreshed})


@admin.register(KpiDashboard)
class KpiDashboardAdmin(AuditedAdmin):
    list_display = ['code', 'name', 'refresh_interval', 'last_refreshed_at', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    filter_horizontal = ['metrics']
    readonly_fields = ['last_refreshed_at', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    actions = ['refresh_selected']

    @admin.action(description=_('Refresh selected dashboards now'))
    def refresh_selected(self, request, queryset):
        for dashboard in queryset:
            KpiService.refresh_dashboard(dashboard)
        self.message_user(request, _('%(count)d dashboards refreshed.') % {'count': queryset.count()})


@admin.register(KpiAlert)
class KpiAlertAdmin(admin.ModelAdmin):
    list_display = ['metric', 'condition', 'threshold', 'severity', 'is_active', 'triggered_at', 'resolved_at']
    list_filter = ['severity', 'condition', 'is_active']
    search_fields = ['metric__code', 'message']
    filter_horizontal = ['recipients']
    readonly_fields = ['triggered_at', 'resolved_at', 'created_by']


@admin.register(ResourceUtilizationReport)
class ResourceUtilizationReportAdmin(admin.ModelAdmin):
    list_display = ['name', 'start_date', 'end_date', 'department', 'average_utilization',
                    'resources_count', 'generated_by', 'created_at']
    list_filter = ['department']
    search_fields = ['name']
    readonly_fields = ['payload', 'generated_by', 'created_at']
