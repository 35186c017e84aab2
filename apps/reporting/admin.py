"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for report templates, schedules
             and generated reports.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import AuditedAdmin
from apps.reporting.models import ReportTemplate, ReportSchedule, GeneratedReport
from apps.reporting.services import ReportingEngine


class ReportScheduleInline(admin.TabularInline):
    model = ReportSchedule
    extra = 0
    fields = ['name', 'frequency', 'time_of_day', 'format', 'is_active', 'next_run']
    readonly_fields = ['next_run']


@admin.register(ReportTemplate)
class ReportTemplateAdmin(AuditedAdmin):
    list_display = ['code', 'name', 'client_type', 'data_source', 'default_format', 'version', 'is_active']
    list_filter = ['client_type', 'default_format', 'is_active']
    search_fields = ['code', 'name', 'description']
    inlines = [ReportScheduleInline]
    readonly_fields = ['version', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'description', 'client_type', 'author', 'version', 'is_active')
        }),
        (_('Content'), {
            'fields': ('data_source', 'default_format', 'parameters', 'metrics', 'sections')
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )


@admin.register(ReportSchedule)
class ReportScheduleAdmin(AuditedAdmin):
    list_display = ['__str__', 'template', 'frequency', 'format', 'client_type', 'is_active', 'last_run', 'next_run']
    list_filter = ['frequency', 'format', 'client_type', 'is_active']
    search_fields = ['name', 'template__code', 'template__name']
    readonly_fields = ['last_run', 'next_run', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    def save_model(self, request, obj, form, change):
        obj.next_run = ReportingEngine.calculate_next_run(obj) if obj.is_active else None
        super().save_model(request, obj, form, change)


@admin.register(GeneratedReport)
class GeneratedReportAdmin(admin.ModelAdmin):
    list_display = ['filename', 'template', 'format', 'row_count', 'schedule', 'generated_by', 'generated_at']
    list_filter = ['format', 'template']
    search_fields = ['filename', 'template__code']
    readonly_fields = ['template', 'schedule', 'format', 'filename', 'file', 'row_count',
                       'parameters', 'generated_by', 'generated_at']
    date_hierarchy = 'generated_at'
