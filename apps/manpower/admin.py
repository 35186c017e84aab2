"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for manpower resources,
             projects, allocations, timesheets and forecasts.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import AuditedAdmin
from apps.manpower.models import (
    Skill, ManpowerResource, ResourceSkill, Availability, Project, ResourceAllocation,
    Timesheet, ResourceForecast,
)


class ResourceSkillInline(admin.TabularInline):
    model = ResourceSkill
    extra = 0
    fields = ['skill', 'proficiency', 'certifications', 'last_used']


class AvailabilityInline(admin.TabularInline):
    model = Availability
    extra = 0
    fields = ['availability_type', 'start_date', 'end_date', 'project', 'notes']


@admin.register(Skill)
class SkillAdmin(admin.ModelAdmin):
    list_display = ['name', 'category']
    list_filter = ['category']
    search_fields = ['name']


@admin.register(ManpowerResource)
class ManpowerResourceAdmin(AuditedAdmin):
    list_display = ['name', 'role', 'department', 'is_contractor', 'company_name',
                    'contract_end_date', 'weekly_capacity_hours', 'is_active']
    list_filter = ['department', 'is_contractor', 'is_active']
    search_fields = ['name', 'role', 'company_name', 'contract_number']
    inlines = [ResourceSkillInline, AvailabilityInline]
    readonly_fields = ['public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = (
        (None, {
            'fields': ('user', 'name', 'role', 'department', 'email', 'phone', 'is_active')
        }),
        (_('Capacity'), {
            'fields': ('hourly_rate', 'weekly_capacity_hours')
        }),
        (_('Contract'), {
            'fields': ('is_contractor', 'company_name', 'contract_number', 'contract_start_date',
                       'contract_end_date', 'contact_person', 'contact_email', 'contact_phone'),
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Project)
class ProjectAdmin(AuditedAdmin):
    list_display = ['code', 'name', 'beneficiary', 'client_type', 'status', 'start_date', 'end_date']
    list_filter = ['status', 'client_type']
    search_fields = ['code', 'name']
    readonly_fields = ['public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']


@admin.register(ResourceAllocation)
class ResourceAllocationAdmin(AuditedAdmin):
    list_display = ['resource', 'project', 'start_date', 'end_date', 'allocation_percentage', 'status']
    list_filter = ['status']
    search_fields = ['resource__name', 'project__code']
    date_hierarchy = 'start_date'


@admin.register(Timesheet)
class TimesheetAdmin(admin.ModelAdmin):
    list_display = ['resource', 'project', 'date', 'hours', 'billable', 'status', 'approved_by']
    list_filter = ['status', 'billable']
    search_fields = ['resource__name', 'project__code']
    date_hierarchy = 'date'
    readonly_fields = ['submitted_at', 'approved_by', 'approved_at']


@admin.register(ResourceForecast)
class ResourceForecastAdmin(admin.ModelAdmin):
    list_display = ['department', 'period', 'required_resources', 'available_resources',
                    'planned_hiring', 'gap']
    list_filter = ['period', 'department']
