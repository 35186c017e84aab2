"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Manpower API views: resources, skills, availability,
             projects, allocations, timesheets and resource reports.
-------------------------------------------------------------------------
"""
from datetime import timedelta
from typing import Dict, Any

from django.forms.models import model_to_dict
from django.shortcuts import get_object_or_404
from django.utils import timezone

from apps.core.api import ApiView, json_response, paginate, parse_date_param
from apps.core.exceptions import InvalidPayloadException, UnauthorizedRoleException
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.manpower.forms import (
    ResourceForm, SkillForm, ResourceSkillForm, AvailabilityForm, ProjectForm,
    AllocationForm, TimesheetForm, ForecastForm,
)
from apps.manpower.models import (
    ManpowerResource, Skill, ResourceSkill, Availability, Project, ResourceAllocation,
    Timesheet, ResourceForecast,
)
from apps.manpower.services import ManpowerService, TIMESHEET_ACTIONS
from apps.manpower.workflows import get_valid_transitions
from apps.users.models import RoleCode

MANAGER_ROLES = (RoleCode.RESOURCE_MANAGER, RoleCode.PROGRAM_MANAGER)
REPORT_ROLES = (RoleCode.RESOURCE_MANAGER, RoleCode.PROGRAM_MANAGER, RoleCode.SENIOR_MANAGEMENT)


def serialize_resource(resource: ManpowerResource, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': resource.pk,
        'name': resource.name,
        'role': resource.role,
        'department': resource.department,
        'user_id': resource.user_id,
        'is_contractor': resource.is_contractor,
        'company_name': resource.company_name,
        'hourly_rate': resource.hourly_rate,
        'weekly_capacity_hours': resource.weekly_capacity_hours,
        'is_active': resource.is_active,
    }
    if detail:
        data.update({
            'email': resource.email,
            'phone': resource.phone,
            'contract': {
                'number': resource.contract_number,
                'start_date': resource.contract_start_date,
                'end_date': resource.contract_end_date,
                'days_remaining': resource.contract_days_remaining(),
                'contact_person': resource.contact_person,
                'contact_email': resource.contact_email,
                'contact_phone': resource.contact_phone,
            } if resource.is_contractor else None,
            'skills': [serialize_resource_skill(s) for s in resource.resource_skills.select_related('skill')],
        })
    return data


def serialize_skill(skill: Skill) -> Dict[str, Any]:
    return {
        'id': skill.pk,
        'name': skill.name,
        'category': skill.category,
        'description': skill.description,
    }


def serialize_resource_skill(resource_skill: ResourceSkill) -> Dict[str, Any]:
    return {
        'id': resource_skill.pk,
        'skill': resource_skill.skill.name,
        'category': resource_skill.skill.category,
        'proficiency': resource_skill.proficiency,
        'certifications': resource_skill.certifications,
        'last_used': resource_skill.last_used,
    }


def serialize_availability(block: Availability) -> Dict[str, Any]:
    return {
        'id': block.pk,
        'start_date': block.start_date,
        'end_date': block.end_date,
        'availability_type': block.availability_type,
        'project': block.project.code if block.project else None,
        'notes': block.notes,
    }


def serialize_project(project: Project) -> Dict[str, Any]:
    return {
        'id': project.pk,
        'code': project.code,
        'name': project.name,
        'description': project.description,
        'beneficiary': project.beneficiary.beneficiary_code if project.beneficiary else None,
        'client_type': project.client_type.code if project.client_type else None,
        'status': project.status,
        'start_date': project.start_date,
        'end_date': project.end_date,
        'estimated_cost': project.estimated_cost,
    }


def serialize_allocation(allocation: ResourceAllocation) -> Dict[str, Any]:
    return {
        'id': allocation.pk,
        'resource_id': allocation.resource_id,
        'resource': allocation.resource.name,
        'project': allocation.project.code,
        'role': allocation.role,
        'start_date': allocation.start_date,
        'end_date': allocation.end_date,
        'hours_per_day': allocation.hours_per_day,
        'allocation_percentage': allocation.allocation_percentage,
        'status': allocation.status,
    }


def serialize_timesheet(timesheet: Timesheet) -> Dict[str, Any]:
    return {
        'id': timesheet.pk,
        'resource_id': timesheet.resource_id,
        'resource': timesheet.resource.name,
        'project': timesheet.project.code if timesheet.project else None,
        'date': timesheet.date,
        'hours': timesheet.hours,
        'billable': timesheet.billable,
        'description': timesheet.description,
        'status': timesheet.status,
        'submitted_at': timesheet.submitted_at,
        'approved_by': timesheet.approved_by.get_full_name() if timesheet.approved_by else None,
        'approved_at': timesheet.approved_at,
        'rejection_reason': timesheet.rejection_reason,
        'allowed_transitions': get_valid_transitions(timesheet.status),
    }


def serialize_forecast(forecast: ResourceForecast) -> Dict[str, Any]:
    return {
        'id': forecast.pk,
        'department': forecast.department,
        'period': forecast.period,
        'required_resources': forecast.required_resources,
        'available_resources': forecast.available_resources,
        'planned_hiring': forecast.planned_hiring,
        'gap': forecast.gap,
        'notes': forecast.notes,
    }


def _report_period(request):
    """Report period from ?start_date and ?end_date, defaulting to the last 30 days."""
    today = timezone.localdate()
    end_date = parse_date_param(request.GET.get('end_date'), 'end_date') or today
    start_date = parse_date_param(request.GET.get('start_date'), 'start_date') or end_date - timedelta(days=29)
    return start_date, end_date


# =====================================================================
# RESOURCES AND SKILLS
# =====================================================================

class ResourceListView(ApiView):
    """
    GET: resources (department, role, is_contractor, skill, proficiency,
    active, search). POST: create a staff or contractor resource.
    """

    write_roles = MANAGER_ROLES

    def get(self, request):
        queryset = ManpowerService.filter_resources(request.GET.dict())
        return json_response(paginate(queryset, request, serialize_resource))

    def post(self, request):
        data = self.get_json()
        form = ResourceForm(data=data)
        if not form.is_valid():
            return self.form_errors(form)
        resource = form.save(commit=False)
        resource.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, resource,
                            description=f"Resource {resource.name} created")
        return json_response(serialize_resource(resource, detail=True), status=201)


class ResourceDetailView(ApiView):
    """GET details, PATCH updates, DELETE deactivates."""

    write_roles = MANAGER_ROLES

    def get(self, request, pk):
        return json_response(serialize_resource(ManpowerService.get_resource(pk), detail=True))

    def patch(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        data = model_to_dict(resource, fields=ResourceForm.Meta.fields)
        data.update(self.get_json())
        form = ResourceForm(data=data, instance=resource)
        if not form.is_valid():
            return self.form_errors(form)
        changed = form.changed_data
        resource = form.save(commit=False)
        resource.save_with_user(request.user)
        if changed:
            AuditService.record(request.user, AuditAction.UPDATED, resource, changes={'fields': changed})
        return json_response(serialize_resource(resource, detail=True))

    def delete(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        resource.is_active = False
        resource.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.DEACTIVATED, resource,
                            description=f"Resource {resource.name} deactivated")
        return json_response(serialize_resource(resource))


class ResourceSkillListView(ApiView):
    """GET: skills of a resource. POST: {"skill": "<name>", "proficiency": "EXPERT"}."""

    write_roles = MANAGER_ROLES

    def get(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        skills = resource.resource_skills.select_related('skill')
        return json_response({'results': [serialize_resource_skill(s) for s in skills]})

    def post(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        form = ResourceSkillForm(data=self.get_json(), resource=resource)
        if not form.is_valid():
            return self.form_errors(form)
        resource_skill = form.save(commit=False)
        resource_skill.resource = resource
        resource_skill.save()
        return json_response(serialize_resource_skill(resource_skill), status=201)


class ResourceAvailabilityView(ApiView):
    """GET: availability blocks (?date_from, ?date_to). POST: add a block."""

    write_roles = MANAGER_ROLES

    def get(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        blocks = resource.availability.select_related('project')
        date_from = parse_date_param(request.GET.get('date_from'), 'date_from')
        date_to = parse_date_param(request.GET.get('date_to'), 'date_to')
        if date_from:
            blocks = blocks.filter(end_date__gte=date_from)
        if date_to:
            blocks = blocks.filter(start_date__lte=date_to)
        return json_response({'results': [serialize_availability(b) for b in blocks]})

    def post(self, request, pk):
        resource = ManpowerService.get_resource(pk)
        form = AvailabilityForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        block = form.save(commit=False)
        block.resource = resource
        block.save()
        AuditService.record(
            request.user, AuditAction.CREATED, block,
            changes={'type': block.availability_type},
            description=f"{block.get_availability_type_display()} for {resource.name}"
        )
        return json_response(serialize_availability(block), status=201)


class SkillListView(ApiView):

    write_roles = MANAGER_ROLES

    def get(self, request):
        skills = Skill.objects.all()
        category = request.GET.get('category')
        if category:
            skills = skills.filter(category__iexact=category)
        return json_response({'results': [serialize_skill(s) for s in skills]})

    def post(self, request):
        form = SkillForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        skill = form.save()
        return json_response(serialize_skill(skill), status=201)


# =====================================================================
# PROJECTS AND ALLOCATIONS
# =====================================================================

class ProjectListView(ApiView):
    """GET: projects of the user's client type (status, beneficiary, search). POST: create."""

    write_roles = MANAGER_ROLES

    def get(self, request):
        queryset = ManpowerService.get_projects(request.GET.dict(), self.scope_queryset(Project.objects.all()))
        return json_response(paginate(queryset, request, serialize_project))

    def post(self, request):
        form = ProjectForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        project = form.save(commit=False)
        if project.beneficiary is not None:
            project.client_type = project.beneficiary.client_type
        elif project.client_type is None:
            project.client_type = request.user.client_type
        if not request.user.can_access_client_type(project.client_type):
            raise UnauthorizedRoleException(
                "You cannot create projects for another client type.",
                details={'client_type': project.client_type.code}
            )
        project.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, project,
                            description=f"Project {project.code} created")
        return json_response(serialize_project(project), status=201)


class ProjectDetailView(ApiView):

    def get(self, request, pk):
        project = get_object_or_404(self.scope_queryset(Project.objects.select_related('beneficiary')), pk=pk)
        data = serialize_project(project)
        data['allocations'] = [serialize_allocation(a) for a in project.allocations.select_related('resource')]
        return json_response(data)


class AllocationListView(ApiView):
    """
    GET: allocations (resource, project, status, date_from, date_to).
    POST: allocate a resource; 409 on over-allocation or unavailability.
    """

    write_roles = MANAGER_ROLES

    def get(self, request):
        queryset = ManpowerService.filter_allocations(request.GET.dict())
        return json_response(paginate(queryset, request, serialize_allocation))

    def post(self, request):
        form = AllocationForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        allocation = ManpowerService.create_allocation(request.user, **form.cleaned_data)
        return json_response(serialize_allocation(allocation), status=201)


# =====================================================================
# TIMESHEETS
# =====================================================================

class TimesheetAccessMixin:
    """Staff work with their own timesheets; managers with everyone's."""

    def is_manager(self) -> bool:
        user = self.request.user
        return user.is_superuser or user.can_manage_resources() or user.can_approve_timesheets()

    def scope_timesheets(self, queryset):
        if self.is_manager():
            return queryset
        return queryset.filter(resource__user=self.request.user)

    def check_owner(self, resource: ManpowerResource) -> None:
        if not self.is_manager() and resource.user_id != self.request.user.id:
            raise UnauthorizedRoleException(
                "You can only log time for yourself.",
                details={'resource_id': resource.pk}
            )

    def get_timesheet(self, pk) -> Timesheet:
        queryset = self.scope_timesheets(Timesheet.objects.select_related('resource', 'project'))
        return get_object_or_404(queryset, pk=pk)


class TimesheetListView(TimesheetAccessMixin, ApiView):
    """GET: timesheets (resource, project, status, billable, date_from, date_to). POST: log hours."""

    def get(self, request):
        queryset = ManpowerService.filter_timesheets(
            request.GET.dict(), self.scope_timesheets(Timesheet.objects.all())
        )
        return json_response(paginate(queryset, request, serialize_timesheet))

    def post(self, request):
        data = self.get_json()
        form = TimesheetForm(data=data)
        if not form.is_valid():
            return self.form_errors(form)
        self.check_owner(form.cleaned_data['resource'])
        timesheet = ManpowerService.create_timesheet(request.user, **form.cleaned_data)
        return json_response(serialize_timesheet(timesheet), status=201)


class TimesheetDetailView(TimesheetAccessMixin, ApiView):

    def get(self, request, pk):
        return json_response(serialize_timesheet(self.get_timesheet(pk)))

    def patch(self, request, pk):
        timesheet = self.get_timesheet(pk)
        data = model_to_dict(timesheet, fields=TimesheetForm.Meta.fields)
        data['project'] = timesheet.project.code if timesheet.project else None
        data.update(self.get_json())
        data['resource'] = timesheet.resource_id
        form = TimesheetForm(data=data, instance=Timesheet(pk=timesheet.pk, status=timesheet.status))
        if not form.is_valid():
            return self.form_errors(form)
        fields = {name: value for name, value in form.cleaned_data.items() if name != 'resource'}
        timesheet = ManpowerService.update_timesheet(request.user, timesheet, **fields)
        return json_response(serialize_timesheet(timesheet))


class TimesheetTransitionView(TimesheetAccessMixin, ApiView):
    """
    POST submit / approve / reject / reopen.

    Body (optional): {"reason": "..."}
    """

    def post(self, request, pk, action):
        if action not in TIMESHEET_ACTIONS:
            raise InvalidPayloadException(
                f"Unknown timesheet action '{action}'.", details={'allowed': list(TIMESHEET_ACTIONS)}
            )
        timesheet = self.get_timesheet(pk)
        reason = self.get_json().get('reason', '')
        timesheet = ManpowerService.transition_timesheet(
            request.user, timesheet, TIMESHEET_ACTIONS[action], reason=reason
        )
        return json_response(serialize_timesheet(timesheet))


# =====================================================================
# REPORTS
# =====================================================================

class SkillMatrixView(ApiView):

    required_roles = REPORT_ROLES

    def get(self, request):
        return json_response({'results': ManpowerService.get_skill_matrix(request.GET.get('department'))})


class UtilizationReportView(ApiView):
    """Utilization from approved timesheets (?start_date, ?end_date, ?department)."""

    required_roles = REPORT_ROLES

    def get(self, request):
        start_date, end_date = _report_period(request)
        report = ManpowerService.get_utilization_report(
            start_date, end_date, department=request.GET.get('department') or None
        )
        return json_response(report)


class ForecastListView(ApiView):

    required_roles = REPORT_ROLES
    write_roles = MANAGER_ROLES

    def get(self, request):
        forecasts = ManpowerService.get_forecasts(request.GET.get('department'))
        return json_response({'results': [serialize_forecast(f) for f in forecasts]})

    def post(self, request):
        form = ForecastForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        forecast = form.save()
        return json_response(serialize_forecast(forecast), status=201)


class ExpiringContractsView(ApiView):
    """Contractors whose contract ends within ?days (default 30)."""

    required_roles = REPORT_ROLES

    def get(self, request):
        try:
            days = int(request.GET.get('days', 30))
        except (TypeError, ValueError):
            raise InvalidPayloadException("'days' must be a whole number.", details={'field': 'days'})
        resources = ManpowerService.get_expiring_contracts(days=max(0, days))
        return json_response({'results': [serialize_resource(r, detail=True) for r in resources]})
