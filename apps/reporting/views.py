"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reporting API views: report templates, on-demand generation,
             recurring schedules and the generated report history.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from django.db.models import Q
from django.forms.models import model_to_dict
from django.http import HttpResponse
from django.shortcuts import get_object_or_404

from apps.clients.models import ClientType
from apps.core.api import ApiView, json_response, paginate, parse_int_param
from apps.core.exports import file_response
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.reporting.forms import ReportTemplateForm, ReportScheduleForm, GenerateReportForm
from apps.reporting.models import ReportTemplate, ReportSchedule, GeneratedReport
from apps.reporting.services import ReportingEngine, CONTENT_TYPES
from apps.users.models import RoleCode

REPORT_ROLES = (RoleCode.SENIOR_MANAGEMENT, RoleCode.PROGRAM_MANAGER, RoleCode.FINANCE_OFFICER)


def serialize_template(template: ReportTemplate, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': template.pk,
        'code': template.code,
        'name': template.name,
        'description': template.description,
        'client_type': template.client_type.code if template.client_type_id else None,
        'default_format': template.default_format,
        'parameters': template.parameters,
        'data_source': template.data_source,
        'version': template.version,
        'is_active': template.is_active,
    }
    if detail:
        data.update({
            'metrics': template.metrics,
            'sections': template.sections,
            'author': template.author,
            'updated_at': template.updated_at,
        })
    return data


def serialize_schedule(schedule: ReportSchedule) -> Dict[str, Any]:
    return {
        'id': schedule.pk,
        'template': schedule.template.code,
        'name': str(schedule),
        'parameters': schedule.parameters,
        'frequency': schedule.frequency,
        'time_of_day': schedule.time_of_day,
        'day_of_week': schedule.day_of_week,
        'day_of_month': schedule.day_of_month,
        'format': schedule.format,
        'recipients': schedule.recipients,
        'client_type': schedule.client_type.code if schedule.client_type_id else None,
        'is_active': schedule.is_active,
        'last_run': schedule.last_run,
        'next_run': schedule.next_run,
    }


def serialize_generated(report: GeneratedReport) -> Dict[str, Any]:
    return {
        'id': report.pk,
        'template': report.template.code,
        'schedule': report.schedule_id,
        'format': report.format,
        'filename': report.filename,
        'row_count': report.row_count,
        'parameters': report.parameters,
        'generated_by': report.generated_by.get_full_name() if report.generated_by else None,
        'generated_at': report.generated_at,
    }


def changed_fields(original, instance, fields):
    """Names of the fields whose stored value differs between two instances."""
    attnames = [instance._meta.get_field(name).attname for name in fields]
    return [
        name for name, attname in zip(fields, attnames)
        if getattr(original, attname) != getattr(instance, attname)
    ]


class TemplateScopeMixin:
    """Generic templates plus those of the user's client type."""

    def scope_templates(self, queryset, field='client_type'):
        client_type = getattr(self.request, 'client_type', None)
        if client_type is None:
            return queryset
        return queryset.filter(Q(**{f'{field}__isnull': True}) | Q(**{field: client_type}))


# =====================================================================
# TEMPLATES
# =====================================================================

class TemplateListView(TemplateScopeMixin, ApiView):
    """GET: active templates (?client_type=<code>). POST: create a template."""

    required_roles = REPORT_ROLES

    def get(self, request):
        code = request.GET.get('client_type')
        if code:
            queryset = ReportingEngine.get_client_specific_templates(
                get_object_or_404(ClientType, code=code)
            )
        else:
            queryset = ReportingEngine.get_available_templates()
        queryset = self.scope_templates(queryset)
        return json_response({'results': [serialize_template(t) for t in queryset]})

    def post(self, request):
        form = ReportTemplateForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        template = form.save(commit=False)
        if not template.author:
            template.author = request.user.get_full_name()
        template.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, template,
                            description=f"Report template {template.code} created")
        return json_response(serialize_template(template, detail=True), status=201)


class TemplateDetailView(TemplateScopeMixin, ApiView):
    """GET: template definition. PATCH: update it, bumping the version."""

    required_roles = REPORT_ROLES

    def get_template(self, code) -> ReportTemplate:
        return get_object_or_404(self.scope_templates(ReportTemplate.objects.all()), code=code)

    def get(self, request, code):
        return json_response(serialize_template(self.get_template(code), detail=True))

    def patch(self, request, code):
        template = self.get_template(code)
        original = ReportTemplate.objects.get(pk=template.pk)
        data = model_to_dict(template, fields=ReportTemplateForm.Meta.fields)
        data['client_type'] = template.client_type.code if template.client_type_id else None
        data.update(self.get_json())
        form = ReportTemplateForm(data=data, instance=template)
        if not form.is_valid():
            return self.form_errors(form)
        template = form.save(commit=False)
        changed = changed_fields(original, template, ReportTemplateForm.Meta.fields)
        if changed:
            template.version += 1
            template.save_with_user(request.user)
            AuditService.record(request.user, AuditAction.UPDATED, template,
                                changes={'fields': changed, 'version': template.version})
        return json_response(serialize_template(template, detail=True))


class GenerateReportView(TemplateScopeMixin, ApiView):
    """POST {"format": "CSV", "parameters": {...}}: generate and download a report."""

    required_roles = REPORT_ROLES

    def post(self, request, code):
        template = ReportingEngine.get_template(code)
        get_object_or_404(self.scope_templates(ReportTemplate.objects.all()), pk=template.pk)

        form = GenerateReportForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)

        report = ReportingEngine.generate_report(
            template,
            form.cleaned_data['parameters'],
            form.cleaned_data.get('format') or None,
            user=request.user,
            client_type=getattr(request, 'client_type', None) or form.cleaned_data.get('client_type'),
        )
        return download(report)


def download(report: GeneratedReport):
    with report.file.open('rb') as handle:
        content = handle.read()
    return file_response(content, report.filename, CONTENT_TYPES[report.format])


# =====================================================================
# SCHEDULES
# =====================================================================

class ScheduleListView(ApiView):
    """GET: schedules (?template=<code>, ?active=true). POST: create a schedule."""

    required_roles = REPORT_ROLES

    def get(self, request):
        queryset = self.scope_queryset(ReportSchedule.objects.select_related('template', 'client_type'))
        if request.GET.get('template'):
            queryset = queryset.filter(template__code=request.GET['template'])
        if request.GET.get('active') in ('true', '1'):
            queryset = queryset.filter(is_active=True)
        return json_response(paginate(queryset, request, serialize_schedule))

    def post(self, request):
        form = ReportScheduleForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        schedule = form.save(commit=False)
        if request.client_type is not None:
            schedule.client_type = request.client_type
        schedule = ReportingEngine.schedule_report(request.user, schedule)
        return json_response(serialize_schedule(schedule), status=201)


class ScheduleDetailView(ApiView):
    """GET, PATCH or DELETE one schedule."""

    required_roles = REPORT_ROLES

    def get_schedule(self, pk) -> ReportSchedule:
        return get_object_or_404(self.scope_queryset(ReportSchedule.objects.select_related('template')), pk=pk)

    def get(self, request, pk):
        return json_response(serialize_schedule(self.get_schedule(pk)))

    def patch(self, request, pk):
        schedule = self.get_schedule(pk)
        data = model_to_dict(schedule, fields=ReportScheduleForm.Meta.fields)
        data['template'] = schedule.template.code
        data['client_type'] = schedule.client_type.code if schedule.client_type_id else None
        data.update(self.get_json())

        # Validate against a copy so the instance keeps its stored values
        form = ReportScheduleForm(data=data, instance=ReportSchedule.objects.get(pk=schedule.pk))
        if not form.is_valid():
            return self.form_errors(form)

        # update_schedule only applies the values that differ
        fields = {name: form.cleaned_data[name] for name in ReportScheduleForm.Meta.fields}
        if request.client_type is not None:
            fields.pop('client_type', None)
        schedule = ReportingEngine.update_schedule(request.user, schedule, **fields)
        return json_response(serialize_schedule(schedule))

    def delete(self, request, pk):
        ReportingEngine.delete_schedule(request.user, self.get_schedule(pk))
        return HttpResponse(status=204)


# =====================================================================
# GENERATED REPORTS
# =====================================================================

class GeneratedReportListView(TemplateScopeMixin, ApiView):
    """GET: generated report history (?template=<code>, ?schedule=<id>)."""

    required_roles = REPORT_ROLES

    def get(self, request):
        queryset = self.scope_templates(
            GeneratedReport.objects.select_related('template', 'generated_by'),
            field='template__client_type'
        )
        if request.GET.get('template'):
            queryset = queryset.filter(template__code=request.GET['template'])
        schedule_id = parse_int_param(request.GET.get('schedule'), 'schedule')
        if schedule_id is not None:
            queryset = queryset.filter(schedule_id=schedule_id)
        return json_response(paginate(queryset, request, serialize_generated))


class GeneratedReportDownloadView(TemplateScopeMixin, ApiView):

    required_roles = REPORT_ROLES

    def get(self, request, pk):
        queryset = self.scope_templates(
            GeneratedReport.objects.select_related('template'), field='template__client_type'
        )
        return download(get_object_or_404(queryset, pk=pk))
